"""Exception types shared across routing services."""

from __future__ import annotations

import asyncio


class NoRouteFoundError(ValueError):
    """Neither the road graph nor geometry resolution produced a route."""


class GraphInconsistencyError(RuntimeError):
    """A path references consecutive nodes with no declared road between them."""


class ProviderError(RuntimeError):
    """A geometry provider answered with an error or an unusable payload."""


class RequestSupersededError(asyncio.CancelledError):
    """A newer request for the same client session cancelled this one."""
