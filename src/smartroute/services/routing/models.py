"""Routing result containers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from ...models.domain import Route, Search


@dataclass(slots=True)
class RouteGenerationResult:
    search: Search
    routes: List[Route]  # optimal first, then generation order

    @property
    def optimal(self) -> Route:
        return self.routes[0]
