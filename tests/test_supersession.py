import asyncio

from src.smartroute.errors import RequestSupersededError
from src.smartroute.services.routing.supersession import LatestRequestRunner


def test_newer_request_cancels_the_older_one() -> None:
    async def scenario():
        runner = LatestRequestRunner()
        never = asyncio.Event()

        async def slow() -> str:
            await never.wait()
            return "old"

        async def fast() -> str:
            return "new"

        async def caller() -> str:
            try:
                return await runner.run("session-1", slow())
            except RequestSupersededError:
                return "superseded"

        first = asyncio.create_task(caller())
        await asyncio.sleep(0)
        assert runner.in_flight("session-1")

        second = await runner.run("session-1", fast())
        return await first, second, runner.in_flight("session-1")

    assert asyncio.run(scenario()) == ("superseded", "new", False)


def test_sessions_do_not_interfere() -> None:
    async def scenario():
        runner = LatestRequestRunner()

        async def answer(value: str) -> str:
            await asyncio.sleep(0.01)
            return value

        return await asyncio.gather(runner.run("a", answer("a")), runner.run("b", answer("b")))

    assert asyncio.run(scenario()) == ["a", "b"]


def test_cancelled_caller_cancels_its_task() -> None:
    async def scenario():
        runner = LatestRequestRunner()
        inner_cancelled = asyncio.Event()

        async def slow() -> None:
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                inner_cancelled.set()
                raise

        async def caller() -> str:
            try:
                await runner.run("session-1", slow())
            except RequestSupersededError:
                return "superseded"
            return "finished"

        outer = asyncio.create_task(caller())
        await asyncio.sleep(0.01)
        outer.cancel()
        try:
            await outer
        except asyncio.CancelledError:
            pass
        return outer.cancelled(), inner_cancelled.is_set(), runner.in_flight("session-1")

    assert asyncio.run(scenario()) == (True, True, False)
