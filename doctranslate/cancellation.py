import logging
from typing import Awaitable, Callable, List, Optional, TypeVar

import anyio
from starlette.types import Receive

T = TypeVar("T")

DISCONNECTED = "client disconnected"
SHUTTING_DOWN = "host shutting down"

logger = logging.getLogger("DocTranslate.Cancellation")


class RequestCancelled(Exception):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


async def _listen_for_disconnect(receive: Receive, scope: anyio.CancelScope, fired: List[str]):
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            break
    fired.append(DISCONNECTED)
    scope.cancel()


async def _wait_for_shutdown(shutdown, scope: anyio.CancelScope, fired: List[str]):
    await shutdown.wait()
    fired.append(SHUTTING_DOWN)
    scope.cancel()


async def run_cancellable(
    work: Callable[[], Awaitable[T]],
    shutdown,
    receive: Optional[Receive] = None,
) -> T:
    """
    Runs `work()` until it finishes or the request is abandoned.

    The work is cancelled when the shutdown event is set or, if `receive` is
    given, when the client disconnects. Only pass `receive` once the request
    body is fully consumed, since the listener reads from the same channel.
    Raises RequestCancelled in that case; errors from the work are re-raised as is.
    """
    # work that never suspends would otherwise finish before the watchers start
    if shutdown.is_set():
        raise RequestCancelled(SHUTTING_DOWN)

    fired: List[str] = []
    outcome = {}

    async with anyio.create_task_group() as tg:
        tg.start_soon(_wait_for_shutdown, shutdown, tg.cancel_scope, fired)
        if receive is not None:
            tg.start_soon(_listen_for_disconnect, receive, tg.cancel_scope, fired)
        try:
            outcome["result"] = await work()
        except Exception as e:
            # kept out of the task group so callers don't get an ExceptionGroup
            outcome["error"] = e
        tg.cancel_scope.cancel()

    if "error" in outcome:
        raise outcome["error"]
    if "result" not in outcome:
        logger.info(f"Abandoned in-flight work: {fired[0]}")
        raise RequestCancelled(fired[0])
    return outcome["result"]
