"""
Cooperative cancellation for in-flight completions.

A single token is threaded through a whole completion, retries included.
"""

import asyncio


class CancellationToken:
    """Caller-owned signal that aborts a completion.

    cancel() is idempotent and may be called before, during or after
    the completion it was passed to.
    """

    def __init__(self):
        self._event = asyncio.Event()
        self.reason = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled by caller") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    async def wait(self) -> None:
        """Block until the token is cancelled."""
        await self._event.wait()

    async def wait_for(self, delay: float) -> bool:
        """Wait up to `delay` seconds for cancellation.

        Returns:
            True if the token fired before the delay elapsed
        """
        if self.cancelled:
            return True
        try:
            await asyncio.wait_for(self._event.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True

    def cancel_after(self, delay: float) -> asyncio.TimerHandle:
        """Schedule cancellation on the running loop after `delay` seconds."""
        loop = asyncio.get_running_loop()
        return loop.call_later(delay, self.cancel, f"cancelled after {delay}s")
