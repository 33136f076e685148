"""
Polling Synchronizer.

A Poller re-runs one read on a fixed interval for as long as it is mounted
and hands each result to a callback. It approximates live updates without a
push channel: worst-case staleness is one interval, and the last result
delivered wins.

Failure policy: a failed poll is logged and dropped, and the next tick tries
again. No backoff, no error surfaced, no limit on consecutive failures.

Given a ChangeFeed subscription, a publish on its topic triggers the next
poll immediately instead of at the end of the interval.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from edunexus.access.messages import MessageRepository
from edunexus.access.store import Store
from edunexus.config import get_settings
from edunexus.db.models import Message, SystemSettings
from edunexus.services.feed import SETTINGS_TOPIC, Subscription, group_topic

logger = logging.getLogger(__name__)
settings = get_settings()

T = TypeVar("T")


class Poller(Generic[T]):
    """Periodic fetch-and-deliver loop bound to the lifetime of one view."""

    def __init__(
        self,
        name: str,
        fetch: Callable[[], Awaitable[T]],
        deliver: Callable[[T], Any],
        interval: float,
        subscription: Subscription | None = None,
    ):
        self.name = name
        self._fetch = fetch
        self._deliver = deliver
        self.interval = interval
        self._subscription = subscription
        self._task: asyncio.Task | None = None
        self._stopped = False
        self.failures = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> "Poller[T]":
        if self._task is None:
            self._stopped = False
            self._task = asyncio.create_task(self._run(), name=f"poller:{self.name}")
        return self

    async def stop(self) -> None:
        """Cancel the timer; results arriving after this are discarded."""
        self._stopped = True
        if self._subscription is not None:
            self._subscription.close()
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

    async def __aenter__(self) -> "Poller[T]":
        return self.start()

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    async def poll_once(self) -> None:
        try:
            result = await self._fetch()
            if self._stopped:
                return
            delivered = self._deliver(result)
            if inspect.isawaitable(delivered):
                await delivered
        except Exception:
            self.failures += 1
            logger.warning("Poll %s failed; retrying next tick", self.name, exc_info=True)

    async def _run(self) -> None:
        while not self._stopped:
            await self.poll_once()
            if self._subscription is not None:
                await self._subscription.wait(self.interval)
            else:
                await asyncio.sleep(self.interval)


# =============================================================================
# STANDARD POLLERS
# =============================================================================


def settings_poller(
    store: Store,
    deliver: Callable[[SystemSettings], Any],
    interval: float | None = None,
) -> Poller[SystemSettings]:
    """Reload the shared settings reference every 10 seconds (by default)."""
    return Poller(
        "settings",
        store.system_settings.reload,
        deliver,
        interval if interval is not None else settings.settings_poll_interval,
        subscription=store.feed.subscribe(SETTINGS_TOPIC),
    )


class MessageCursor:
    """Fetches only messages stored after the last one seen."""

    def __init__(self, repository: MessageRepository, group_id: str, after: int | None = None):
        self._repository = repository
        self.group_id = group_id
        self.after = after

    async def __call__(self) -> list[Message]:
        page = await self._repository.read_page(
            self.group_id, after=self.after, limit=settings.message_page_limit
        )
        if page:
            self.after = page[-1].seq
        return page


def message_poller(
    store: Store,
    group_id: str,
    deliver: Callable[[list[Message]], Any],
    *,
    after: int | None = None,
    interval: float | None = None,
) -> Poller[list[Message]]:
    """Pull new messages for one group every 3 seconds (by default)."""
    return Poller(
        f"messages:{group_id}",
        MessageCursor(store.messages, group_id, after),
        deliver,
        interval if interval is not None else settings.messages_poll_interval,
        subscription=store.feed.subscribe(group_topic(group_id)),
    )
