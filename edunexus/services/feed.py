"""In-process change notifications, one topic per group plus settings."""

import asyncio
import logging
from collections import defaultdict

logger = logging.getLogger(__name__)

SETTINGS_TOPIC = "settings"


def group_topic(group_id: str) -> str:
    return f"group:{group_id}"


class Subscription:
    """Wake-up flag for one listener on one topic."""

    def __init__(self, feed: "ChangeFeed", topic: str):
        self.feed = feed
        self.topic = topic
        self._event = asyncio.Event()

    def notify(self) -> None:
        self._event.set()

    async def wait(self, timeout: float) -> bool:
        """Wait up to ``timeout`` seconds; True if a change was published."""
        try:
            await asyncio.wait_for(self._event.wait(), timeout)
        except asyncio.TimeoutError:
            return False
        finally:
            self._event.clear()
        return True

    def close(self) -> None:
        self.feed.unsubscribe(self)


class ChangeFeed:
    """
    Publish/subscribe by topic name.

    Notifications carry no payload: listeners re-read the store. Publishing
    with no listeners is a no-op.
    """

    def __init__(self):
        self._subscribers: dict[str, set[Subscription]] = defaultdict(set)

    def subscribe(self, topic: str) -> Subscription:
        subscription = Subscription(self, topic)
        self._subscribers[topic].add(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        listeners = self._subscribers.get(subscription.topic)
        if listeners is None:
            return
        listeners.discard(subscription)
        if not listeners:
            del self._subscribers[subscription.topic]

    def publish(self, topic: str) -> None:
        listeners = self._subscribers.get(topic, ())
        logger.debug("Publishing change on %s to %d listener(s)", topic, len(listeners))
        for subscription in list(listeners):
            subscription.notify()
