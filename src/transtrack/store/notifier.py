"""Change notification channels.

Notifications carry no payload. A subscriber only learns that something on
the topic changed and is expected to re-fetch.
"""

import asyncio
import inspect
from collections import defaultdict
from collections.abc import Callable
from typing import Any

from redis.asyncio import Redis

from transtrack.core.logging import get_logger

logger = get_logger(__name__)

ChangeCallback = Callable[[], Any]


class Subscription:
    """Handle returned by ``subscribe``."""

    def __init__(self, notifier: "LocalNotifier", topic: str, callback: ChangeCallback):
        self._notifier = notifier
        self.topic = topic
        self.callback = callback
        self.active = True

    def cancel(self) -> None:
        if self.active:
            self._notifier._unsubscribe(self)
            self.active = False


class LocalNotifier:
    """In-process notifier; publishes reach subscribers of this process only."""

    def __init__(self):
        self._subscriptions: dict[str, list[Subscription]] = defaultdict(list)

    def subscribe(self, topic: str, callback: ChangeCallback) -> Subscription:
        subscription = Subscription(self, topic, callback)
        self._subscriptions[topic].append(subscription)
        return subscription

    def _unsubscribe(self, subscription: Subscription) -> None:
        subscribers = self._subscriptions.get(subscription.topic, [])
        if subscription in subscribers:
            subscribers.remove(subscription)

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscriptions.get(topic, []))

    async def publish(self, topic: str) -> None:
        await self._deliver(topic)

    async def _deliver(self, topic: str) -> None:
        for subscription in list(self._subscriptions.get(topic, [])):
            try:
                result = subscription.callback()
                if inspect.isawaitable(result):
                    await result
            except Exception:
                # A broken subscriber must not fail the write that triggered it
                logger.exception("Change subscriber failed", topic=topic)

    async def start(self) -> None:
        pass

    async def close(self) -> None:
        self._subscriptions.clear()


class RedisNotifier(LocalNotifier):
    """Notifier over Redis pub/sub, shared by API processes and workers."""

    def __init__(
        self,
        redis: Redis,
        channel: str = "transtrack:jobs",
        reconnect_delay: float = 1.0,
    ):
        super().__init__()
        self._redis = redis
        self._channel = channel
        self.reconnect_delay = reconnect_delay
        self._pubsub = None
        self._listener: asyncio.Task | None = None

    def channel_for(self, topic: str) -> str:
        return f"{self._channel}:{topic}"

    async def publish(self, topic: str) -> None:
        await self._redis.publish(self.channel_for(topic), "changed")

    async def start(self) -> None:
        await self._subscribe()
        self._listener = asyncio.create_task(self._listen(), name="redis-notifier")
        logger.info("Redis notifier listening", channel=self._channel)

    async def _subscribe(self) -> None:
        self._pubsub = self._redis.pubsub()
        await self._pubsub.psubscribe(f"{self._channel}:*")

    async def _drop_pubsub(self) -> None:
        pubsub, self._pubsub = self._pubsub, None
        if pubsub is None:
            return
        try:
            await pubsub.aclose()
        except Exception:
            logger.warning("Closing broken pub/sub connection failed", exc_info=True)

    async def _listen(self) -> None:
        """Forward pub/sub messages to local subscribers, resubscribing after connection loss."""
        prefix = f"{self._channel}:"
        while True:
            try:
                if self._pubsub is None:
                    await self._subscribe()
                    logger.info("Redis notifier resubscribed", channel=self._channel)
                async for message in self._pubsub.listen():
                    if message.get("type") != "pmessage":
                        continue
                    channel = message["channel"]
                    if isinstance(channel, bytes):
                        channel = channel.decode()
                    await self._deliver(channel.removeprefix(prefix))
                return
            except Exception:
                logger.exception(
                    "Redis notifier lost its subscription",
                    channel=self._channel,
                    retry_in=self.reconnect_delay,
                )
                await self._drop_pubsub()
                await asyncio.sleep(self.reconnect_delay)

    async def close(self) -> None:
        if self._listener is not None:
            self._listener.cancel()
            try:
                await self._listener
            except asyncio.CancelledError:
                pass
            self._listener = None
        if self._pubsub is not None:
            await self._pubsub.aclose()
            self._pubsub = None
        await self._redis.aclose()
        await super().close()
