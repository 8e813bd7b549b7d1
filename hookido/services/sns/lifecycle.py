"""
Startup lifecycle for one registered topic.

Runs once when the app starts:
- Makes sure the configured subscription exists (subscribing when it is
  missing or still pending confirmation)
- Syncs configured topic attributes

Neither step is ever fatal to startup; failures are logged.
"""

import logging

from hookido.core.exceptions import HookidoError, SubscriptionLookupError
from hookido.models.contracts.hookido import TopicConfig
from hookido.services.sns.gateway import SNSGateway
from hookido.services.sns.resolver import SubscriptionResolver

logger = logging.getLogger(__name__)


class LifecycleOrchestrator:
    """Subscribe-or-verify and attribute sync for one topic config."""

    def __init__(
        self,
        topic: TopicConfig | None,
        gateway: SNSGateway,
        resolver: SubscriptionResolver,
    ):
        self._topic = topic
        self._gateway = gateway
        self._resolver = resolver

    async def run(self) -> None:
        """Run both startup steps independently."""
        if self._topic is None:
            return

        try:
            await self.ensure_subscription()
        except Exception as e:
            # Don't fail startup
            logger.error(
                f"Subscription check failed for {self._topic.arn}: {e}",
                exc_info=True,
                extra={"topic_arn": self._topic.arn},
            )

        try:
            await self.sync_topic_attributes()
        except Exception as e:
            logger.error(
                f"Topic attribute sync failed for {self._topic.arn}: {e}",
                exc_info=True,
                extra={"topic_arn": self._topic.arn},
            )

    async def ensure_subscription(self) -> None:
        """Subscribe unless a confirmed subscription already exists."""
        subscribe = self._topic.subscribe if self._topic else None
        if subscribe is None:
            return

        topic_arn = self._topic.arn
        protocol = subscribe.protocol.value
        log_extra = {"topic_arn": topic_arn, "endpoint": subscribe.endpoint}

        try:
            await self._resolver.find_subscription_arn(topic_arn, protocol, subscribe.endpoint)
            logger.info(f"Subscription already exists for {topic_arn}", extra=log_extra)
            return
        except SubscriptionLookupError as e:
            logger.info(f"{e.message}, subscribing", extra=log_extra)
        except HookidoError as e:
            logger.error(f"Subscription lookup failed for {topic_arn}: {e.message}", extra=log_extra)
            return

        try:
            await self._gateway.subscribe(topic_arn, protocol, subscribe.endpoint)
            logger.info(f"Subscription request sent for {topic_arn}", extra=log_extra)
        except HookidoError as e:
            logger.error(f"Subscribe request failed for {topic_arn}: {e.message}", extra=log_extra)

    async def sync_topic_attributes(self) -> None:
        """Apply configured topic attributes."""
        attributes = self._topic.attributes if self._topic else None
        if not attributes:
            return

        topic_arn = self._topic.arn
        try:
            await self._gateway.set_topic_attributes(topic_arn, attributes)
            logger.info(
                f"topicAttributes was updated for {topic_arn}",
                extra={"topic_arn": topic_arn, "attributes": list(attributes)},
            )
        except HookidoError as e:
            logger.error(
                f"Unable to update topic attributes for {topic_arn}: {e.message}",
                extra={"topic_arn": topic_arn},
            )
