"""
Default SubscriptionConfirmation handler.

Confirms a pending SNS subscription by fetching the SubscribeURL from the
confirmation message, then (best-effort) applies the configured
subscription attributes.
"""

import logging
from typing import Any

import httpx
from fastapi import Request, Response, status

from hookido.config import Settings, get_settings
from hookido.core.exceptions import (
    ConfigurationError,
    ConfirmationRequestFailed,
    TopicMismatch,
)
from hookido.models.contracts.hookido import TopicConfig
from hookido.services.sns.gateway import SNSGateway
from hookido.services.sns.resolver import SubscriptionResolver

logger = logging.getLogger(__name__)


class SubscriptionConfirmationFlow:
    """
    Handles SubscriptionConfirmation messages for one configured topic.

    Steps:
    1. Refuse to confirm when no topic.arn is configured
    2. Refuse messages for any other topic
    3. GET the SubscribeURL to confirm the subscription
    4. Apply subscribe.attributes if configured; failures here are logged
       and do not change the 200 response
    """

    def __init__(
        self,
        topic: TopicConfig | None,
        gateway: SNSGateway,
        resolver: SubscriptionResolver,
        settings: Settings | None = None,
    ):
        self._topic = topic
        self._gateway = gateway
        self._resolver = resolver
        self._settings = settings or get_settings()

    async def __call__(self, request: Request, message: dict[str, Any]) -> Response:
        return await self.confirm(request, message)

    async def confirm(self, request: Request, message: dict[str, Any]) -> Response:
        """
        Confirm the subscription described by a confirmation message.

        Returns:
            Empty 200 response

        Raises:
            ConfigurationError: No topic.arn configured
            TopicMismatch: Message is for another topic
            ConfirmationRequestFailed: SubscribeURL could not be fetched
        """
        topic_arn = self._topic.arn if self._topic else None
        if not topic_arn:
            raise ConfigurationError("Can't confirm subscription when no topic.arn is configured")

        received_arn = message.get("TopicArn")
        if received_arn != topic_arn:
            error = TopicMismatch(expected=topic_arn, received=received_arn)
            logger.error(
                error.message,
                extra={"topic_arn": topic_arn, "received_topic_arn": received_arn},
            )
            raise error

        await self._fetch_subscribe_url(message.get("SubscribeURL"), topic_arn)
        logger.info(
            f"SNS subscription confirmed for {topic_arn}",
            extra={"topic_arn": topic_arn},
        )

        await self._apply_subscription_attributes()

        return Response(status_code=status.HTTP_200_OK)

    async def _fetch_subscribe_url(self, subscribe_url: Any, topic_arn: str) -> None:
        if not isinstance(subscribe_url, str) or not subscribe_url:
            logger.error(
                f"Unable to confirm SNS subscription for {topic_arn}, err: missing SubscribeURL",
                extra={"topic_arn": topic_arn},
            )
            raise ConfirmationRequestFailed("Confirmation message has no SubscribeURL")

        async with httpx.AsyncClient() as client:
            try:
                response = await client.get(
                    subscribe_url,
                    timeout=self._settings.confirmation_timeout_seconds,
                )
                response.raise_for_status()
            except httpx.HTTPError as e:
                logger.error(
                    f"Unable to confirm SNS subscription for {topic_arn}, err: {e}",
                    extra={"topic_arn": topic_arn},
                )
                raise ConfirmationRequestFailed(
                    f"Confirmation request for {topic_arn} failed: {e}"
                ) from e

    async def _apply_subscription_attributes(self) -> None:
        subscribe = self._topic.subscribe if self._topic else None
        if not subscribe or not subscribe.attributes:
            return

        topic_arn = self._topic.arn
        try:
            subscription_arn = await self._resolver.find_subscription_arn(
                topic_arn, subscribe.protocol.value, subscribe.endpoint
            )
            await self._gateway.set_subscription_attributes(
                subscription_arn, subscribe.attributes
            )
            logger.info(
                f"Subscription attributes updated for {subscription_arn}",
                extra={"topic_arn": topic_arn, "subscription_arn": subscription_arn},
            )
        except Exception as e:
            # Confirmation already succeeded; keep the 200
            logger.error(
                f"Unable to update subscription attributes for {topic_arn}, err: {e}",
                exc_info=True,
                extra={"topic_arn": topic_arn},
            )
