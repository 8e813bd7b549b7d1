"""
SNS Gateway: the four SNS operations hookido uses.

Each logical call opens its own aiobotocore client; nothing is kept between
calls, so a gateway can live for the whole server lifetime without teardown.

Attribute updates are applied one SetTopicAttributes/SetSubscriptionAttributes
call per key, awaited in order. SNS drops all but one attribute when the
updates are sent concurrently.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from contextlib import asynccontextmanager
from typing import Any

from aiobotocore.session import get_session
from botocore.exceptions import BotoCoreError, ClientError

from hookido.config import Settings, get_settings
from hookido.core.exceptions import ProviderRequestFailed
from hookido.services.sns.protocol import SubscriptionPage, SubscriptionRecord

logger = logging.getLogger(__name__)


def _attribute_value(value: Any) -> str:
    """SNS attribute values are strings; JSON-encode policies given as dicts."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


class SNSGateway:
    """SNS operations for one registered hookido instance."""

    def __init__(
        self,
        provider_config: Mapping[str, Any] | None = None,
        settings: Settings | None = None,
    ):
        self._settings = settings or get_settings()
        self._client_kwargs = {
            **self._settings.sns_client_kwargs(),
            **(provider_config or {}),
        }

    @property
    def region(self) -> str | None:
        return self._client_kwargs.get("region_name")

    @asynccontextmanager
    async def _get_client(self):
        session = get_session()
        async with session.create_client("sns", **self._client_kwargs) as client:
            yield client

    async def subscribe(self, topic_arn: str, protocol: str, endpoint: str) -> None:
        """
        Request a subscription.

        SNS keeps it as PendingConfirmation until the endpoint confirms.
        """
        async with self._get_client() as client:
            await self._call(
                "Subscribe",
                client.subscribe,
                TopicArn=topic_arn,
                Protocol=protocol,
                Endpoint=endpoint,
            )

    async def set_topic_attributes(
        self, topic_arn: str, attributes: Mapping[str, Any]
    ) -> None:
        """Set topic attributes sequentially, one call per attribute."""
        async with self._get_client() as client:
            for name, value in attributes.items():
                await self._call(
                    "SetTopicAttributes",
                    client.set_topic_attributes,
                    TopicArn=topic_arn,
                    AttributeName=name,
                    AttributeValue=_attribute_value(value),
                )

    async def set_subscription_attributes(
        self, subscription_arn: str, attributes: Mapping[str, Any]
    ) -> None:
        """Set subscription attributes sequentially, one call per attribute."""
        async with self._get_client() as client:
            for name, value in attributes.items():
                await self._call(
                    "SetSubscriptionAttributes",
                    client.set_subscription_attributes,
                    SubscriptionArn=subscription_arn,
                    AttributeName=name,
                    AttributeValue=_attribute_value(value),
                )

    async def list_subscriptions_page(
        self, topic_arn: str, next_token: str | None = None
    ) -> SubscriptionPage:
        """Fetch one page of subscriptions for a topic."""
        kwargs: dict[str, Any] = {"TopicArn": topic_arn}
        if next_token:
            kwargs["NextToken"] = next_token

        async with self._get_client() as client:
            response = await self._call(
                "ListSubscriptionsByTopic", client.list_subscriptions_by_topic, **kwargs
            )

        return SubscriptionPage(
            entries=[
                SubscriptionRecord.from_sns(sub)
                for sub in response.get("Subscriptions", [])
            ],
            next_token=response.get("NextToken") or None,
        )

    async def _call(self, operation: str, method, **kwargs: Any) -> dict[str, Any]:
        try:
            return await method(**kwargs) or {}
        except (ClientError, BotoCoreError) as e:
            logger.debug(
                f"SNS {operation} failed: {e}",
                extra={"operation": operation, "topic_arn": kwargs.get("TopicArn")},
            )
            raise ProviderRequestFailed(operation, e) from e

