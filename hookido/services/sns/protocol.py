"""
SNS protocol types for hookido.

Defines the provider-side records the resolver works with and the
message validator interface the payload validator delegates to.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from hookido.models.enums import PENDING_CONFIRMATION


@dataclass(frozen=True)
class SubscriptionRecord:
    """
    One entry of a ListSubscriptionsByTopic page.

    Read-only view of provider state; hookido never caches these.
    """

    subscription_arn: str
    """Subscription ARN, or "PendingConfirmation" until the endpoint confirms."""

    protocol: str
    endpoint: str
    topic_arn: str | None = None
    owner: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.subscription_arn == PENDING_CONFIRMATION

    def matches(self, protocol: str, endpoint: str) -> bool:
        """Case-insensitive match on protocol and endpoint."""
        return (
            self.protocol.lower() == protocol.lower()
            and self.endpoint.lower() == endpoint.lower()
        )

    @classmethod
    def from_sns(cls, data: dict[str, Any]) -> "SubscriptionRecord":
        """Create a record from an SNS "Subscriptions" entry."""
        return cls(
            subscription_arn=data.get("SubscriptionArn", ""),
            protocol=data.get("Protocol", ""),
            endpoint=data.get("Endpoint", ""),
            topic_arn=data.get("TopicArn"),
            owner=data.get("Owner"),
        )


@dataclass
class SubscriptionPage:
    """One page of ListSubscriptionsByTopic results."""

    entries: list[SubscriptionRecord] = field(default_factory=list)

    next_token: str | None = None
    """Continuation token; None on the last page."""


class MessageValidator(ABC):
    """
    Authenticity check for a parsed SNS message.

    Implementations raise AuthenticationFailed naming the specific defect.
    The default implementation verifies SNS signatures
    (see hookido.services.sns.signature).
    """

    @abstractmethod
    async def validate(self, message: Any) -> None:
        """
        Verify the message.

        Args:
            message: Parsed message body.

        Raises:
            AuthenticationFailed: If the message is not authentic.
        """
        pass
