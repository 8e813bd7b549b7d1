"""
Enumeration types used across hookido.
"""

from enum import Enum


class MessageType(str, Enum):
    """SNS message kinds delivered to HTTP/HTTPS endpoints"""
    NOTIFICATION = "Notification"
    SUBSCRIPTION_CONFIRMATION = "SubscriptionConfirmation"
    UNSUBSCRIBE_CONFIRMATION = "UnsubscribeConfirmation"

    @property
    def key(self) -> str:
        """Handler registry key (lower-cased type)."""
        return self.value.lower()


class SubscriptionProtocol(str, Enum):
    """Subscription protocols hookido can manage"""
    HTTP = "HTTP"
    HTTPS = "HTTPS"


# Sentinel SubscriptionArn reported by ListSubscriptionsByTopic for unconfirmed subscriptions
PENDING_CONFIRMATION = "PendingConfirmation"
