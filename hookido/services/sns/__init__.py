"""
SNS services for hookido.

This package provides:
- PayloadValidator and SNSMessageValidator for inbound authentication
- MessageDispatcher and HandlerRegistry for routing by message type
- SNSGateway and SubscriptionResolver for provider calls
- SubscriptionConfirmationFlow and LifecycleOrchestrator for the
  subscription lifecycle
"""

from hookido.services.sns.confirmation import SubscriptionConfirmationFlow
from hookido.services.sns.dispatcher import HandlerRegistry, MessageDispatcher
from hookido.services.sns.gateway import SNSGateway
from hookido.services.sns.lifecycle import LifecycleOrchestrator
from hookido.services.sns.payload import PayloadValidator
from hookido.services.sns.protocol import (
    MessageValidator,
    SubscriptionPage,
    SubscriptionRecord,
)
from hookido.services.sns.resolver import SubscriptionResolver
from hookido.services.sns.signature import SNSMessageValidator

__all__ = [
    "PayloadValidator",
    "MessageValidator",
    "SNSMessageValidator",
    "HandlerRegistry",
    "MessageDispatcher",
    "SNSGateway",
    "SubscriptionResolver",
    "SubscriptionRecord",
    "SubscriptionPage",
    "SubscriptionConfirmationFlow",
    "LifecycleOrchestrator",
]
