"""
hookido: SNS webhook receiver for FastAPI.

Validates and authenticates SNS messages posted to a webhook route,
dispatches them to application handlers by message type, and optionally
manages the topic subscription on startup.
"""

from hookido.core.exceptions import (
    AuthenticationFailed,
    ConfigurationError,
    ConfirmationRequestFailed,
    HookidoError,
    MalformedPayload,
    ProviderRequestFailed,
    SubscriptionNotFound,
    SubscriptionPending,
    TopicMismatch,
    UnknownMessageType,
)
from hookido.models.contracts.hookido import HookidoOptions
from hookido.plugin import HookidoRegistry, get_registry, register

__version__ = "1.0.0"

__all__ = [
    "register",
    "get_registry",
    "HookidoRegistry",
    "HookidoOptions",
    "HookidoError",
    "ConfigurationError",
    "MalformedPayload",
    "AuthenticationFailed",
    "UnknownMessageType",
    "TopicMismatch",
    "ConfirmationRequestFailed",
    "ProviderRequestFailed",
    "SubscriptionNotFound",
    "SubscriptionPending",
]
