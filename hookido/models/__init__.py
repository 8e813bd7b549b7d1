# Option contracts and enums
from hookido.models.contracts.hookido import (
    HandlersConfig,
    HookidoOptions,
    RouteConfig,
    SubscribeConfig,
    TopicConfig,
)
from hookido.models.enums import MessageType, SubscriptionProtocol

__all__ = [
    "HookidoOptions",
    "TopicConfig",
    "SubscribeConfig",
    "RouteConfig",
    "HandlersConfig",
    "MessageType",
    "SubscriptionProtocol",
]
