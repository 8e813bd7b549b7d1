"""
Handler registry and dispatch for SNS messages.

Messages are routed by their declared Type, lower-cased, to exactly one
handler. The registry is built once at registration time and read-only
afterwards.
"""

import inspect
import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from fastapi import Request

from hookido.core.exceptions import MalformedPayload, UnknownMessageType
from hookido.models.contracts.hookido import MessageHandler
from hookido.models.enums import MessageType

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """
    Registry of message handlers keyed by lower-cased message type.

    A default SubscriptionConfirmation handler is injected unless the
    caller provides one.
    """

    def __init__(
        self,
        handlers: Mapping[str, MessageHandler],
        confirmation_handler: MessageHandler | None = None,
    ) -> None:
        entries: dict[str, MessageHandler] = {}
        if confirmation_handler is not None:
            entries[MessageType.SUBSCRIPTION_CONFIRMATION.key] = confirmation_handler

        # Caller handlers override the default
        for name, handler in handlers.items():
            entries[name.lower()] = handler

        self._handlers = MappingProxyType(entries)

    @property
    def handlers(self) -> Mapping[str, MessageHandler]:
        return self._handlers

    def get(self, message_type: str) -> MessageHandler | None:
        """
        Get handler for a message type.

        Args:
            message_type: Message Type as sent by SNS (any case)

        Returns:
            Handler, or None if no handler is registered.
        """
        return self._handlers.get(message_type.lower())

    def __contains__(self, message_type: str) -> bool:
        return message_type.lower() in self._handlers


class MessageDispatcher:
    """Routes an authenticated message to its registered handler."""

    def __init__(self, registry: HandlerRegistry):
        self._registry = registry

    @property
    def registry(self) -> HandlerRegistry:
        return self._registry

    async def dispatch(self, request: Request, message: Any) -> Any:
        """
        Invoke the handler registered for the message's Type.

        Handlers may be sync or async; their result (or exception) is
        returned (or raised) unchanged.

        Raises:
            MalformedPayload: Message has no Type
            UnknownMessageType: No handler for the message's Type
        """
        message_type = message.get("Type") if isinstance(message, Mapping) else None
        if not isinstance(message_type, str):
            raise MalformedPayload("Invalid SNS payload: missing message Type")

        handler = self._registry.get(message_type)
        if handler is None:
            error = UnknownMessageType(message_type)
            logger.error(error.message, extra={"message_type": message_type})
            raise error

        result = handler(request, message)
        if inspect.isawaitable(result):
            result = await result
        return result
