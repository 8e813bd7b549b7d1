"""
Plugin option contract models for hookido.

Defines the configuration surface accepted by hookido.register(): the SNS
topic to manage, handlers per message kind, route overrides and the SNS
client configuration.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Callable

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from hookido.core.exceptions import ConfigurationError
from hookido.models.enums import MessageType, SubscriptionProtocol

MessageHandler = Callable[..., Any]


# ==================== TOPIC MODELS ====================


class SubscribeConfig(BaseModel):
    """Subscription hookido should ensure exists on startup."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    endpoint: str = Field(..., min_length=1, description="Public URL SNS delivers to")
    protocol: SubscriptionProtocol = Field(..., description="HTTP or HTTPS")
    attributes: dict[str, Any] | None = Field(
        default=None,
        description="Subscription attributes, applied after hookido confirms the subscription",
    )


class TopicConfig(BaseModel):
    """SNS topic a webhook route is bound to."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    arn: str = Field(..., min_length=1, description="Topic ARN")
    attributes: dict[str, Any] | None = Field(
        default=None,
        description="Topic attributes set on startup",
    )
    subscribe: SubscribeConfig | None = Field(
        default=None,
        description="Automatically subscribe on startup if no subscription exists",
    )


# ==================== ROUTE / HANDLER MODELS ====================


class RouteConfig(BaseModel):
    """Overrides for the default webhook route."""

    model_config = ConfigDict(extra="forbid")

    path: str | None = Field(
        default=None,
        description="Route path (defaults to settings.default_route_path)",
    )
    name: str | None = Field(default=None, description="Route name")
    description: str = Field(default="SNS webhook endpoint")
    tags: list[str] = Field(default_factory=lambda: ["Webhooks"])
    include_in_schema: bool = Field(default=False)


class HandlersConfig(BaseModel):
    """
    Request handlers per SNS message kind.

    Handlers are called as handler(request, message) and may be sync or async.
    """

    model_config = ConfigDict(extra="forbid")

    notification: MessageHandler = Field(..., description="Handles Notification messages")
    subscriptionconfirmation: MessageHandler | None = Field(
        default=None,
        description="If omitted hookido confirms the subscription itself",
    )
    unsubscribeconfirmation: MessageHandler | None = Field(
        default=None,
        description="Handles UnsubscribeConfirmation messages",
    )

    def as_mapping(self) -> dict[str, MessageHandler]:
        """Handlers that are set, keyed by lower-cased message type."""
        handlers = {
            MessageType.NOTIFICATION.key: self.notification,
            MessageType.SUBSCRIPTION_CONFIRMATION.key: self.subscriptionconfirmation,
            MessageType.UNSUBSCRIBE_CONFIRMATION.key: self.unsubscribeconfirmation,
        }
        return {key: handler for key, handler in handlers.items() if handler is not None}


# ==================== PLUGIN OPTIONS ====================


class HookidoOptions(BaseModel):
    """
    Options for one registered webhook instance.

    Several instances can be registered against one app; each gets its own
    route and SNS gateway.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    topic: TopicConfig | None = Field(default=None)
    skip_payload_validation: bool = Field(
        default=False,
        validation_alias=AliasChoices("skip_payload_validation", "skipPayloadValidation"),
        description="Skip signature validation on SNS messages",
    )
    provider_config: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("provider_config", "providerConfig", "aws"),
        description="Keyword arguments for the aiobotocore SNS client",
    )
    route: RouteConfig = Field(default_factory=RouteConfig)
    handlers: HandlersConfig


def parse_options(
    opts: HookidoOptions | Mapping[str, Any] | Sequence[HookidoOptions | Mapping[str, Any]],
) -> list[HookidoOptions]:
    """
    Validate plugin options.

    Accepts a single options object/mapping or a list of them.

    Raises:
        ConfigurationError: If any entry fails validation
    """
    entries = [opts] if isinstance(opts, (HookidoOptions, Mapping)) else list(opts)

    parsed: list[HookidoOptions] = []
    for entry in entries:
        if isinstance(entry, HookidoOptions):
            parsed.append(entry)
            continue
        try:
            parsed.append(HookidoOptions.model_validate(entry))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid hookido options: {e}") from e
    return parsed
