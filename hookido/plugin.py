"""
hookido plugin registration.

register() is the composition root: it validates options, builds one
instance per options entry (own SNS gateway, resolver, handlers and route)
and records every instance in a HookidoRegistry stored on app.state.

The registry's start() runs the startup lifecycle of every instance; it is
chained into the app's lifespan the first time hookido is registered
against an app, so it runs once per server start.
"""

import logging
from collections.abc import AsyncIterator, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

from fastapi import APIRouter, FastAPI

from hookido.config import Settings, get_settings
from hookido.models.contracts.hookido import HookidoOptions, parse_options
from hookido.routers.hooks import create_hook_router
from hookido.services.sns.confirmation import SubscriptionConfirmationFlow
from hookido.services.sns.dispatcher import HandlerRegistry, MessageDispatcher
from hookido.services.sns.gateway import SNSGateway
from hookido.services.sns.lifecycle import LifecycleOrchestrator
from hookido.services.sns.payload import PayloadValidator
from hookido.services.sns.protocol import MessageValidator
from hookido.services.sns.resolver import SubscriptionResolver
from hookido.services.sns.signature import SNSMessageValidator

logger = logging.getLogger(__name__)

STATE_KEY = "hookido"


@dataclass
class HookidoInstance:
    """Everything wired up for one registered options entry."""

    options: HookidoOptions
    gateway: SNSGateway
    resolver: SubscriptionResolver
    payload_validator: PayloadValidator
    dispatcher: MessageDispatcher
    lifecycle: LifecycleOrchestrator
    path: str
    router: APIRouter | None = None


@dataclass
class HookidoRegistry:
    """
    Live hookido instances for one app.

    Created on first registration, referenced for the server's lifetime.
    No teardown is needed: SNS gateways hold no open connections.
    """

    instances: list[HookidoInstance] = field(default_factory=list)
    message_validator: MessageValidator = field(default_factory=SNSMessageValidator)

    @property
    def gateways(self) -> list[SNSGateway]:
        return [instance.gateway for instance in self.instances]

    def add(self, instance: HookidoInstance) -> None:
        self.instances.append(instance)

    async def start(self) -> None:
        """Run the startup lifecycle of every instance, in registration order."""
        for instance in self.instances:
            await instance.lifecycle.run()


def get_registry(app: FastAPI) -> HookidoRegistry | None:
    """Get the hookido registry of an app, if hookido was registered."""
    return getattr(app.state, STATE_KEY, None)


def _chain_lifespan(app: FastAPI, registry: HookidoRegistry) -> None:
    """Run registry.start() after the app's own lifespan startup."""
    original_lifespan = app.router.lifespan_context

    @asynccontextmanager
    async def lifespan(app_: Any) -> AsyncIterator[Any]:
        async with original_lifespan(app_) as state:
            logger.info(f"Starting hookido ({len(registry.instances)} instance(s))")
            await registry.start()
            yield state

    app.router.lifespan_context = lifespan


def build_instance(
    options: HookidoOptions,
    message_validator: MessageValidator,
    settings: Settings | None = None,
) -> HookidoInstance:
    """Wire up gateway, resolver, handlers and lifecycle for one options entry."""
    settings = settings or get_settings()

    gateway = SNSGateway(options.provider_config, settings=settings)
    resolver = SubscriptionResolver(gateway)
    confirmation = SubscriptionConfirmationFlow(
        options.topic, gateway, resolver, settings=settings
    )
    handlers = HandlerRegistry(
        options.handlers.as_mapping(),
        confirmation_handler=confirmation,
    )

    return HookidoInstance(
        options=options,
        gateway=gateway,
        resolver=resolver,
        payload_validator=PayloadValidator(message_validator),
        dispatcher=MessageDispatcher(handlers),
        lifecycle=LifecycleOrchestrator(options.topic, gateway, resolver),
        path=options.route.path or settings.default_route_path,
    )


def register(
    app: FastAPI,
    options: HookidoOptions | Mapping[str, Any] | Sequence[HookidoOptions | Mapping[str, Any]],
    settings: Settings | None = None,
) -> HookidoRegistry:
    """
    Register hookido against a FastAPI app.

    Can be called several times on the same app; instances accumulate in
    the same registry.

    Args:
        app: FastAPI application
        options: One options entry or a list of them
        settings: Optional settings override

    Returns:
        The app's HookidoRegistry

    Raises:
        ConfigurationError: If options are invalid
    """
    parsed = parse_options(options)

    registry = get_registry(app)
    if registry is None:
        registry = HookidoRegistry(
            message_validator=SNSMessageValidator(settings or get_settings())
        )
        setattr(app.state, STATE_KEY, registry)
        _chain_lifespan(app, registry)

    for entry in parsed:
        instance = build_instance(entry, registry.message_validator, settings=settings)
        instance.router = create_hook_router(instance, instance.path)
        app.include_router(instance.router)
        registry.add(instance)

        logger.info(
            f"hookido route registered: POST {instance.path}",
            extra={"topic_arn": entry.topic.arn if entry.topic else None},
        )

    return registry
