"""
Tests for hookido.register() and the startup lifespan.
"""

import json
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, call

import httpx
import pytest
from botocore.exceptions import ClientError
from fastapi import FastAPI
from fastapi.testclient import TestClient

from hookido.core.exceptions import ConfigurationError
from hookido.plugin import HookidoRegistry, get_registry, register
from hookido.services.sns.signature import SNSMessageValidator
from tests.helpers.sns import (
    CERT_URL,
    ENDPOINT,
    OTHER_TOPIC_ARN,
    TOPIC_ARN,
    subscription_entry,
    subscriptions_page,
)


def _options(topic=None, **overrides):
    options = {
        "skip_payload_validation": True,
        "handlers": {"notification": AsyncMock(return_value={"ok": True})},
    }
    if topic is not None:
        options["topic"] = topic
    options.update(overrides)
    return options


def _subscribed_topic(arn: str = TOPIC_ARN, **extra):
    return {"arn": arn, "subscribe": {"endpoint": ENDPOINT, "protocol": "HTTP"}, **extra}


class TestRegister:
    """Tests for registration."""

    def test_stores_registry_on_app_state(self, settings):
        app = FastAPI()

        registry = register(app, _options(), settings=settings)

        assert isinstance(registry, HookidoRegistry)
        assert get_registry(app) is registry
        assert len(registry.instances) == 1
        assert registry.instances[0].path == "/hookido"

    def test_no_registry_before_register(self):
        assert get_registry(FastAPI()) is None

    def test_invalid_options(self, settings):
        app = FastAPI()

        with pytest.raises(ConfigurationError):
            register(app, {"handlers": {}}, settings=settings)

        assert get_registry(app) is None

    def test_list_of_options(self, settings):
        app = FastAPI()

        registry = register(
            app,
            [
                _options({"arn": TOPIC_ARN}, route={"path": "/sns/a"}),
                _options({"arn": OTHER_TOPIC_ARN}, route={"path": "/sns/b"}),
            ],
            settings=settings,
        )

        assert [instance.path for instance in registry.instances] == ["/sns/a", "/sns/b"]
        assert registry.gateways[0] is not registry.gateways[1]

    def test_repeated_registration_shares_registry(self, settings):
        app = FastAPI()

        first = register(app, _options(route={"path": "/sns/a"}), settings=settings)
        second = register(app, _options(route={"path": "/sns/b"}), settings=settings)

        assert first is second
        assert len(first.instances) == 2
        assert len(first.gateways) == 2

        client = TestClient(app)
        body = json.dumps({"Type": "Notification", "Message": "hi"})
        assert client.post("/sns/a", content=body).json() == {"ok": True}
        assert client.post("/sns/b", content=body).json() == {"ok": True}

    def test_provider_config_per_instance(self, settings):
        app = FastAPI()

        registry = register(
            app,
            [
                _options(route={"path": "/sns/a"}, aws={"region_name": "eu-west-2"}),
                _options(route={"path": "/sns/b"}),
            ],
            settings=settings,
        )

        assert registry.gateways[0].region == "eu-west-2"
        assert registry.gateways[1].region == "eu-west-1"

    def test_default_path_from_settings(self, settings):
        settings.default_route_path = "/webhooks/sns"
        app = FastAPI()

        registry = register(app, _options(), settings=settings)

        assert registry.instances[0].path == "/webhooks/sns"

    def test_settings_reach_signature_validator(self, settings):
        settings.certificate_cache_ttl_seconds = 60
        settings.certificate_timeout_seconds = 2.5
        app = FastAPI()

        registry = register(app, _options(), settings=settings)

        validator = registry.message_validator
        assert isinstance(validator, SNSMessageValidator)
        assert validator._settings is settings
        assert validator._settings.certificate_cache_ttl_seconds == 60
        assert validator._settings.certificate_timeout_seconds == 2.5

    def test_certificate_fetch_uses_registered_settings(
        self, settings, mock_http, notification_message, sign
    ):
        settings.certificate_timeout_seconds = 2.5
        app = FastAPI()
        register(app, _options(skip_payload_validation=False), settings=settings)

        client = TestClient(app)
        client.post("/hookido", content=json.dumps(sign(notification_message)))

        httpx.AsyncClient.assert_called_once_with(timeout=2.5)
        mock_http.get.assert_awaited_once_with(CERT_URL)


class TestStartup:
    """Tests for the startup lifecycle chained into the app lifespan."""

    def test_subscribes_when_missing(self, settings, mock_sns):
        app = FastAPI()
        register(app, _options(_subscribed_topic()), settings=settings)

        with TestClient(app):
            pass

        mock_sns.list_subscriptions_by_topic.assert_awaited_once_with(TopicArn=TOPIC_ARN)
        mock_sns.subscribe.assert_awaited_once_with(
            TopicArn=TOPIC_ARN, Protocol="HTTP", Endpoint=ENDPOINT
        )

    def test_subscribes_when_pending(self, settings, mock_sns):
        mock_sns.list_subscriptions_by_topic.return_value = subscriptions_page(
            subscription_entry(arn="PendingConfirmation")
        )
        app = FastAPI()
        register(app, _options(_subscribed_topic()), settings=settings)

        with TestClient(app):
            pass

        mock_sns.subscribe.assert_awaited_once()

    def test_existing_subscription_not_resubscribed(self, settings, mock_sns):
        mock_sns.list_subscriptions_by_topic.side_effect = [
            subscriptions_page(subscription_entry("http://other.com"), next_token="page-2"),
            subscriptions_page(subscription_entry()),
        ]
        app = FastAPI()
        register(app, _options(_subscribed_topic()), settings=settings)

        with TestClient(app):
            pass

        assert mock_sns.list_subscriptions_by_topic.await_count == 2
        mock_sns.subscribe.assert_not_called()

    def test_sets_topic_attributes(self, settings, mock_sns):
        app = FastAPI()
        register(
            app,
            _options({"arn": TOPIC_ARN, "attributes": {"DisplayName": "My topic", "Policy": "{}"}}),
            settings=settings,
        )

        with TestClient(app):
            pass

        assert mock_sns.set_topic_attributes.await_args_list == [
            call(TopicArn=TOPIC_ARN, AttributeName="DisplayName", AttributeValue="My topic"),
            call(TopicArn=TOPIC_ARN, AttributeName="Policy", AttributeValue="{}"),
        ]
        mock_sns.list_subscriptions_by_topic.assert_not_called()

    def test_runs_once_for_every_instance(self, settings, mock_sns):
        """Lifespan is chained once even when register() is called twice."""
        app = FastAPI()
        register(app, _options(_subscribed_topic(), route={"path": "/a"}), settings=settings)
        register(
            app,
            _options(_subscribed_topic(OTHER_TOPIC_ARN), route={"path": "/b"}),
            settings=settings,
        )

        with TestClient(app):
            pass

        assert mock_sns.subscribe.await_args_list == [
            call(TopicArn=TOPIC_ARN, Protocol="HTTP", Endpoint=ENDPOINT),
            call(TopicArn=OTHER_TOPIC_ARN, Protocol="HTTP", Endpoint=ENDPOINT),
        ]

    def test_provider_failure_does_not_block_startup(self, settings, mock_sns):
        mock_sns.list_subscriptions_by_topic.side_effect = ClientError(
            {"Error": {"Code": "AuthorizationError", "Message": "Not authorized"}},
            "ListSubscriptionsByTopic",
        )
        app = FastAPI()
        register(
            app,
            _options(_subscribed_topic(attributes={"DisplayName": "My topic"})),
            settings=settings,
        )

        with TestClient(app) as client:
            response = client.post("/hookido", content=json.dumps({"Type": "Notification"}))

        assert response.status_code == 200
        mock_sns.subscribe.assert_not_called()
        mock_sns.set_topic_attributes.assert_awaited_once()

    def test_runs_after_app_lifespan(self, settings, mock_sns):
        events = []

        @asynccontextmanager
        async def lifespan(app):
            events.append("app startup")
            yield
            events.append("app shutdown")

        mock_sns.subscribe.side_effect = lambda **kwargs: events.append("subscribe") or {}
        app = FastAPI(lifespan=lifespan)
        register(app, _options(_subscribed_topic()), settings=settings)

        with TestClient(app):
            pass

        assert events == ["app startup", "subscribe", "app shutdown"]
