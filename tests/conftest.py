"""
Pytest fixtures for hookido tests.

This module provides:
1. Settings fixtures
2. A mocked aiobotocore SNS client patched into SNSGateway
3. A mocked httpx.AsyncClient for outbound GETs
4. Sample SNS messages and a self-signed signing certificate
"""

import base64
import os
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.x509.oid import NameOID

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from hookido.config import Settings
from hookido.services.sns.gateway import SNSGateway
from hookido.services.sns.signature import build_string_to_sign

from tests.helpers.sns import CERT_URL, SUBSCRIBE_URL, TOPIC_ARN


# ==================== SETTINGS ====================


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment's AWS configuration."""
    return Settings(
        environment="testing",
        aws_region="eu-west-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


# ==================== SNS CLIENT ====================


@pytest.fixture
def sns_client():
    """AsyncMock standing in for an aiobotocore SNS client."""
    client = AsyncMock()
    client.subscribe = AsyncMock(return_value={"SubscriptionArn": "pending confirmation"})
    client.set_topic_attributes = AsyncMock(return_value={})
    client.set_subscription_attributes = AsyncMock(return_value={})
    client.list_subscriptions_by_topic = AsyncMock(return_value={"Subscriptions": []})
    return client


@pytest.fixture
def mock_sns(sns_client):
    """Patch every SNSGateway to use the sns_client mock."""

    @asynccontextmanager
    async def _get_client(self):
        yield sns_client

    with patch.object(SNSGateway, "_get_client", _get_client):
        yield sns_client


# ==================== OUTBOUND HTTP ====================


@pytest.fixture
def http_client():
    """AsyncMock standing in for httpx.AsyncClient, with a 200 response."""
    response = MagicMock()
    response.status_code = 200
    response.raise_for_status = MagicMock()
    response.content = b""

    client = AsyncMock()
    client.get = AsyncMock(return_value=response)
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=None)
    return client


@pytest.fixture
def mock_http(http_client):
    """Patch httpx.AsyncClient to return the http_client mock."""
    with patch("httpx.AsyncClient", return_value=http_client):
        yield http_client


# ==================== SAMPLE MESSAGES ====================


@pytest.fixture
def notification_message() -> dict[str, Any]:
    return {
        "Type": "Notification",
        "MessageId": "22b80b92-fdea-4c2c-8f9d-bdfb0c7bf324",
        "TopicArn": TOPIC_ARN,
        "Subject": "My First Message",
        "Message": "Hello world!",
        "Timestamp": "2012-05-02T00:54:06.655Z",
        "SignatureVersion": "2",
        "SigningCertURL": CERT_URL,
        "UnsubscribeURL": "https://sns.eu-west-1.amazonaws.com/?Action=Unsubscribe",
    }


@pytest.fixture
def confirmation_message() -> dict[str, Any]:
    return {
        "Type": "SubscriptionConfirmation",
        "MessageId": "165545c9-2a5c-472c-8df2-7ff2be2b3b1b",
        "Token": "token",
        "TopicArn": TOPIC_ARN,
        "Message": f"You have chosen to subscribe to the topic {TOPIC_ARN}.",
        "SubscribeURL": SUBSCRIBE_URL,
        "Timestamp": "2012-04-26T20:45:04.751Z",
        "SignatureVersion": "2",
        "SigningCertURL": CERT_URL,
    }


# ==================== SIGNING ====================


@pytest.fixture(scope="session")
def signing_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def signing_cert_pem(signing_key) -> bytes:
    """Self-signed certificate for signing_key, PEM encoded."""
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "sns.amazonaws.com")])
    now = datetime.now(timezone.utc)
    certificate = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(signing_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=1))
        .sign(signing_key, hashes.SHA256())
    )
    return certificate.public_bytes(serialization.Encoding.PEM)


@pytest.fixture
def sign(signing_key):
    """Return a function that adds a SignatureVersion 2 signature to a message."""

    def _sign(message: dict[str, Any]) -> dict[str, Any]:
        string_to_sign = build_string_to_sign(message).encode("utf-8")
        signature = signing_key.sign(string_to_sign, padding.PKCS1v15(), hashes.SHA256())
        return {**message, "Signature": base64.b64encode(signature).decode("ascii")}

    return _sign
