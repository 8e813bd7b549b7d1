"""
SNS message signature verification.

Implements the check described in the SNS "Verifying the signatures of
Amazon SNS messages" docs:

1. Make sure every key the signature covers is present.
2. Make sure SigningCertURL points at an SNS-owned host.
3. Fetch the signing certificate (cached per URL for a short TTL).
4. Rebuild the canonical string to sign for the message type.
5. Verify the RSA PKCS#1 v1.5 signature (SHA1 for SignatureVersion 1,
   SHA256 for SignatureVersion 2).
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
import time
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlparse

import httpx
from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from hookido.config import Settings, get_settings
from hookido.core.exceptions import AuthenticationFailed
from hookido.models.enums import MessageType
from hookido.services.sns.protocol import MessageValidator

logger = logging.getLogger(__name__)

_CERT_HOST_PATTERN = re.compile(r"^sns\.[a-zA-Z0-9\-]{3,}\.amazonaws\.com(\.cn)?$")

_REQUIRED_KEYS = (
    "Message",
    "MessageId",
    "Timestamp",
    "TopicArn",
    "Type",
    "Signature",
    "SigningCertURL",
    "SignatureVersion",
)

_SUBSCRIPTION_KEYS = ("SubscribeURL", "Token")

# Keys covered by the signature, in the order SNS signs them
_NOTIFICATION_SIGNABLE_KEYS = (
    "Message",
    "MessageId",
    "Subject",
    "Timestamp",
    "TopicArn",
    "Type",
)

_SUBSCRIPTION_SIGNABLE_KEYS = (
    "Message",
    "MessageId",
    "SubscribeURL",
    "Timestamp",
    "Token",
    "TopicArn",
    "Type",
)

# Lambda-delivered messages use different casing for these keys
_LAMBDA_KEY_ALIASES = {
    "SigningCertUrl": "SigningCertURL",
    "UnsubscribeUrl": "UnsubscribeURL",
}

_SIGNATURE_HASHES = {
    "1": hashes.SHA1,
    "2": hashes.SHA256,
}

_SUBSCRIPTION_TYPES = {
    MessageType.SUBSCRIPTION_CONFIRMATION.value,
    MessageType.UNSUBSCRIBE_CONFIRMATION.value,
}


def normalize_lambda_keys(message: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of the message with Lambda-style key casing normalized."""
    normalized = dict(message)
    for lambda_key, key in _LAMBDA_KEY_ALIASES.items():
        if lambda_key in normalized and key not in normalized:
            normalized[key] = normalized.pop(lambda_key)
    return normalized


def build_string_to_sign(message: Mapping[str, Any]) -> str:
    """
    Build the canonical string SNS signs for a message.

    Each signed key contributes "Key\\nValue\\n". Subject is only included
    when present on a Notification.
    """
    if message.get("Type") in _SUBSCRIPTION_TYPES:
        keys = _SUBSCRIPTION_SIGNABLE_KEYS
    else:
        keys = _NOTIFICATION_SIGNABLE_KEYS

    parts = []
    for key in keys:
        if key in message and message[key] is not None:
            parts.append(f"{key}\n{message[key]}\n")
    return "".join(parts)


def is_valid_certificate_url(url: str) -> bool:
    """Check that a SigningCertURL is an https .pem URL on an SNS host."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False

    return (
        parsed.scheme == "https"
        and bool(parsed.hostname)
        and _CERT_HOST_PATTERN.match(parsed.hostname or "") is not None
        and parsed.path.endswith(".pem")
    )


class SNSMessageValidator(MessageValidator):
    """
    Verifies SNS message signatures.

    Signing certificates are cached in memory per URL; SNS rotates them
    rarely and the cache is idempotent, so concurrent requests may share it.
    """

    def __init__(self, settings: Settings | None = None):
        self._settings = settings or get_settings()
        self._certificates: dict[str, tuple[bytes, float]] = {}

    async def validate(self, message: Any) -> None:
        if not isinstance(message, Mapping):
            raise AuthenticationFailed("Message missing required keys.")

        normalized = normalize_lambda_keys(message)

        required = list(_REQUIRED_KEYS)
        if normalized.get("Type") in _SUBSCRIPTION_TYPES:
            required.extend(_SUBSCRIPTION_KEYS)
        if any(key not in normalized for key in required):
            raise AuthenticationFailed("Message missing required keys.")

        version = str(normalized["SignatureVersion"])
        hash_cls = _SIGNATURE_HASHES.get(version)
        if hash_cls is None:
            raise AuthenticationFailed(f"The signature version {version} is not supported.")

        cert_url = str(normalized["SigningCertURL"])
        if not is_valid_certificate_url(cert_url):
            raise AuthenticationFailed("The certificate is located on an invalid domain.")

        certificate_pem = await self._get_certificate(cert_url)
        self._verify_signature(normalized, certificate_pem, hash_cls())

    async def _get_certificate(self, url: str) -> bytes:
        now = time.monotonic()
        cached = self._certificates.get(url)
        if cached is not None:
            pem, fetched_at = cached
            if now - fetched_at < self._settings.certificate_cache_ttl_seconds:
                return pem

        try:
            async with httpx.AsyncClient(
                timeout=self._settings.certificate_timeout_seconds
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(
                f"Failed to fetch SNS signing certificate: {e}",
                extra={"cert_url": url},
            )
            raise AuthenticationFailed("Certificate could not be retrieved") from e

        pem = response.content
        self._certificates[url] = (pem, now)
        return pem

    def _verify_signature(
        self,
        message: Mapping[str, Any],
        certificate_pem: bytes,
        hash_algorithm: hashes.HashAlgorithm,
    ) -> None:
        try:
            certificate = x509.load_pem_x509_certificate(certificate_pem)
        except ValueError as e:
            raise AuthenticationFailed("The certificate could not be parsed.") from e

        public_key = certificate.public_key()
        if not isinstance(public_key, rsa.RSAPublicKey):
            raise AuthenticationFailed("The certificate does not hold an RSA public key.")

        try:
            signature = base64.b64decode(str(message["Signature"]), validate=True)
        except (binascii.Error, ValueError) as e:
            raise AuthenticationFailed("The message signature is invalid.") from e

        string_to_sign = build_string_to_sign(message).encode("utf-8")
        try:
            public_key.verify(signature, string_to_sign, padding.PKCS1v15(), hash_algorithm)
        except InvalidSignature as e:
            logger.warning(
                "SNS message signature verification failed",
                extra={
                    "message_id": message.get("MessageId"),
                    "topic_arn": message.get("TopicArn"),
                },
            )
            raise AuthenticationFailed("The message signature is invalid.") from e
