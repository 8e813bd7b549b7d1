"""
Inbound SNS payload parsing and authentication.
"""

import json
import logging
from typing import Any

from hookido.core.exceptions import MalformedPayload
from hookido.services.sns.protocol import MessageValidator
from hookido.services.sns.signature import SNSMessageValidator

logger = logging.getLogger(__name__)


def _is_falsy_json(data: Any) -> bool:
    """Scalar JSON values that carry no message. Empty objects and arrays are kept."""
    if data is None or data is False or data == "":
        return True
    return type(data) in (int, float) and data == 0


class PayloadValidator:
    """
    Turns a raw webhook body into an authenticated SNS message.

    Structured payloads (dict/list) are used as-is; text and bytes are
    parsed as JSON. Authentication is delegated to a MessageValidator.
    """

    def __init__(self, message_validator: MessageValidator | None = None):
        self._message_validator = message_validator or SNSMessageValidator()

    async def validate(self, raw_payload: Any, skip_validation: bool = False) -> Any:
        """
        Validate and parse an SNS request payload.

        Args:
            raw_payload: Request body (bytes/str) or an already parsed structure
            skip_validation: If True skip signature validation and only parse

        Returns:
            The parsed message, unchanged

        Raises:
            MalformedPayload: Body is not JSON, or parses to a falsy value
            AuthenticationFailed: Signature validation failed
        """
        data = self._parse(raw_payload)

        if skip_validation:
            logger.debug("Skipping SNS signature validation")
            return data

        await self._message_validator.validate(data)
        return data

    @staticmethod
    def _parse(raw_payload: Any) -> Any:
        if isinstance(raw_payload, (dict, list)):
            return raw_payload

        if raw_payload is None:
            raise MalformedPayload("Invalid SNS payload: Not valid JSON")

        try:
            data = json.loads(raw_payload)
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as e:
            raise MalformedPayload(f"Invalid SNS payload: {e}") from e

        if _is_falsy_json(data):
            raise MalformedPayload("Invalid SNS payload: Not valid JSON")
        return data
