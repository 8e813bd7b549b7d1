"""
Core Exceptions

Custom exceptions for the hookido SNS webhook plugin.
"""


class HookidoError(Exception):
    """Base class for every error raised by hookido."""

    def __init__(self, message: str = "Hookido error"):
        self.message = message
        super().__init__(self.message)


class ConfigurationError(HookidoError):
    """
    Raised when plugin options are invalid or incomplete.

    Also used by the default confirmation handler when no topic.arn is
    configured to confirm against.
    """


class MalformedPayload(HookidoError):
    """Raised when the webhook body is not a usable JSON document."""


class AuthenticationFailed(HookidoError):
    """
    Raised when an SNS message fails authenticity checks.

    The message names the specific defect (missing keys, bad certificate
    domain, invalid signature, ...).
    """


class UnknownMessageType(HookidoError):
    """Raised when no handler is registered for a message's Type."""

    def __init__(self, message_type: str):
        self.message_type = message_type
        super().__init__(f"Unable to handle message with type: {message_type}")


class TopicMismatch(HookidoError):
    """Raised when a confirmation message targets a different topic than configured."""

    def __init__(self, expected: str, received: str | None):
        self.expected = expected
        self.received = received
        super().__init__(
            f"Confirm subscription request for {received} doesn't match configured topic arn"
        )


class ConfirmationRequestFailed(HookidoError):
    """Raised when the SubscribeURL callback could not be fetched successfully."""


class ProviderRequestFailed(HookidoError):
    """
    Wraps any failed call to SNS.

    Attributes:
        operation: SNS API operation name (e.g. "Subscribe")
        cause: Underlying botocore exception
    """

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"SNS {operation} failed: {cause}")


class SubscriptionLookupError(HookidoError):
    """Base for the expected outcomes of a subscription lookup that yield no ARN."""


class SubscriptionNotFound(SubscriptionLookupError):
    """No subscription for the endpoint exists on the topic."""

    def __init__(self, topic_arn: str, endpoint: str):
        self.topic_arn = topic_arn
        self.endpoint = endpoint
        super().__init__(
            f"Couldn't find subscription arn for {endpoint} on topic: {topic_arn}"
        )


class SubscriptionPending(SubscriptionLookupError):
    """The subscription exists but has not been confirmed yet."""

    def __init__(self, message: str = "Subscription is pending confirmation"):
        super().__init__(message)
