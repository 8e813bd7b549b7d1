"""
Subscription lookup across paginated ListSubscriptionsByTopic results.
"""

import logging

from hookido.core.exceptions import SubscriptionNotFound, SubscriptionPending
from hookido.services.sns.gateway import SNSGateway

logger = logging.getLogger(__name__)


class SubscriptionResolver:
    """
    Finds the subscription ARN for a (protocol, endpoint) pair on a topic.

    SNS is the only source of truth: every lookup walks the listing from the
    first page, one page at a time, and stops at the first match.
    """

    def __init__(self, gateway: SNSGateway):
        self._gateway = gateway

    async def find_subscription_arn(
        self, topic_arn: str, protocol: str, endpoint: str
    ) -> str:
        """
        Find the subscription ARN for an endpoint.

        Args:
            topic_arn: Topic to search
            protocol: Subscription protocol (compared case-insensitively)
            endpoint: Subscription endpoint (compared case-insensitively)

        Returns:
            The confirmed subscription ARN

        Raises:
            SubscriptionPending: The first match has not been confirmed yet
            SubscriptionNotFound: No page contains a match
            ProviderRequestFailed: Listing failed
        """
        next_token: str | None = None
        pages = 0

        while True:
            page = await self._gateway.list_subscriptions_page(topic_arn, next_token)
            pages += 1

            match = next((sub for sub in page.entries if sub.matches(protocol, endpoint)), None)
            if match is not None:
                if match.is_pending:
                    raise SubscriptionPending()
                logger.debug(
                    f"Found subscription {match.subscription_arn} after {pages} page(s)",
                    extra={"topic_arn": topic_arn, "endpoint": endpoint},
                )
                return match.subscription_arn

            if not page.next_token:
                raise SubscriptionNotFound(topic_arn, endpoint)
            next_token = page.next_token
