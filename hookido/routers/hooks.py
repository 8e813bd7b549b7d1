"""
Hooks Router

Public SNS webhook receiver endpoint, one per registered hookido instance.
The endpoint does NOT require authentication - it is called by SNS.

Security is handled by the SNS message signature (see
hookido.services.sns.signature), unless skip_payload_validation is set.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from fastapi import APIRouter, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

if TYPE_CHECKING:
    from hookido.plugin import HookidoInstance

logger = logging.getLogger(__name__)


def _to_response(result: Any) -> Response:
    """Convert a handler result to a response."""
    if isinstance(result, Response):
        return result
    if result is None:
        return Response(status_code=status.HTTP_200_OK)
    return JSONResponse(content=jsonable_encoder(result), status_code=status.HTTP_200_OK)


def create_hook_router(instance: HookidoInstance, path: str) -> APIRouter:
    """
    Build the webhook router for one hookido instance.

    Args:
        instance: Registered instance (validator, dispatcher, options)
        path: Route path

    Returns:
        APIRouter with a single POST route
    """
    route = instance.options.route
    router = APIRouter(tags=list(route.tags))

    async def receive_sns_message(request: Request) -> Response:
        """
        Receive an SNS message.

        Processing flow:
        1. Parse and authenticate the body
        2. Dispatch to the handler registered for the message Type
        3. Return the handler's result (200), or 500 on any failure
        """
        body = await request.body()

        logger.debug(
            f"SNS message received: POST {path}",
            extra={
                "path": path,
                "content_length": len(body),
                "message_type": request.headers.get("x-amz-sns-message-type"),
            },
        )

        try:
            message = await instance.payload_validator.validate(
                body, instance.options.skip_payload_validation
            )
            result = await instance.dispatcher.dispatch(request, message)
        except Exception as e:
            logger.error(f"Error processing SNS message: {e}", exc_info=True)
            # Return 500 but don't expose internal error details
            return Response(
                content="Internal server error",
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                media_type="text/plain",
            )

        return _to_response(result)

    router.add_api_route(
        path,
        receive_sns_message,
        methods=["POST"],
        name=route.name,
        summary="SNS webhook receiver",
        description=route.description,
        include_in_schema=route.include_in_schema,
    )
    return router
