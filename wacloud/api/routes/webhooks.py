"""
Webhook verification route.

Exposes the handshake as a FastAPI router so an application can mount it
with app.include_router(create_webhook_router(verifier)).
"""

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse

from wacloud.webhooks.verifier import WebhookVerifier


def create_webhook_router(
    verifier: WebhookVerifier, path: str = "/webhook"
) -> APIRouter:
    """
    Create the webhook verification router.

    Args:
        verifier: WebhookVerifier holding the configured verify token
        path: Route path for the GET handshake

    Returns:
        APIRouter with the verification endpoint
    """
    router = APIRouter(
        tags=["Webhooks"],
        responses={
            400: {"description": "Bad Request - Webhook verification failed"},
            500: {"description": "Internal Server Error"},
        },
    )

    @router.get(path)
    async def verify_webhook(request: Request):
        """
        Answer the hub.mode / hub.verify_token / hub.challenge handshake.

        Returns the raw challenge as text on success, an empty 400 on
        mismatch and {"message": ...} with 500 on an internal fault.
        """
        result = verifier.handle(request.query_params)

        if result.status_code == 200:
            return PlainTextResponse(content=result.body, status_code=200)
        if result.status_code == 500:
            return JSONResponse(content=result.body, status_code=500)
        return Response(status_code=result.status_code)

    return router
