# OAuth callback router: receives Google's redirect and completes the flow.
# Created: 2026-10-18

from __future__ import annotations

import logging

from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.responses import PlainTextResponse

from availabot.errors import CSRFMismatch, ExchangeFailed, MalformedState, NoSuchFlow
from availabot.integrations.auth_flow import AuthFlowController

logger = logging.getLogger(__name__)

router = APIRouter(tags=["OAuth"])


@router.get("/oauth2", response_class=PlainTextResponse)
async def oauth_callback(
    request: Request,
    state: str = Query(""),
    code: str = Query(""),
    error: str = Query(""),
):
    """Complete an auth flow from Google's redirect."""
    if error:
        # User declined or the provider failed; the flow is simply abandoned.
        logger.info("OAuth provider reported error: %s", error)
        return PlainTextResponse("bummer")

    if not state or not code:
        return PlainTextResponse("missing state or code", status_code=400)

    controller: AuthFlowController = request.app.state.auth_flow
    try:
        await controller.complete_flow(state, code)
    except (MalformedState, NoSuchFlow, CSRFMismatch):
        return PlainTextResponse(
            "This authorization link is invalid or has expired. Ask the bot for a new one.",
            status_code=400,
        )
    except ExchangeFailed:
        return PlainTextResponse(
            "Could not complete authorization with Google. Please try again.",
            status_code=502,
        )

    return PlainTextResponse("kthxbai")


def create_app(controller: AuthFlowController) -> FastAPI:
    """Build the callback app serving :data:`router`."""
    app = FastAPI(title="availabot OAuth callback", docs_url=None, redoc_url=None)
    app.state.auth_flow = controller
    app.include_router(router)
    return app
