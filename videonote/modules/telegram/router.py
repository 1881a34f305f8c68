"""FastAPI application for the webhook transport."""

import hmac
from typing import Optional

from fastapi import APIRouter, FastAPI, Header, HTTPException, status

from videonote.modules.telegram.dispatcher import UpdateDispatcher
from videonote.modules.telegram.schemas import TelegramUpdate

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


def create_webhook_router(dispatcher: UpdateDispatcher, secret: Optional[str] = None) -> APIRouter:
    """Build the router receiving updates pushed by Telegram.

    Updates are acknowledged immediately and processed in background tasks.
    """
    router = APIRouter(tags=["telegram"])

    @router.post("/webhook")
    async def receive_update(
        update: TelegramUpdate,
        secret_token: Optional[str] = Header(default=None, alias=SECRET_HEADER),
    ) -> dict:
        if secret and not hmac.compare_digest(secret_token or "", secret):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid secret token")
        dispatcher.dispatch(update)
        return {"ok": True}

    @router.get("/health", tags=["health"])
    async def health_check() -> dict:
        return {"status": "healthy", "pending_updates": dispatcher.pending}

    return router


def create_webhook_app(dispatcher: UpdateDispatcher, secret: Optional[str] = None) -> FastAPI:
    app = FastAPI(title="Video Note Bot", docs_url=None, redoc_url=None)
    app.include_router(create_webhook_router(dispatcher, secret))
    return app
