"""
Webhook routes for inbound messaging-provider events.

The provider POSTs raw events here; the command classifies and processes them
and we return ``{"success": true}``. Webhooks carry no user auth.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from app.commands.webhooks.uazapi_command import UazapiWebhookCommand
from app.db import get_db

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


async def _handle(
    request: Request, db: Session, instance_name: Optional[str] = None
) -> dict[str, bool]:
    raw_body = await request.body()
    command = UazapiWebhookCommand(db)
    # Sync DB and provider I/O stays off the event loop
    return await run_in_threadpool(command.execute, raw_body, instance_name)


@router.post("/uazapi")
async def uazapi_webhook(
    request: Request,
    db: Session = Depends(get_db),
) -> dict[str, bool]:
    """Receive a uazapi event; the instance is named by the payload's ``instanceName``."""
    return await _handle(request, db)


@router.post("/uazapi/{instance_name}")
async def uazapi_instance_webhook(
    instance_name: str,
    request: Request,
    db: Session = Depends(get_db),
) -> dict[str, bool]:
    """Receive a uazapi event for the instance named in the path."""
    return await _handle(request, db, instance_name)


@router.options("/uazapi")
@router.options("/uazapi/{instance_name}")
def uazapi_webhook_options() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)
