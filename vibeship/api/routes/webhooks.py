"""GitHub webhook API routes."""

import json
import logging

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from vibeship.api.deps import get_webhook_secret
from vibeship.core.errors import AuthenticationFailure, ValidationFailure
from vibeship.core.security.webhook_signature import verify_webhook_signature
from vibeship.core.storage.database import get_db, get_session_factory
from vibeship.models.schemas.webhook import WebhookResponse
from vibeship.services.webhook_router import route_webhook_event

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/github", response_model=WebhookResponse, response_model_exclude_none=True)
async def receive_github_webhook(
    request: Request,
    x_hub_signature_256: str | None = Header(None),
    x_github_event: str | None = Header(None),
    secret: str = Depends(get_webhook_secret),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """
    Receive a GitHub webhook delivery.

    The signature is checked against the raw body before anything is parsed.
    Deliveries for repositories no project links to are acknowledged with
    200 and otherwise ignored.
    """
    body = await request.body()

    if not verify_webhook_signature(body, x_hub_signature_256, secret):
        logger.warning("Invalid webhook signature for %s delivery", x_github_event or "unknown")
        raise AuthenticationFailure("Invalid signature")

    try:
        payload = json.loads(body)
    except ValueError:
        raise ValidationFailure("Invalid JSON payload")

    if not x_github_event:
        raise ValidationFailure("Missing event type")

    repository = payload.get("repository") if isinstance(payload, dict) else None
    repo_id = repository.get("id") if isinstance(repository, dict) else None
    if not isinstance(repo_id, int) or isinstance(repo_id, bool) or not repo_id:
        raise ValidationFailure("Missing repository ID")

    return await route_webhook_event(db, session_factory, x_github_event, payload, repo_id)


@router.get("/github")
async def github_webhook_ping():
    """Liveness check for the webhook endpoint."""
    return {"message": "GitHub webhook endpoint active"}
