"""Voice platform (ElevenLabs) webhook handlers"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.database import get_db
from app.exceptions import ChattableError, WebhookVerificationError
from app.schemas.webhook import WebhookEvent
from app.services.agent import SIGNATURE_HEADER, WebhookVerifier, get_webhook_verifier
from app.services.ordering import create_order

router = APIRouter()
logger = structlog.get_logger()

POST_CALL_TRANSCRIPTION = "post_call_transcription"
CONVERSATION_DONE = "done"


@router.get("")
async def webhook_status():
    """Liveness check for the platform's webhook configuration"""
    return {"status": "webhook listening"}


@router.post("")
async def handle_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db),
    verifier: WebhookVerifier = Depends(get_webhook_verifier),
):
    """
    Handle a signed event from the voice platform.

    Finished calls with collected data become orders. Ingestion failures are
    logged and still acknowledged so the platform does not retry.
    """
    raw_body = await request.body()

    try:
        payload = verifier.verify(raw_body, request.headers.get(SIGNATURE_HEADER))
        event = WebhookEvent.model_validate(payload)
    except WebhookVerificationError as e:
        logger.warning("Webhook verification failed", error=e.message)
        return JSONResponse(status_code=401, content={"error": e.message})
    except ValidationError as e:
        logger.warning("Malformed webhook event", errors=e.error_count())
        return JSONResponse(status_code=400, content={"error": "Malformed event"})

    data = event.data
    results = data.analysis.data_collection_results if data.analysis else None

    logger.info(
        "Webhook received",
        event_type=event.type,
        agent_id=data.agent_id,
        conversation_id=data.conversation_id,
        status=data.status,
    )

    if event.type != POST_CALL_TRANSCRIPTION or data.status != CONVERSATION_DONE or not results:
        return {"received": True}

    try:
        order = await create_order(db, data.agent_id, results)
        logger.info("Order created from call", order_id=order.id, conversation_id=data.conversation_id)
    except ChattableError as e:
        logger.error(
            "Order ingestion failed",
            agent_id=data.agent_id,
            conversation_id=data.conversation_id,
            error=e.message,
        )
    except Exception:
        logger.exception(
            "Order ingestion crashed",
            agent_id=data.agent_id,
            conversation_id=data.conversation_id,
        )

    return {"received": True}
