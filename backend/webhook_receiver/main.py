import logging
from contextlib import asynccontextmanager

import stripe
import uvicorn
from fastapi import Depends, FastAPI, Request, Response, status

from webhook_receiver.core.config import Settings, get_settings
from webhook_receiver.handlers.registry import build_event_router
from webhook_receiver.middleware.body_size import (
    MAX_BODY_BYTES,
    BodySizeLimitMiddleware,
    IngressError,
    read_limited_body,
)
from webhook_receiver.services.dispatch import EventRouter
from webhook_receiver.services.stripe_verify import (
    SignatureVerifier,
    StripeSignatureVerifier,
    VerificationError,
)

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "Stripe-Signature"


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    # Kept for outbound API calls; the webhook path itself never uses it.
    stripe.api_key = settings.stripe_account_secret
    yield


app = FastAPI(
    title="Payment Webhook Receiver",
    description="Verifies Stripe webhooks and dispatches them by event type",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=MAX_BODY_BYTES)

event_router = build_event_router()


# ---------- dependencies ----------
def get_verifier(settings: Settings = Depends(get_settings)) -> SignatureVerifier:
    return StripeSignatureVerifier(tolerance=settings.webhook_tolerance)


def get_event_router() -> EventRouter:
    return event_router


@app.get("/health", include_in_schema=False)
async def health():
    return {"status": "ok"}


# ---------- webhook ----------
@app.post("/webhook")
async def handle_webhook(
    request: Request,
    settings: Settings = Depends(get_settings),
    verifier: SignatureVerifier = Depends(get_verifier),
    router: EventRouter = Depends(get_event_router),
):
    try:
        payload = await read_limited_body(request, MAX_BODY_BYTES)
    except IngressError as e:
        logger.error(f"Error reading request body: {e}")
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

    try:
        event = verifier.verify(
            payload,
            request.headers.get(SIGNATURE_HEADER),
            settings.stripe_webhook_secret,
        )
    except VerificationError as e:
        logger.error(f"Error verifying webhook signature: {e}")
        return Response(status_code=status.HTTP_400_BAD_REQUEST)

    outcome = router.dispatch(event)
    logger.info(f"Event {event.id} ({event.type}) dispatched: {outcome.value}")
    return Response(status_code=status.HTTP_200_OK)


def run() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(f"Listening on {settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port)
