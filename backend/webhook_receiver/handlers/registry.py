from webhook_receiver.handlers.payment_intent import payment_succeeded
from webhook_receiver.services.dispatch import EventRouter


def build_event_router() -> EventRouter:
    """New event types are supported by adding a handler here."""
    router = EventRouter()
    router.add("payment_intent.succeeded", payment_succeeded)
    return router
