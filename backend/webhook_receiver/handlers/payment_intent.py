import logging

from pydantic import ValidationError

from webhook_receiver.schemas.events import PaymentIntentRecord, VerifiedEvent
from webhook_receiver.services.dispatch import HandlerError

logger = logging.getLogger(__name__)


def payment_succeeded(event: VerifiedEvent) -> None:
    try:
        intent = PaymentIntentRecord.model_validate(event.data.raw)
    except ValidationError as e:
        logger.error(f"Error parsing webhook JSON: {e}")
        raise HandlerError(f"Invalid payment intent in event {event.id}") from e

    logger.info(f"PaymentIntent was successful! ID: {intent.id}")
