import logging
from typing import Protocol

import stripe
from pydantic import ValidationError

from webhook_receiver.schemas.events import VerifiedEvent

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = 300


class VerificationError(Exception):
    pass


class SignatureVerifier(Protocol):
    def verify(
        self, raw_body: bytes, signature_header: str | None, signing_secret: str
    ) -> VerifiedEvent: ...


class StripeSignatureVerifier:
    """
    Check a Stripe-Signature header with the Stripe SDK and decode the envelope.

    Raise VerificationError on a missing or bad signature, a timestamp outside
    the tolerance window, or a body that is not a well-formed event.
    """

    def __init__(self, tolerance: int = DEFAULT_TOLERANCE):
        self.tolerance = tolerance

    def verify(
        self, raw_body: bytes, signature_header: str | None, signing_secret: str
    ) -> VerifiedEvent:
        try:
            stripe.WebhookSignature.verify_header(
                raw_body, signature_header, signing_secret, self.tolerance
            )
        except stripe.SignatureVerificationError as e:
            raise VerificationError(str(e)) from e
        except UnicodeDecodeError as e:
            raise VerificationError("Webhook body is not valid UTF-8") from e

        try:
            event = VerifiedEvent.model_validate_json(raw_body)
        except ValidationError as e:
            raise VerificationError(f"Malformed event envelope: {e}") from e

        logger.debug(f"Verified event {event.id} of type {event.type}")
        return event
