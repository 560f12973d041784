import hashlib
import hmac
import json
import os
import time

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before the app reads its settings
os.environ.update(
    {
        "STRIPE_ACCOUNT_SECRET": "sk_test_123",
        "STRIPE_WEBHOOK_SECRET": "whsec_test",
    }
)

from webhook_receiver.core.config import get_settings
from webhook_receiver.main import app
from webhook_receiver.schemas.events import VerifiedEvent
from webhook_receiver.services.stripe_verify import VerificationError


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def reset_overrides():
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def sign(settings):
    """Build a Stripe-Signature header the way the provider does."""

    def _stripe_header(body: bytes, secret: str | None = None, timestamp=None):
        secret = secret or settings.stripe_webhook_secret
        ts = int(time.time()) if timestamp is None else timestamp
        payload = f"{ts}.{body.decode()}".encode("utf-8")
        sig = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()
        return f"t={ts},v1={sig}"

    return _stripe_header


def make_event_body(event_type: str, obj: dict, event_id: str = "evt_123") -> bytes:
    return json.dumps(
        {
            "id": event_id,
            "object": "event",
            "type": event_type,
            "created": 1700000000,
            "livemode": False,
            "data": {"object": obj},
        }
    ).encode()


@pytest.fixture
def event_body():
    return make_event_body


class FakeVerifier:
    """Accepts or rejects every call, recording what it was given."""

    def __init__(self, event: VerifiedEvent | None = None):
        self.event = event
        self.calls = []

    def verify(self, raw_body, signature_header, signing_secret):
        self.calls.append((raw_body, signature_header, signing_secret))
        if self.event is None:
            raise VerificationError("rejected by fake verifier")
        return self.event


@pytest.fixture
def fake_verifier():
    from webhook_receiver.main import get_verifier

    def _install(event: VerifiedEvent | None = None) -> FakeVerifier:
        verifier = FakeVerifier(event)
        app.dependency_overrides[get_verifier] = lambda: verifier
        return verifier

    return _install


class SpyHandler:
    def __init__(self, wrapped=None):
        self.wrapped = wrapped
        self.events = []

    def __call__(self, event):
        self.events.append(event)
        if self.wrapped is not None:
            self.wrapped(event)


@pytest.fixture
def spy_router():
    """Install a router whose payment_intent.succeeded handler is spied on."""
    from webhook_receiver.handlers.payment_intent import payment_succeeded
    from webhook_receiver.main import get_event_router
    from webhook_receiver.services.dispatch import EventRouter

    spy = SpyHandler(payment_succeeded)
    router = EventRouter()
    router.add("payment_intent.succeeded", spy)
    app.dependency_overrides[get_event_router] = lambda: router
    return spy
