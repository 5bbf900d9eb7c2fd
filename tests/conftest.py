from __future__ import annotations

import itertools

import pytest

from hopebridge import create_app
from hopebridge.config import TestingConfig
from hopebridge.extensions import db
from hopebridge.models import Wish
from hopebridge.services import build_services
from hopebridge.services.donor import DonorService
from hopebridge.services.email import ResendMailer
from hopebridge.store import DocumentStore


@pytest.fixture()
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    """Capture Resend calls instead of hitting the network."""
    sent = []

    def fake_send(self, to, subject, html):
        sent.append({"to": to, "subject": subject, "html": html})
        return {"id": f"email_{len(sent)}"}

    monkeypatch.setattr(ResendMailer, "send", fake_send)
    return sent


@pytest.fixture()
def store(app):
    return DocumentStore(db.session)


@pytest.fixture()
def services(app, store):
    return build_services(app.config, store)


@pytest.fixture()
def donors(app, services):
    # Distinct millisecond references for back-to-back payments.
    ticks = itertools.count(1_700_000_000_000, 10)
    return DonorService(
        services.store,
        services.gateway,
        redirect_url="http://testserver/donor/payment-success",
        clock=lambda: next(ticks) / 1000,
    )


@pytest.fixture()
def make_wish(store):
    def _make(child_id="c1", item="Pair of shoes", status="pending", **extra):
        return store.add(Wish(child_id=child_id, item=item, status=status, **extra))

    return _make
