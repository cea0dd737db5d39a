import hashlib
import hmac
import json
import time
from datetime import datetime, timedelta
from typing import Any, Dict, Generator

import mongomock
import pytest
from fastapi.testclient import TestClient

from evently.app import app as fastapi_app
from evently.infra.mongo_client import MongoStore, get_store
from mongo_fakes import AsyncMockClient

WEBHOOK_SECRET = "whsec_test"

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)
        elif "tests/functional/" in nodeid:
            item.add_marker(pytest.mark.functional)


@pytest.fixture(autouse=True)
def _settings(monkeypatch):
    # Secrets factices: le lifespan refuse de démarrer sans eux
    monkeypatch.setattr("evently.config.STRIPE_SECRET_KEY", "sk_test_x")
    monkeypatch.setattr("evently.config.STRIPE_WEBHOOK_SECRET", WEBHOOK_SECRET)
    monkeypatch.setattr("evently.config.MONGODB_URI", "mongodb://localhost:27017")
    monkeypatch.setattr("evently.config.MONGODB_DB_NAME", "evently")


@pytest.fixture()
def mongo():
    return mongomock.MongoClient()


@pytest.fixture()
def db(mongo):
    """Base synchrone partagée avec le store: seed et assertions directes."""
    return mongo["evently"]


@pytest.fixture()
def store(mongo) -> MongoStore:
    return MongoStore("mongodb://test", "evently", client_factory=lambda uri: AsyncMockClient(mongo))


@pytest.fixture(scope="session")
def app():
    return fastapi_app


@pytest.fixture()
def client(app, store) -> Generator[TestClient, None, None]:
    app.state.store = store
    app.dependency_overrides[get_store] = lambda: store
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.pop(get_store, None)
        app.state.store = None


@pytest.fixture()
def sign_payload():
    """Construit un en-tête Stripe-Signature valide (t=...,v1=hmac_sha256)."""
    def _sign(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: int = None) -> str:
        ts = int(timestamp if timestamp is not None else time.time())
        signed = f"{ts}.{payload.decode('utf-8')}".encode("utf-8")
        digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
        return f"t={ts},v1={digest}"
    return _sign


@pytest.fixture()
def completed_event():
    """Fabrique d'enveloppes checkout.session.completed sérialisées."""
    def _event(payment_id="cs_test_1", amount_total=2500, metadata=None, event_type="checkout.session.completed") -> bytes:
        body: Dict[str, Any] = {
            "id": f"evt_{payment_id}",
            "object": "event",
            "type": event_type,
            "data": {
                "object": {
                    "id": payment_id,
                    "object": "checkout.session",
                    "amount_total": amount_total,
                    "metadata": {"eventId": "E1", "buyerId": "U1"} if metadata is None else metadata,
                }
            },
        }
        return json.dumps(body).encode("utf-8")
    return _event


@pytest.fixture()
def seeded(db):
    """
    Jeu de données minimal:
    - organisateur O1, acheteurs U1 (Alice Martin) et U2 (Bob Stone)
    - événement E1 (payant) organisé par O1
    - 3 commandes sur E1 (2 pour U1, 1 pour U2) à des dates croissantes
    """
    base = datetime(2024, 5, 1, 12, 0, 0)
    db["users"].insert_many([
        {"_id": "O1", "firstName": "Olga", "lastName": "Organiser"},
        {"_id": "U1", "firstName": "Alice", "lastName": "Martin"},
        {"_id": "U2", "firstName": "Bob", "lastName": "Stone"},
    ])
    db["events"].insert_one({
        "_id": "E1",
        "title": "Concert",
        "price": "25",
        "isFree": False,
        "startDateTime": base + timedelta(days=30),
        "endDateTime": base + timedelta(days=30, hours=3),
        "organizer": "O1",
        "category": "CAT1",
    })
    db["orders"].insert_many([
        {"stripeId": "cs_a", "event": "E1", "buyer": "U1", "totalAmount": "25.00", "createdAt": base},
        {"stripeId": "cs_b", "event": "E1", "buyer": "U2", "totalAmount": "25.00", "createdAt": base + timedelta(hours=1)},
        {"stripeId": "cs_c", "event": "E1", "buyer": "U1", "totalAmount": "25.00", "createdAt": base + timedelta(hours=2)},
    ])
    return db
