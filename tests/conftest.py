import itertools
import os
import threading
from typing import Any, Dict, Generator, List, Optional

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

# Pas de Redis en tests: le lifespan désactive fastapi-limiter
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

from tailormint.app_setup.factory import create_app
from tailormint.exceptions import UpstreamError
from tailormint.orders.repository import DuplicateBagOrder
from tailormint.utils.security import require_user, require_tailor

TEST_USER: Dict[str, Any] = {
    "id": "test-user",
    "email": "test@example.com",
    "metadata": {"full_name": "Test User"},
    "token": "fake-token",
}
TEST_TAILOR: Dict[str, Any] = {
    "id": "tailor-1",
    "email": "tailor@example.com",
    "metadata": {"role": "tailor"},
    "token": "fake-tailor-token",
}


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


@pytest.fixture(scope="session")
def app():
    return create_app()


@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


# Simuler un utilisateur authentifié pour les endpoints protégés
@pytest.fixture(autouse=True)
def _override_require_user(app):
    app.dependency_overrides[require_user] = lambda: dict(TEST_USER)
    try:
        yield
    finally:
        app.dependency_overrides.pop(require_user, None)
        app.dependency_overrides.pop(require_tailor, None)


@pytest.fixture
def as_tailor(app):
    app.dependency_overrides[require_user] = lambda: dict(TEST_TAILOR)
    app.dependency_overrides[require_tailor] = lambda: dict(TEST_TAILOR)
    return TEST_TAILOR


# Aucun test ne parle à un vrai Supabase
@pytest.fixture(autouse=True)
def mock_db_dependency(request, monkeypatch):
    if request.node.get_closest_marker("real_supabase"):
        return
    monkeypatch.setattr("tailormint.infra.supabase_client.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("tailormint.infra.supabase_client.get_service_supabase", lambda: MagicMock())


def paid_session(
    session_id: str = "cs_test_1",
    *,
    bag_id: Optional[str] = "bag-1",
    user_id: str = "test-user",
    tailor_id: str = "tailor-1",
    amount_total: Optional[int] = 3500,
    payment_status: str = "paid",
) -> Dict[str, Any]:
    metadata: Dict[str, str] = {}
    if bag_id:
        metadata = {
            "bag_id": bag_id,
            "user_id": user_id,
            "tailor_id": tailor_id,
            "shipping_address": '{"street_address":"1 Main St","city":"Austin","state":"TX","zip_code":"73301"}',
        }
    return {
        "id": session_id,
        "payment_status": payment_status,
        "amount_total": amount_total,
        "metadata": metadata,
    }


class FakeStore:
    """
    Tables bags / bag_items / orders / order_items en mémoire.
    Reproduit UNIQUE(orders.bag_id) et UNIQUE(order_items.order_id, bag_item_id).
    fail_order_items / fail_close_bag: nombre de prochains appels en échec.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self.bags: Dict[str, Dict[str, Any]] = {}
        self.bag_items: List[Dict[str, Any]] = []
        self.orders: List[Dict[str, Any]] = []
        self.order_items: List[Dict[str, Any]] = []
        self.fail_order_items = 0
        self.fail_close_bag = 0

    def _next(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    def add_bag(self, bag_id="bag-1", user_id="test-user", tailor_id="tailor-1", status="open", items=1):
        self.bags[bag_id] = {"id": bag_id, "user_id": user_id, "tailor_id": tailor_id, "status": status}
        for i in range(items):
            self.bag_items.append({
                "id": f"{bag_id}-item-{i + 1}",
                "bag_id": bag_id,
                "design_id": f"design-{i + 1}",
                "price": 35.0,
                "tailor_notes": None,
                "measurement_id": None,
                "fabric_idx": 0,
                "color_idx": None,
                "style_type": "Agbada",
                "fabric_yards": 3,
                "yard_price": 5,
                "stitch_price": 20,
                "designs": {"title": "Royal Agbada", "images": ["https://img.test/a.jpg"]},
            })
        return self.bags[bag_id]

    # --- bag repository ---
    def get_open_bag(self, user_id):
        for bag in self.bags.values():
            if bag["user_id"] == user_id and bag["status"] == "open":
                return dict(bag)
        return None

    def get_bag(self, bag_id):
        bag = self.bags.get(bag_id)
        return dict(bag) if bag else None

    def create_bag(self, user_id, tailor_id):
        bag_id = self._next("bag")
        self.bags[bag_id] = {"id": bag_id, "user_id": user_id, "tailor_id": tailor_id, "status": "open"}
        return dict(self.bags[bag_id])

    def set_bag_status(self, bag_id, status):
        with self._lock:
            if self.fail_close_bag > 0:
                self.fail_close_bag -= 1
                raise UpstreamError("bag status update failed", retryable=True)
            self.bags[bag_id]["status"] = status

    def list_items(self, bag_id, with_design=False):
        return [dict(i) for i in self.bag_items if i["bag_id"] == bag_id]

    def count_items(self, bag_id):
        return len(self.list_items(bag_id))

    def insert_item(self, payload):
        row = {"id": self._next("item"), **payload}
        self.bag_items.append(row)
        return dict(row)

    def delete_item(self, bag_id, item_id):
        before = len(self.bag_items)
        self.bag_items = [i for i in self.bag_items if not (i["id"] == item_id and i["bag_id"] == bag_id)]
        return len(self.bag_items) < before

    def delete_all_items(self, bag_id):
        before = len(self.bag_items)
        self.bag_items = [i for i in self.bag_items if i["bag_id"] != bag_id]
        return before - len(self.bag_items)

    # --- orders repository ---
    def get_order_by_bag(self, bag_id):
        with self._lock:
            for order in self.orders:
                if order["bag_id"] == bag_id:
                    return dict(order)
        return None

    def insert_order(self, payload):
        with self._lock:
            if any(o["bag_id"] == payload["bag_id"] for o in self.orders):
                raise DuplicateBagOrder(payload["bag_id"])
            row = {"id": self._next("order"), **payload}
            self.orders.append(row)
            return dict(row)

    def list_order_items(self, order_id):
        with self._lock:
            return [dict(r) for r in self.order_items if r["order_id"] == order_id]

    def insert_order_items(self, rows):
        with self._lock:
            if self.fail_order_items > 0:
                self.fail_order_items -= 1
                raise RuntimeError("order_items insert failed")
            present = {(r["order_id"], r["bag_item_id"]) for r in self.order_items}
            inserted = []
            for r in rows:
                key = (r["order_id"], r["bag_item_id"])
                if key in present:
                    continue
                present.add(key)
                row = {"id": self._next("oi"), **r}
                self.order_items.append(row)
                inserted.append(dict(row))
            return inserted

    def install(self, monkeypatch) -> "FakeStore":
        for name in (
            "get_open_bag", "get_bag", "create_bag", "set_bag_status",
            "list_items", "insert_item", "delete_item", "delete_all_items",
        ):
            monkeypatch.setattr(f"tailormint.bag.repository.{name}", getattr(self, name))
        for name in ("get_order_by_bag", "insert_order", "list_order_items", "insert_order_items"):
            monkeypatch.setattr(f"tailormint.orders.repository.{name}", getattr(self, name))
        return self


@pytest.fixture
def store(monkeypatch) -> FakeStore:
    return FakeStore().install(monkeypatch)


@pytest.fixture
def notifications(monkeypatch) -> List[Dict[str, Any]]:
    """Enregistre les appels à notify_order_parties (aucun email réel)."""
    calls: List[Dict[str, Any]] = []

    def _fake_notify(type_, order, customer, tailor, extra=None):
        calls.append({"type": type_, "order_id": order.get("id"), "customer": customer, "tailor": tailor})
        return {"customer": {"success": True}, "tailor": {"success": True}}

    monkeypatch.setattr("tailormint.notifications.service.notify_order_parties", _fake_notify)
    monkeypatch.setattr(
        "tailormint.auth.repository.get_profiles",
        lambda ids: {
            "test-user": {"id": "test-user", "email": "test@example.com", "firstname": "Ada"},
            "tailor-1": {"id": "tailor-1", "email": "tailor@example.com", "firstname": "Kunle"},
        },
    )
    return calls


@pytest.fixture
def stripe_sessions(monkeypatch) -> Dict[str, Dict[str, Any]]:
    """Sessions Stripe connues (session_id -> dict), servies par un faux get_session."""
    sessions: Dict[str, Dict[str, Any]] = {}

    def _fake_get_session(session_id):
        if session_id not in sessions:
            raise AssertionError(f"unexpected session {session_id}")
        return dict(sessions[session_id])

    monkeypatch.setattr("tailormint.payments.stripe_client.get_session", _fake_get_session)
    return sessions


@pytest.fixture
def make_session():
    return paid_session
