from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient


@pytest.fixture()
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> TestClient:
    db_path = tmp_path / "storefront_orders.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{db_path}")
    monkeypatch.setenv("STOREFRONT_DB_AUTO_CREATE", "true")

    from services.api.app.main import app

    with TestClient(app) as c:
        _seed_users()
        yield c


def _seed_users() -> None:
    from services.api.app.db.database import db_session
    from services.api.app.db.models import AuthSession, User

    db = db_session()
    try:
        for uid in ("u-1", "u-2"):
            db.add(User(id=uid, display_name=uid))
            db.add(AuthSession(access_token=f"tok-{uid}", user_id=uid))
        db.commit()
    finally:
        db.close()


def _auth(user_id: str) -> dict[str, str]:
    return {"Authorization": f"Bearer tok-{user_id}"}


def _place(client: TestClient, user_id: str, key: str, *, name: str, quantity: int = 1) -> dict:
    resp = client.post(
        "/functions/v1/place-order",
        json={
            "userId": user_id,
            "quantity": quantity,
            "shipping": {
                "name": name,
                "phone": "555-0100",
                "address1": f"{name} Street 1",
                "city": "Denver",
                "state": "CO",
                "postal": "80202",
                "country": "US",
            },
            "notes": "leave at door",
            "source": "site_checkout",
        },
        headers={"Idempotency-Key": key, **_auth(user_id)},
    )
    assert resp.status_code == 201
    return resp.json()


def _set_timestamps(order_number: str, *, placed_at: datetime | None, created_at: datetime) -> None:
    from services.api.app.db.database import db_session
    from services.api.app.db.models import Order

    db = db_session()
    try:
        order = db.query(Order).filter(Order.order_number == order_number).one()
        order.placed_at = placed_at
        order.created_at = created_at
        db.commit()
    finally:
        db.close()


def test_latest_shipping_requires_session(client: TestClient) -> None:
    resp = client.get("/functions/v1/orders/latest-shipping")
    assert resp.status_code == 401
    assert resp.json()["error"] == "Authentication required"


def test_latest_shipping_empty_for_new_user(client: TestClient) -> None:
    resp = client.get("/functions/v1/orders/latest-shipping", headers=_auth("u-1"))
    assert resp.status_code == 200
    assert resp.json() == {"shipping": None}


def test_latest_shipping_prefers_most_recently_placed(client: TestClient) -> None:
    now = datetime.utcnow()
    older = _place(client, "u-1", "k1", name="Older")["order"]["order_number"]
    newer = _place(client, "u-1", "k2", name="Newer")["order"]["order_number"]
    unplaced = _place(client, "u-1", "k3", name="Unplaced")["order"]["order_number"]

    _set_timestamps(older, placed_at=now - timedelta(days=2), created_at=now)
    _set_timestamps(newer, placed_at=now - timedelta(days=1), created_at=now - timedelta(days=3))
    _set_timestamps(unplaced, placed_at=None, created_at=now + timedelta(days=1))

    resp = client.get("/functions/v1/orders/latest-shipping", headers=_auth("u-1"))
    shipping = resp.json()["shipping"]

    assert shipping["name"] == "Newer"
    assert shipping["country"] == "US"
    assert shipping["address2"] == ""


def test_latest_shipping_ignores_other_users(client: TestClient) -> None:
    _place(client, "u-2", "k1", name="Someone Else")

    resp = client.get("/functions/v1/orders/latest-shipping", headers=_auth("u-1"))
    assert resp.json() == {"shipping": None}


def test_list_orders_most_recent_first(client: TestClient) -> None:
    first = _place(client, "u-1", "k1", name="A")["order"]["order_number"]
    second = _place(client, "u-1", "k2", name="B", quantity=3)["order"]["order_number"]
    _set_timestamps(first, placed_at=datetime.utcnow() - timedelta(hours=1), created_at=datetime.utcnow())

    resp = client.get("/functions/v1/orders", headers=_auth("u-1"))
    assert resp.status_code == 200

    orders = resp.json()["orders"]
    assert [o["order_number"] for o in orders] == [second, first]
    assert orders[0]["status_label"] == "Pending Payment"
    assert orders[0]["total"] == "$102.26"


def test_list_orders_filters_by_status(client: TestClient) -> None:
    _place(client, "u-1", "k1", name="A")

    resp = client.get("/functions/v1/orders", params={"status": "shipped"}, headers=_auth("u-1"))
    assert resp.json() == {"orders": []}


def test_order_detail_includes_timeline(client: TestClient) -> None:
    number = _place(client, "u-1", "k1", name="A", quantity=2)["order"]["order_number"]

    resp = client.get(f"/functions/v1/orders/{number}", headers=_auth("u-1"))
    assert resp.status_code == 200

    data = resp.json()
    assert data["order"]["order_number"] == number
    assert data["totals"]["human"]["total"] == "$70.17"
    assert data["shipping"]["city"] == "Denver"
    assert data["notes"] == "leave at door"
    assert [e["event_type"] for e in data["events"]] == ["ORDER_PLACED"]
    assert data["events"][0]["payload"]["order_number"] == number


def test_order_detail_hides_other_users_orders(client: TestClient) -> None:
    number = _place(client, "u-2", "k1", name="B")["order"]["order_number"]

    resp = client.get(f"/functions/v1/orders/{number}", headers=_auth("u-1"))
    assert resp.status_code == 404
    assert resp.json()["error"] == "Order not found"
