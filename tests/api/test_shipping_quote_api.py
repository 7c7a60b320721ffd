# tests/api/test_shipping_quote_api.py
from __future__ import annotations

from tests.factories import make_pincode_zone, seed_bengaluru


def _payload(**kw):
    out = {
        "delivery_pincode": "560001",
        "items": [{"weight": 1.0, "quantity": 1, "dimensions": {"length": 20, "width": 14, "height": 2}}],
        "order_value": 1000,
        "order_date": "2024-01-01",
        "order_time": "10:00:00",
    }
    out.update(kw)
    return out


def test_quote_returns_options_sorted_with_costs(client, db):
    seed_bengaluru(db)

    r = client.post("/shipping-quote", json=_payload())
    assert r.status_code == 200, r.text
    body = r.json()

    assert body["ok"] is True
    assert body["deliverable"] is True
    assert body["zone"] == "B"
    assert body["zone_name"] == "Same State/Region"
    assert body["base_shipping_cost"] == 60.0

    codes = [o["code"] for o in body["available_options"]]
    assert codes == ["standard", "express"]
    express = body["available_options"][1]
    assert express["cost"]["total_cost"] == 90.0
    assert express["delivery_window"]["label"] == "2 business days"
    assert express["estimated_delivery"]["min_date"] == "2024-01-03"
    assert express["cod_available"] is True
    assert body["reasons"]


def test_quote_after_cutoff_drops_express(client, db):
    seed_bengaluru(db)
    r = client.post("/shipping-quote", json=_payload(order_time="14:30:00"))
    assert [o["code"] for o in r.json()["available_options"]] == ["standard"]


def test_quote_cod(client, db):
    seed_bengaluru(db)
    r = client.post("/shipping-quote", json=_payload(payment_mode="cod", order_value=5000))
    body = r.json()
    assert body["cod_charge"] == 100.0
    assert body["base_shipping_cost"] == 160.0


def test_unknown_pincode_is_200_not_deliverable(client, db):
    seed_bengaluru(db)
    r = client.post("/shipping-quote", json=_payload(delivery_pincode="999999"))
    assert r.status_code == 200
    body = r.json()
    assert body["deliverable"] is False
    assert body["failure_code"] == "ZONE_NOT_FOUND"
    assert body["available_options"] == []


def test_missing_rate_is_200_configuration_missing(client, db):
    make_pincode_zone(db, "110001", "D")
    db.commit()
    r = client.post("/shipping-quote", json=_payload(delivery_pincode="110001"))
    assert r.status_code == 200
    assert r.json()["failure_code"] == "CONFIGURATION_MISSING"


def test_bad_pincode_is_422_with_code(client, db):
    r = client.post("/shipping-quote", json=_payload(delivery_pincode="5600"))
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "INVALID_PINCODE"


def test_schema_errors_are_422(client, db):
    assert client.post("/shipping-quote", json=_payload(items=[])).status_code == 422
    assert client.post("/shipping-quote", json=_payload(items=[{"weight": 0}])).status_code == 422
    assert client.post("/shipping-quote", json=_payload(order_value=-5)).status_code == 422
    assert client.post("/shipping-quote", json=_payload(payment_mode="card")).status_code == 422


def test_list_zones(client):
    r = client.get("/shipping-quote/zones")
    assert r.status_code == 200
    zones = r.json()
    assert [z["zone"] for z in zones] == ["A", "B", "C", "D", "E"]
    assert zones[4]["name"] == "Northeast & J&K"


def test_serviceability(client, db):
    make_pincode_zone(db, "781001", "E", city="Guwahati", state="Assam", cod_available=False, expected_delivery_days=7)
    db.commit()

    r = client.get("/shipping-quote/serviceability/781001")
    assert r.status_code == 200
    body = r.json()
    assert body["serviceable"] is True
    assert body["zone"] == "E"
    assert body["city"] == "Guwahati"
    assert body["cod_available"] is False
    assert body["expected_delivery_days"] == 7

    r = client.get("/shipping-quote/serviceability/400001")
    assert r.json() == {
        "pincode": "400001",
        "serviceable": False,
        "zone": None,
        "zone_name": None,
        "city": None,
        "state": None,
        "cod_available": False,
        "expected_delivery_days": None,
    }

    assert client.get("/shipping-quote/serviceability/40000x").status_code == 422


def test_health_and_metrics(client, db):
    seed_bengaluru(db)
    client.post("/shipping-quote", json=_payload())

    r = client.get("/diag/health")
    assert r.json() == {"ok": True, "db": "up"}

    r = client.get("/metrics")
    assert r.status_code == 200
    assert "shipping_quotes_total" in r.text
    assert "shipping_quote_latency_seconds" in r.text


def test_root_health_path_is_not_mounted(client):
    assert client.get("/health").status_code == 404


def test_quote_free_shipping_from_settings(client, db, monkeypatch):
    from shipquote.core.config import get_settings

    seed_bengaluru(db)
    monkeypatch.setattr(get_settings(), "SHIPQUOTE_FREE_SHIPPING_ENABLED", True)

    below = client.post("/shipping-quote", json=_payload(order_value=698.99)).json()
    assert below["free_shipping_enabled"] is True
    assert below["free_shipping_threshold"] == 699.0
    assert below["is_free_shipping"] is False
    assert below["available_options"][0]["cost"]["total_cost"] == 60.0

    at = client.post("/shipping-quote", json=_payload(order_value=699)).json()
    assert at["is_free_shipping"] is True
    assert [o["cost"]["total_cost"] for o in at["available_options"]] == [0.0, 0.0]
    assert all(o["is_free_shipping"] for o in at["available_options"])
