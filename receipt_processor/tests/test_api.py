# tests/test_api.py
import json
import logging
import re

import pytest
from fastapi.testclient import TestClient

from receipt_processor.config import settings
from receipt_processor.ids import IdGenerationError
from receipt_processor.main import create_app
from receipt_processor.schemas import Receipt
from receipt_processor.services.points import score
from receipt_processor.store import ReceiptStore

HEX_ID = re.compile(r"^[0-9a-f]{32}$")

MORNING = {
    "retailer": "Walgreens",
    "purchaseDate": "2022-01-02",
    "purchaseTime": "08:13",
    "total": "2.65",
    "items": [
        {"shortDescription": "Pepsi - 12-oz", "price": "1.25"},
        {"shortDescription": "Dasani", "price": "1.40"},
    ],
}

@pytest.fixture
def client():
    with TestClient(create_app()) as c:
        yield c

def submit(client, body) -> str:
    res = client.post("/receipts/process", json=body)
    assert res.status_code == 200, res.text
    return res.json()["id"]

def test_process_returns_hex_id(client):
    res = client.post("/receipts/process", json=MORNING)
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("application/json")
    assert HEX_ID.match(res.json()["id"])

def test_points_round_trip_matches_engine(client):
    receipt_id = submit(client, MORNING)
    res = client.get(f"/receipts/{receipt_id}/points")
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("application/json")
    assert res.json() == {"points": score(Receipt.model_validate(MORNING))}

def test_resubmission_gets_new_id_same_points(client):
    first = submit(client, MORNING)
    second = submit(client, MORNING)
    assert first != second
    a = client.get(f"/receipts/{first}/points").json()
    b = client.get(f"/receipts/{second}/points").json()
    assert a == b

def test_afternoon_boundary_over_http(client):
    base = {"retailer": "", "purchaseDate": "2022-01-02", "items": [], "total": "x"}
    got = {}
    for t in ("14:00", "15:00", "16:00"):
        receipt_id = submit(client, {**base, "purchaseTime": t})
        got[t] = client.get(f"/receipts/{receipt_id}/points").json()["points"]
    assert got == {"14:00": 0, "15:00": 10, "16:00": 0}

def test_unknown_id_is_400(client):
    res = client.get("/receipts/" + "0" * 32 + "/points")
    assert res.status_code == 400
    assert res.text == "Invalid receipt ID"
    assert res.headers["content-type"].startswith("text/plain")

def test_malformed_json_is_400(client):
    res = client.post("/receipts/process", content=b"{not json",
                      headers={"Content-Type": "application/json"})
    assert res.status_code == 400
    assert res.headers["content-type"].startswith("text/plain")
    assert res.text

@pytest.mark.parametrize("body", [
    {**MORNING, "total": 2.65},
    {**MORNING, "retailer": ["Walgreens"]},
    {**MORNING, "items": "Pepsi"},
    {**MORNING, "items": [{"shortDescription": "Dasani", "price": 1.4}]},
    ["not", "an", "object"],
])
def test_wrong_shape_is_400(client, body):
    res = client.post("/receipts/process", json=body)
    assert res.status_code == 400
    assert res.headers["content-type"].startswith("text/plain")

def test_missing_fields_default_to_empty(client):
    receipt_id = submit(client, {"retailer": "Abc"})
    assert client.get(f"/receipts/{receipt_id}/points").json() == {"points": 3}

def test_unknown_fields_are_ignored(client):
    receipt_id = submit(client, {**MORNING, "points": 1000, "cashier": "Sam"})
    points = client.get(f"/receipts/{receipt_id}/points").json()["points"]
    assert points == score(Receipt.model_validate(MORNING))

def test_id_generation_failure_is_500():
    def failing_ids():
        raise IdGenerationError("entropy source unavailable")
    store = ReceiptStore(id_factory=failing_ids)
    with TestClient(create_app(store)) as c:
        res = c.post("/receipts/process", json=MORNING)
    assert res.status_code == 500
    assert res.text == "entropy source unavailable"
    assert len(store) == 0

@pytest.mark.parametrize("path", [
    "/receipts/abc",
    "/receipts/abc/score",
    "/receipts/",
    "/health",
    "/docs",
])
def test_other_paths_are_404(client, path):
    res = client.get(path)
    assert res.status_code == 404
    assert res.text == "Not found"

def test_apps_do_not_share_stores():
    with TestClient(create_app()) as a, TestClient(create_app()) as b:
        receipt_id = submit(a, MORNING)
        assert a.get(f"/receipts/{receipt_id}/points").status_code == 200
        assert b.get(f"/receipts/{receipt_id}/points").status_code == 400

def test_strict_validation_rejects_bad_formats(client, monkeypatch):
    monkeypatch.setattr(settings, "STRICT_VALIDATION", True)
    for bad in (
        {**MORNING, "total": "2.6"},
        {**MORNING, "purchaseDate": "2022-02-30"},
        {**MORNING, "purchaseTime": "24:00"},
        {**MORNING, "retailer": "Shop!"},
        {**MORNING, "items": []},
        {**MORNING, "items": [{"shortDescription": "Dasani", "price": "abc"}]},
    ):
        res = client.post("/receipts/process", json=bad)
        assert res.status_code == 400, bad
        assert res.headers["content-type"].startswith("text/plain")
    assert client.post("/receipts/process", json=MORNING).status_code == 200

def test_lenient_by_default_keeps_bad_formats(client):
    res = client.post("/receipts/process", json={**MORNING, "total": "2.6"})
    assert res.status_code == 200

@pytest.mark.parametrize("path", ["/receipts//points", "/receipts/a/b/points", "/receipts/points"])
def test_any_path_ending_in_points_is_a_lookup(client, path):
    res = client.get(path)
    assert res.status_code == 400
    assert res.text == "Invalid receipt ID"

def test_lookup_uses_first_segment_as_id(client):
    receipt_id = submit(client, MORNING)
    res = client.get(f"/receipts/{receipt_id}/extra/points")
    assert res.status_code == 200
    assert res.json() == {"points": score(Receipt.model_validate(MORNING))}

def test_trailing_slash_is_404_not_redirect(client):
    receipt_id = submit(client, MORNING)
    res = client.get(f"/receipts/{receipt_id}/points/", follow_redirects=False)
    assert res.status_code == 404
    assert res.text == "Not found"

@pytest.mark.parametrize("content_type", [
    None, "text/plain", "application/x-www-form-urlencoded",
])
def test_process_ignores_content_type(client, content_type):
    headers = {"Content-Type": content_type} if content_type else {}
    res = client.post("/receipts/process", content=json.dumps(MORNING).encode(), headers=headers)
    assert res.status_code == 200, res.text
    receipt_id = res.json()["id"]
    points = client.get(f"/receipts/{receipt_id}/points").json()["points"]
    assert points == score(Receipt.model_validate(MORNING))

def test_empty_body_is_400(client):
    res = client.post("/receipts/process", content=b"")
    assert res.status_code == 400
    assert res.headers["content-type"].startswith("text/plain")

def test_breakdown_skipped_unless_debug(client, monkeypatch):
    from receipt_processor.routes import receipts

    def fail(receipt):
        raise AssertionError("breakdown computed with DEBUG off")
    monkeypatch.setattr(receipts, "breakdown", fail)
    monkeypatch.setattr(receipts.logger, "isEnabledFor", lambda level: level >= logging.INFO)
    assert client.post("/receipts/process", json=MORNING).status_code == 200
