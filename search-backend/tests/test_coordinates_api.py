from dataclasses import replace

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from app.crs.transform import ProjectionLoadCache
from app.errors import ERROR_NO_PROJECTION, ERROR_PARSE, ERROR_PROJECTION_LOAD
from app.main import app
from app.settings import SETTINGS

client = TestClient(app)


@pytest.fixture
def fake_state(monkeypatch, make_engine):
    engine = make_engine()
    monkeypatch.setattr(app.state, "projection_engine", engine)
    monkeypatch.setattr(app.state, "projection_loads", ProjectionLoadCache())
    return engine


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_projection_catalog():
    resp = client.get("/coordinates/projections")
    assert resp.status_code == 200
    projections = resp.json()["projections"]
    assert len(projections) == 13
    assert projections[0]["id"] == "sweref99-tm"
    assert projections[0]["code"] == "EPSG:3006"
    assert projections[1]["zone_id"] == "12 00"
    assert projections[1]["bounds"] == {"e_min": 50000, "e_max": 250000, "n_min": 6100000, "n_max": 7700000}


def test_sanitize_endpoint():
    resp = client.post("/coordinates/sanitize", json={"text": "<b>674032</b>\t6580822 \U0001F600"})
    data = resp.json()
    assert data["coordinate_text"] == "674032 6580822"
    assert data["search_term"] == "b674032/b 6580822 \U0001F600"
    assert data["suggestable"] is True


def test_classify_endpoint():
    resp = client.post("/coordinates/classify", json={"text": "Storgatan 12"})
    assert resp.json() == {"is_coordinate": False, "confidence": "high", "reason": "unsupported_characters"}


def test_parse_endpoint():
    resp = client.post("/coordinates/parse", json={"text": "674032, 6580822"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["format"] == "comma"
    assert (data["easting"], data["northing"]) == (674032, 6580822)

    # failures are a normal 200 outcome
    resp = client.post("/coordinates/parse", json={"text": ""})
    assert resp.status_code == 200
    assert resp.json()["error"] == "coordinateErrorEmpty"


def test_detect_endpoint():
    payload = {"easting": 150000, "northing": 6580000, "center_longitude": 18.1}
    data = client.post("/coordinates/detect", json=payload).json()
    assert data["projection"]["epsg"] == 3011
    assert data["confidence"] == 0.85
    assert len(data["alternatives"]) == 11

    data = client.post("/coordinates/detect", json={"easting": 275000, "northing": 6500000}).json()
    assert data["projection"] is None
    assert data["warnings"] == [ERROR_NO_PROJECTION]

    resp = client.post("/coordinates/detect", json={"easting": 1, "northing": 2, "preference": "utm"})
    assert resp.status_code == 422


def test_validate_endpoint():
    data = client.post("/coordinates/validate", json={"easting": 698000, "northing": 6580822, "epsg": 3006}).json()
    assert data["valid"] is True
    assert data["warnings"] == ["coordinateWarningNearBoundary"]

    data = client.post("/coordinates/validate", json={"easting": 900000, "northing": 6580822}).json()
    assert data == {"valid": False, "errors": ["coordinateErrorOutOfRange"], "warnings": []}

    resp = client.post("/coordinates/validate", json={"easting": 1, "northing": 2, "epsg": 4326})
    assert resp.status_code == 422


def test_transform_endpoint(fake_state):
    payload = {"easting": 674032, "northing": 6580822, "epsg": 3006, "target_wkid": 3006}
    data = client.post("/coordinates/transform", json=payload).json()
    assert data == {"point": {"x": 674032.0, "y": 6580822.0, "spatial_reference": 3006}, "cached": False}
    assert fake_state.load_calls == 0

    payload["target_wkid"] = 4326
    data = client.post("/coordinates/transform", json=payload).json()
    assert data["point"] == {"x": 674.032, "y": 6580.822, "spatial_reference": 4326}
    assert fake_state.load_calls == 1


def test_transform_endpoint_load_failure(fake_state):
    fake_state.fail = True
    payload = {"easting": 674032, "northing": 6580822, "epsg": 3006, "target_wkid": 4326}
    resp = client.post("/coordinates/transform", json=payload)
    assert resp.status_code == 422
    assert resp.json() == {"error": ERROR_PROJECTION_LOAD, "warnings": []}


def test_transform_endpoint_with_pyproj(monkeypatch):
    monkeypatch.setattr(app.state, "projection_loads", ProjectionLoadCache())
    payload = {"easting": 500000, "northing": 6500000, "epsg": 3006, "target_wkid": 4326}
    data = client.post("/coordinates/transform", json=payload).json()
    assert data["point"]["x"] == pytest.approx(15.0, abs=1e-6)
    assert 58.0 < data["point"]["y"] < 59.5


def test_search_endpoint(fake_state):
    resp = client.post("/coordinates/search", json={"text": "6580822 674032", "target_wkid": 3006})
    assert resp.status_code == 200
    data = resp.json()
    assert data["projection_id"] == "sweref99-tm"
    assert data["epsg"] == 3006
    assert data["format"] == "space"
    assert data["map_point"] == {"x": 674032.0, "y": 6580822.0, "spatial_reference": 3006}
    assert data["confidence"] == 0.6


def test_search_endpoint_errors(fake_state):
    resp = client.post("/coordinates/search", json={"text": "hello world"})
    assert resp.status_code == 422
    assert resp.json() == {"error": ERROR_PARSE, "warnings": []}

    resp = client.post("/coordinates/search", json={"text": "275000 6500000"})
    assert resp.status_code == 422
    assert resp.json() == {"error": ERROR_NO_PROJECTION, "warnings": [ERROR_NO_PROJECTION]}


def test_live_search_sends_latest_outcome(monkeypatch, fake_state):
    monkeypatch.setattr("app.coordinates.SETTINGS", replace(SETTINGS, search_debounce_s=0.2))
    with client.websocket_connect("/coordinates/live?wkid=3006") as ws:
        ws.send_text("6")
        ws.send_text("6580822 674032")
        msg = ws.receive_json()
        assert msg["ok"] is True
        assert msg["result"]["epsg"] == 3006
        assert msg["result"]["easting"] == 674032

        ws.send_text("hello world")
        assert ws.receive_json() == {"ok": False, "error": ERROR_PARSE}


def test_live_search_rejects_unknown_preference():
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/coordinates/live?preference=utm") as ws:
            ws.receive_json()
