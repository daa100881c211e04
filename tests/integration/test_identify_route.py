import httpx
import pytest
from fastapi.testclient import TestClient

from main import app   # FastAPI instance exposed in main.py
from medscan.application.commands import to_data_url
from medscan.application.history import ScanHistoryRecorder
from medscan.application.identify_use_case import IdentifyMedicationUseCase
from medscan.container import get_history_recorder, get_identify_use_case
from medscan.domain.catalog import Catalog
from medscan.infra.provider.http_provider import HttpIdentificationProvider
from medscan.infra.repo.memory_repo import InMemoryScanHistoryRepo

IMG = to_data_url(b"fake-image-bytes", "image/png")


@pytest.fixture
def recorder():
    return ScanHistoryRecorder(InMemoryScanHistoryRepo())


@pytest.fixture
def client(recorder):
    uc = IdentifyMedicationUseCase(Catalog.sample(), history=recorder)
    app.dependency_overrides[get_identify_use_case] = lambda: uc
    app.dependency_overrides[get_history_recorder] = lambda: recorder
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_identify_metformin(client):
    res = client.post("/v1/identify", json={"imageData": IMG, "ocrText": "metformin 500mg"})
    assert res.status_code == 200
    body = res.json()
    assert body["medication"]["name"] == "Metformin"
    assert body["medication"]["genericName"] == "Metformin Hydrochloride"
    assert body["confidence"] == 50
    assert body["status"] == "error"
    assert body["source"] == "local"


def test_identify_without_image_is_400_with_suggestions(client):
    res = client.post("/v1/identify", json={"ocrText": "metformin"})
    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "validation_error"
    assert [s["name"] for s in body["suggestions"]] == ["Metformin", "Lisinopril", "Atorvastatin"]


def test_identify_non_object_body_is_400(client):
    res = client.post("/v1/identify", json=["imageData"])
    assert res.status_code == 400
    assert res.json()["error"] == "validation_error"


def test_identify_photo_upload(client):
    files = {"img": ("label.png", b"\x89PNG fake", "image/png")}
    res = client.post("/v1/identify/photo", files=files, data={"ocrText": "Atorvastatin Calcium 20mg"})
    assert res.status_code == 200
    assert res.json()["medication"]["name"] == "Atorvastatin"


def test_identify_photo_rejects_non_images(client):
    files = {"img": ("notes.txt", b"hello", "text/plain")}
    res = client.post("/v1/identify/photo", files=files)
    assert res.status_code == 400


def test_identify_qr(client):
    res = client.post("/v1/identify/qr", json={"payload": "generic lisinopril 10mg"})
    assert res.status_code == 200
    body = res.json()
    assert body["medication"]["name"] == "Lisinopril"
    assert body["confidence"] == 98
    assert body["status"] == "success"


def test_catalog_search(client):
    res = client.get("/v1/catalog/search", params={"q": "ator"})
    assert res.status_code == 200
    assert [i["name"] for i in res.json()["items"]] == ["Atorvastatin"]
    assert client.get("/v1/catalog/search", params={"q": ""}).json()["items"] == []


def test_catalog_suggestions(client):
    items = client.get("/v1/catalog/suggestions").json()["items"]
    assert [i["id"] for i in items] == ["1", "2", "3"]


def test_history_roundtrip(client):
    client.post("/v1/identify", json={"imageData": IMG, "ocrText": "lisinopril", "userId": "u1"})
    client.post("/v1/identify/qr", json={"payload": "metformin", "userId": "u1"})
    client.post("/v1/identify", json={"imageData": IMG, "ocrText": "metformin"})  # anonymous

    res = client.get("/v1/history/u1")
    assert res.status_code == 200
    items = res.json()["items"]
    assert [i["medicationName"] for i in items] == ["Metformin", "Lisinopril"]
    assert items[0]["status"] == "success"
    assert items[1]["ocrText"] == "lisinopril"
    assert client.get("/v1/history/nobody").json()["items"] == []


def test_provider_misconfigured_is_400(client):
    uc = IdentifyMedicationUseCase(
        Catalog.sample(), provider_mode=True, provider=HttpIdentificationProvider("", ""))
    app.dependency_overrides[get_identify_use_case] = lambda: uc
    res = client.post("/v1/identify", json={"imageData": IMG})
    assert res.status_code == 400
    assert res.json()["error"] == "configuration_error"


def test_provider_failure_is_502(client):
    provider = HttpIdentificationProvider(
        "https://id.example.org", "k",
        transport=httpx.MockTransport(lambda r: httpx.Response(500, text="boom")),
    )
    uc = IdentifyMedicationUseCase(Catalog.sample(), provider_mode=True, provider=provider)
    app.dependency_overrides[get_identify_use_case] = lambda: uc
    res = client.post("/v1/identify", json={"imageData": IMG, "ocrText": "metformin"})
    assert res.status_code == 502
    body = res.json()
    assert body["error"] == "provider_error"
    assert "boom" in body["message"]
    assert len(body["suggestions"]) == 3


def test_healthz():
    assert TestClient(app).get("/healthz").json() == {"ok": True}
