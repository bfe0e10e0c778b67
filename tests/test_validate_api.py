import io
import os

import pytest
from fastapi.testclient import TestClient

from src.headercheck.api import validate_api
from src.headercheck.app import app
from tests.samples import PNG_HEADER, make_xlsx


@pytest.fixture
def client():
    return TestClient(app)


def test_list_allowed_extensions(client):
    resp = client.get("/validate/extensions")
    assert resp.status_code == 200
    assert ".csv" in resp.json()["allowed_extensions"]


def test_upload_csv_with_encoding_check(client):
    files = {"file": ("people.csv", io.BytesIO("이름,도시\n홍길동,서울\n".encode("utf-8")), "text/csv")}
    resp = client.post("/validate", files=files, data={"verify_encoding": "true"})
    assert resp.status_code == 200, resp.text

    body = resp.json()
    assert body["ok"] is True
    assert body["category"] == "CSV"
    assert body["encoding"] == "UTF-8"
    assert body["code"] is None


def test_upload_image(client):
    files = {"file": ("photo.png", io.BytesIO(PNG_HEADER), "image/png")}
    resp = client.post("/validate", files=files)
    assert resp.status_code == 200
    assert resp.json()["category"] == "IMAGE"


def test_upload_xlsx(client):
    files = {"file": ("book.xlsx", io.BytesIO(make_xlsx()), "application/octet-stream")}
    resp = client.post("/validate", files=files)
    assert resp.status_code == 200, resp.text
    assert resp.json()["category"] == "EXCEL"


def test_disguised_xlsx_rejected(client):
    files = {"file": ("report.xlsx", io.BytesIO(b"not,a,zip\n"), "application/vnd.ms-excel")}
    resp = client.post("/validate", files=files)
    assert resp.status_code == 422
    body = resp.json()
    assert body["ok"] is False
    assert body["code"] == "XLSX_INVALID"
    assert body["category"] is None


def test_disallowed_extension_rejected(client):
    files = {"file": ("tool.exe", io.BytesIO(b"MZ\x90\x00"), "application/octet-stream")}
    resp = client.post("/validate", files=files)
    assert resp.status_code == 422
    assert resp.json()["code"] == "INVALID_EXTENSION"


def test_empty_upload_rejected(client):
    files = {"file": ("empty.csv", io.BytesIO(b""), "text/csv")}
    resp = client.post("/validate", files=files)
    assert resp.status_code == 422
    assert resp.json()["code"] == "EMPTY_FILE"


def test_temp_copy_removed(client, monkeypatch):
    created = []
    real_copy = validate_api.copy_to_temp

    def spy(stream, name):
        path = real_copy(stream, name)
        created.append(path)
        return path

    monkeypatch.setattr(validate_api, "copy_to_temp", spy)
    files = {"file": ("photo.png", io.BytesIO(PNG_HEADER), "image/png")}
    client.post("/validate", files=files)
    assert created and not os.path.exists(created[0])
