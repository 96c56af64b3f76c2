"""
Тесты для API
"""
import inspect
from unittest.mock import MagicMock

import pytest
from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from api_server import create_app
from core.api import CertificateAPI, content_disposition
from core.exceptions import StorageError
from core.validators import DataURLCodec


class TestCertificateAPI:
    """Тесты для API сертификатов"""

    def test_upload_get_delete_scenario(self, client, upload_payload, pdf_bytes):
        """Загрузка, чтение, удаление и повторное чтение"""
        response = client.post("/api/certificates/upload", json=upload_payload)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Сертификат успешно загружен"

        record = body["data"]
        for field in ("name", "issuer", "date", "category", "notes", "fileName"):
            assert record[field] == upload_payload[field]
        assert record["blobName"] == f"{record['id']}-aws.pdf"
        assert record["uploadedAt"]

        response = client.get(f"/api/certificates/{record['id']}")
        assert response.status_code == 200
        assert response.json() == {"success": True, "data": record}

        response = client.delete(f"/api/certificates/{record['id']}")
        assert response.status_code == 200
        assert response.json()["success"] is True

        response = client.get(f"/api/certificates/{record['id']}")
        assert response.status_code == 404
        assert response.json()["success"] is False

    def test_upload_without_file_data(self, client, upload_payload):
        """Без fileData запись не создается"""
        del upload_payload["fileData"]

        response = client.post("/api/certificates/upload", json=upload_payload)

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["missingFields"] == ["fileData"]

        assert client.get("/api/certificates").json()["count"] == 0

    def test_upload_missing_several_fields(self, client):
        response = client.post("/api/certificates/upload", json={"name": "AWS Cert"})

        assert response.status_code == 400
        assert response.json()["missingFields"] == ["issuer", "date", "category", "fileName", "fileData"]

    @pytest.mark.parametrize("field,value", [
        ("category", "hobby"),
        ("date", "2023-02-31"),
        ("date", "10.05.2024"),
        ("fileName", "../aws.pdf"),
        ("fileData", "data:image/png;base64,iVBORw0KGgo="),
        ("fileData", "data:application/pdf;base64,???"),
    ])
    def test_upload_invalid_values(self, client, upload_payload, field, value):
        upload_payload[field] = value

        response = client.post("/api/certificates/upload", json=upload_payload)

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert client.get("/api/certificates").json()["count"] == 0

    def test_upload_too_large(self, client, upload_payload):
        upload_payload["fileData"] = DataURLCodec().encode(b"0" * (10 * 1024 * 1024 + 1))

        response = client.post("/api/certificates/upload", json=upload_payload)

        assert response.status_code == 400

    def test_upload_wrong_field_type(self, client, upload_payload):
        upload_payload["name"] = {"nested": True}

        response = client.post("/api/certificates/upload", json=upload_payload)

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_upload_malformed_json(self, client):
        response = client.post(
            "/api/certificates/upload",
            content=b"{not json",
            headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400

    def test_list(self, client, upload_payload):
        for _ in range(3):
            client.post("/api/certificates/upload", json=upload_payload)

        body = client.get("/api/certificates").json()

        assert body["success"] is True
        assert body["count"] == 3
        assert len({record["id"] for record in body["data"]}) == 3

    def test_download(self, client, upload_payload, pdf_bytes):
        record = client.post("/api/certificates/upload", json=upload_payload).json()["data"]

        response = client.get(f"/api/certificates/download/{record['id']}")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == 'attachment; filename="aws.pdf"'
        assert response.content == pdf_bytes

    def test_download_not_found(self, client):
        response = client.get("/api/certificates/download/00000000-0000-4000-8000-000000000000")

        assert response.status_code == 404

    def test_download_missing_blob(self, client, service, upload_payload):
        record = client.post("/api/certificates/upload", json=upload_payload).json()["data"]
        service.blob_storage.delete(record["blobName"])

        response = client.get(f"/api/certificates/download/{record['id']}")

        assert response.status_code == 500
        assert response.json()["success"] is False

    def test_delete_not_found(self, client, upload_payload):
        client.post("/api/certificates/upload", json=upload_payload)

        response = client.delete("/api/certificates/00000000-0000-4000-8000-000000000000")

        assert response.status_code == 404
        assert client.get("/api/certificates").json()["count"] == 1

    def test_storage_error_returns_500(self, upload_payload):
        service = MagicMock()
        service.create_certificate.side_effect = StorageError("БД недоступна")
        service.list_certificates.side_effect = StorageError("БД недоступна")
        client = TestClient(CertificateAPI(service).app)

        response = client.post("/api/certificates/upload", json=upload_payload)
        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Не удалось загрузить сертификат",
            "error": "БД недоступна"
        }

        assert client.get("/api/certificates").status_code == 500

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["message"]
        assert body["timestamp"]


def test_content_disposition_non_ascii():
    assert content_disposition("сертификат.pdf") == (
        "attachment; filename*=UTF-8''%D1%81%D0%B5%D1%80%D1%82%D0%B8%D1%84%D0%B8%D0%BA%D0%B0%D1%82.pdf"
    )
    assert content_disposition('a"b.pdf') == 'attachment; filename="a\\"b.pdf"'


def test_create_app_serves_blobs(test_settings, upload_payload, pdf_bytes):
    """Приложение раздает сохраненные файлы по fileUrl"""
    app = create_app(test_settings)

    with TestClient(app) as client:
        record = client.post("/api/certificates/upload", json=upload_payload).json()["data"]
        assert record["fileUrl"] == f"http://testserver/blobs/{record['blobName']}"

        response = client.get(f"/blobs/{record['blobName']}")

        assert response.status_code == 200
        assert response.content == pdf_bytes
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"].startswith("inline;")


def test_blob_route_hides_service_files(test_settings, upload_payload):
    """Служебные файлы хранилища и неизвестные ключи не раздаются"""
    app = create_app(test_settings)

    with TestClient(app) as client:
        record = client.post("/api/certificates/upload", json=upload_payload).json()["data"]
        meta_name = f".{record['blobName']}.meta.json"
        assert (test_settings.blob_storage_path / meta_name).exists()

        assert client.get(f"/blobs/{meta_name}").status_code == 404

        leftover = test_settings.blob_storage_path / f".{record['blobName']}.tmp"
        leftover.write_bytes(b"partial")
        assert client.get(f"/blobs/{leftover.name}").status_code == 404

        assert client.get("/blobs/missing.pdf").status_code == 404
        assert client.get("/blobs/..").status_code == 404


def test_blob_route_disabled(test_settings, upload_payload):
    app = create_app(test_settings.model_copy(update={"serve_blobs": False}))

    with TestClient(app) as client:
        record = client.post("/api/certificates/upload", json=upload_payload).json()["data"]

        assert client.get(f"/blobs/{record['blobName']}").status_code == 404


def test_storage_routes_run_in_threadpool(api):
    """Маршруты с блокирующим вводом-выводом объявлены синхронными"""
    routes = [route for route in api.app.routes
              if isinstance(route, APIRoute) and route.path.startswith("/api/")]

    assert len(routes) == 5
    for route in routes:
        assert not inspect.iscoroutinefunction(route.endpoint), route.path
