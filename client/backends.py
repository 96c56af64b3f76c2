"""
Бэкенды клиента: удаленный (HTTP API) и локальный (key/value хранилище).
"""
import logging
from typing import List, Optional, Tuple

import httpx

from core.exceptions import CertificateNotFoundError, StorageError, ValidationError
from core.local_storage import LocalCertificateVault, LocalStorage
from core.models import Certificate, CertificateFields

from .file_reader import DEFAULT_READ_TIMEOUT, SelectedFile, read_file_as_data_url, read_file_bytes

logger = logging.getLogger(__name__)


class RemoteBackend:
    """Работа с сертификатами через REST API сервера."""

    def __init__(self, base_url: str, client: Optional[httpx.AsyncClient] = None,
                 timeout: float = 60.0):
        self.base_url = base_url.rstrip('/')
        self.client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def close(self):
        await self.client.aclose()

    async def _request(self, method: str, path: str, certificate_id: Optional[str] = None,
                       **kwargs) -> httpx.Response:
        """Выполняет запрос и переводит ошибки API в исключения."""
        try:
            response = await self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Ошибка сети при {method} {path}: {e}")
            raise StorageError(f"Сервер недоступен: {e}")

        if response.is_success:
            return response

        try:
            body = response.json()
        except ValueError:
            body = {}
        message = body.get("message") or f"HTTP {response.status_code}"

        if response.status_code == 404 and certificate_id is not None:
            raise CertificateNotFoundError(certificate_id)
        if response.status_code == 400:
            raise ValidationError(message, missing_fields=body.get("missingFields"))

        logger.error(f"Ошибка API {method} {path}: {response.status_code} {body.get('error', '')}")
        raise StorageError(message)

    async def load_all(self) -> List[Certificate]:
        response = await self._request("GET", "/api/certificates")
        return [Certificate.from_dict(item) for item in response.json()["data"]]

    async def create(self, fields: CertificateFields, selected: SelectedFile,
                     read_timeout: float = DEFAULT_READ_TIMEOUT) -> Certificate:
        """Читает файл и отправляет его вместе с полями формы."""
        file_data = await read_file_as_data_url(selected, read_timeout)

        payload = fields.model_dump()
        payload.update({"fileName": selected.name, "fileData": file_data})

        response = await self._request("POST", "/api/certificates/upload", json=payload)
        return Certificate.from_dict(response.json()["data"])

    async def delete(self, certificate_id: str) -> None:
        await self._request("DELETE", f"/api/certificates/{certificate_id}", certificate_id)

    async def download(self, certificate_id: str) -> Tuple[str, bytes]:
        """Скачивает файл; имя файла берется из записи на сервере."""
        response = await self._request("GET", f"/api/certificates/{certificate_id}", certificate_id)
        certificate = Certificate.from_dict(response.json()["data"])

        content = await self._request(
            "GET", f"/api/certificates/download/{certificate_id}", certificate_id
        )
        return certificate.file_name, content.content

    def preview_source(self, certificate: Certificate) -> str:
        return certificate.file_url


class LocalBackend:
    """Работа с сертификатами в локальном хранилище без сервера."""

    def __init__(self, vault: LocalCertificateVault):
        self.vault = vault

    async def close(self):
        pass

    async def load_all(self) -> List[Certificate]:
        return self.vault.load()

    async def create(self, fields: CertificateFields, selected: SelectedFile,
                     read_timeout: float = DEFAULT_READ_TIMEOUT) -> Certificate:
        content = await read_file_bytes(selected, read_timeout)
        return self.vault.create_certificate(fields, content, selected.name)

    async def delete(self, certificate_id: str) -> None:
        self.vault.delete_certificate(certificate_id)

    async def download(self, certificate_id: str) -> Tuple[str, bytes]:
        certificate, content = self.vault.download_certificate(certificate_id)
        return certificate.file_name, content

    def preview_source(self, certificate: Certificate) -> str:
        return certificate.file_url


def create_backend(settings, local: bool = False, api_url: Optional[str] = None):
    """
    Создает бэкенд клиента по настройкам.

    Args:
        settings: Настройки приложения
        local: Работать без сервера, в локальном хранилище
        api_url: Адрес API вместо settings.api_url
    """
    if local:
        storage = LocalStorage(str(settings.local_storage_path), settings.local_storage_quota)
        return LocalBackend(LocalCertificateVault(storage, settings.max_file_size))

    return RemoteBackend(api_url or settings.api_url)
