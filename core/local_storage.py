"""
Локальное хранилище сертификатов (режим без сервера).

Все записи вместе с содержимым файлов (data URL) сериализуются в одну JSON
строку под фиксированным ключом key/value хранилища с лимитом размера.
"""
import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .exceptions import CertificateNotFoundError, QuotaExceededError, StorageError
from .generator import CertificateIDGenerator
from .models import Certificate, CertificateFields, PDF_CONTENT_TYPE
from .validators import DataURLCodec, DataValidator, MAX_FILE_SIZE

logger = logging.getLogger(__name__)

STORAGE_KEY = "certificates"


class LocalStorage:
    """Key/value хранилище строк в JSON файле с лимитом размера."""

    def __init__(self, path: str, quota_bytes: int = 5 * 1024 * 1024):
        self.path = Path(path)
        self.quota_bytes = quota_bytes

    def get_item(self, key: str) -> Optional[str]:
        """Возвращает значение по ключу или None"""
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        """
        Сохраняет значение по ключу

        Raises:
            QuotaExceededError: Если суммарный размер превысит лимит
            StorageError: При ошибке записи
        """
        items = self._read_all()
        items[key] = value

        used = self._size_of(items)
        if used > self.quota_bytes:
            raise QuotaExceededError(
                f"Превышен лимит хранилища: {used} из {self.quota_bytes} байт"
            )

        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._read_all()
        if items.pop(key, None) is not None:
            self._write_all(items)

    @staticmethod
    def _size_of(items: Dict[str, str]) -> int:
        return sum(len(k.encode("utf-8")) + len(v.encode("utf-8")) for k, v in items.items())

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Ошибка чтения локального хранилища: {e}")

        if not isinstance(data, dict):
            raise StorageError("Некорректный формат локального хранилища")
        return data

    def _write_all(self, items: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")

        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(items, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise StorageError(f"Ошибка записи локального хранилища: {e}")


class LocalCertificateVault:
    """Операции с сертификатами поверх локального хранилища."""

    def __init__(self, storage: LocalStorage, max_file_size: int = MAX_FILE_SIZE):
        self.storage = storage
        self.validator = DataValidator(max_file_size)
        self.id_generator = CertificateIDGenerator()
        self.codec = DataURLCodec()
        self.certificates: List[Certificate] = []
        self._loaded = False

    def load(self) -> List[Certificate]:
        """
        Загружает все записи из хранилища.

        Если сохраненные данные повреждены, начинает с пустого списка.

        Raises:
            StorageError: Если данные не удалось прочитать (список при этом очищается)
        """
        self.certificates = []
        self._loaded = True

        try:
            stored = self.storage.get_item(STORAGE_KEY)
            if stored:
                self.certificates = [Certificate.from_dict(item) for item in json.loads(stored)]
        except Exception as e:
            logger.error(f"Ошибка загрузки сертификатов: {e}")
            self.certificates = []
            raise StorageError(f"Ошибка загрузки сертификатов: {e}")

        logger.info(f"Загружено сертификатов: {len(self.certificates)}")
        return list(self.certificates)

    def _ensure_loaded(self) -> None:
        """Читает хранилище при первом обращении, если load() еще не вызывался."""
        if not self._loaded:
            self.load()

    def save(self) -> None:
        """Сохраняет весь список записей под одним ключом."""
        payload = json.dumps([cert.to_dict() for cert in self.certificates], ensure_ascii=False)
        self.storage.set_item(STORAGE_KEY, payload)

    def create_certificate(self, fields: CertificateFields, file_bytes: Optional[bytes],
                           file_name: Optional[str]) -> Certificate:
        """
        Создает сертификат и сохраняет его в локальное хранилище.

        При ошибке сохранения запись удаляется из списка в памяти.

        Raises:
            ValidationError: При ошибке валидации
            QuotaExceededError: Если не хватило места
            StorageError: При другой ошибке сохранения
        """
        upload = self.validator.validate_upload(fields, file_bytes, file_name)
        self._ensure_loaded()

        certificate_id = self.id_generator.generate({cert.id for cert in self.certificates})
        certificate = Certificate(
            id=certificate_id,
            name=upload.name,
            issuer=upload.issuer,
            date=upload.date.isoformat(),
            category=upload.category,
            notes=upload.notes,
            file_name=upload.file_name,
            blob_name=self.id_generator.blob_name(certificate_id, upload.file_name),
            file_url=self.codec.encode(upload.content, PDF_CONTENT_TYPE),
            uploaded_at=datetime.now(timezone.utc)
        )

        self.certificates.insert(0, certificate)
        try:
            self.save()
        except StorageError:
            self.certificates.remove(certificate)
            logger.warning(f"Сертификат {certificate_id} не сохранен, изменения отменены")
            raise

        logger.info(f"Сертификат {certificate_id} сохранен локально")
        return certificate

    def list_certificates(self) -> List[Certificate]:
        self._ensure_loaded()
        return list(self.certificates)

    def get_certificate(self, certificate_id: str) -> Certificate:
        self._ensure_loaded()
        for certificate in self.certificates:
            if certificate.id == certificate_id:
                return certificate
        raise CertificateNotFoundError(certificate_id)

    def delete_certificate(self, certificate_id: str) -> None:
        """
        Удаляет сертификат вместе с содержимым.

        При ошибке сохранения запись возвращается в список.
        """
        certificate = self.get_certificate(certificate_id)
        index = self.certificates.index(certificate)

        self.certificates.pop(index)
        try:
            self.save()
        except StorageError:
            self.certificates.insert(index, certificate)
            raise

        logger.info(f"Сертификат {certificate_id} удален из локального хранилища")

    def download_certificate(self, certificate_id: str) -> Tuple[Certificate, bytes]:
        """Возвращает запись и содержимое файла."""
        certificate = self.get_certificate(certificate_id)
        _, content = self.codec.decode(certificate.file_url)
        return certificate, content
