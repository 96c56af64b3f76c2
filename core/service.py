"""
Основная бизнес-логика для работы с сертификатами.
"""

import logging
from datetime import datetime, timezone
from typing import Iterator, List, Optional, Tuple
from .models import Certificate, CertificateFields, PDF_CONTENT_TYPE
from .database import CertificateRepository, DatabaseManager
from .storage import BlobStorage
from .generator import CertificateIDGenerator
from .validators import DataValidator, MAX_FILE_SIZE
from .exceptions import *

# Настройка логирования
logger = logging.getLogger(__name__)


class CertificateService:
    """Сервис для работы с сертификатами."""

    def __init__(self, certificate_repo: CertificateRepository, blob_storage: BlobStorage,
                 max_file_size: int = MAX_FILE_SIZE):
        """Инициализация сервиса."""
        self.certificate_repo = certificate_repo
        self.blob_storage = blob_storage
        self.id_generator = CertificateIDGenerator()
        self.validator = DataValidator(max_file_size)

    def create_certificate(self, fields: CertificateFields, file_bytes: Optional[bytes],
                           file_name: Optional[str]) -> Certificate:
        """
        Создает новый сертификат.

        Сначала сохраняется файл, затем запись метаданных. Если запись не
        удалось сохранить, файл остается в хранилище без ссылки на него.

        Args:
            fields: Поля сертификата
            file_bytes: Содержимое PDF файла
            file_name: Исходное имя файла

        Returns:
            Certificate: Созданный сертификат

        Raises:
            ValidationError: При ошибке валидации
            StorageError: При ошибке хранилища
        """
        upload = self.validator.validate_upload(fields, file_bytes, file_name)
        logger.info(f"Создание сертификата «{upload.name}» ({upload.file_name}, {len(upload.content)} байт)")

        try:
            existing_ids = self.certificate_repo.get_existing_certificate_ids()
            certificate_id = self.id_generator.generate(existing_ids)
            blob_name = self.id_generator.blob_name(certificate_id, upload.file_name)

            file_url = self.blob_storage.upload(blob_name, upload.content, PDF_CONTENT_TYPE)
            logger.info(f"Файл {blob_name} сохранен в хранилище")

            certificate = Certificate(
                id=certificate_id,
                name=upload.name,
                issuer=upload.issuer,
                date=upload.date.isoformat(),
                category=upload.category,
                notes=upload.notes,
                file_name=upload.file_name,
                blob_name=blob_name,
                file_url=file_url,
                uploaded_at=datetime.now(timezone.utc)
            )
        except Exception as e:
            logger.error(f"Ошибка сохранения файла сертификата: {e}")
            if isinstance(e, CertificateError):
                raise
            raise StorageError(f"Неожиданная ошибка при сохранении файла: {e}")

        try:
            certificate = self.certificate_repo.create_certificate(certificate)
        except Exception as e:
            logger.error(
                f"Ошибка сохранения метаданных сертификата {certificate_id}: {e}. "
                f"Файл {blob_name} остался в хранилище без записи"
            )
            if isinstance(e, StorageError):
                raise
            raise StorageError(f"Неожиданная ошибка при сохранении метаданных: {e}")

        logger.info(f"Сертификат {certificate_id} успешно создан")
        return certificate

    def list_certificates(self) -> List[Certificate]:
        """
        Получает все сертификаты.

        Returns:
            List[Certificate]: Список сертификатов
        """
        logger.info("Получение списка сертификатов")

        try:
            certificates = self.certificate_repo.list_certificates()
        except Exception as e:
            logger.error(f"Ошибка получения списка сертификатов: {e}")
            if isinstance(e, StorageError):
                raise
            raise StorageError(f"Ошибка при получении списка сертификатов: {e}")

        logger.info(f"Найдено сертификатов: {len(certificates)}")
        return certificates

    def get_certificate(self, certificate_id: str) -> Certificate:
        """
        Получает сертификат по ID.

        Raises:
            CertificateNotFoundError: Если сертификат не найден
            StorageError: При ошибке БД
        """
        logger.info(f"Получение сертификата {certificate_id}")

        if not self.id_generator.validate_id_format(certificate_id):
            logger.info(f"Некорректный формат ID сертификата: {certificate_id}")
            raise CertificateNotFoundError(certificate_id)

        try:
            certificate = self.certificate_repo.get_certificate_by_id(certificate_id)
        except Exception as e:
            logger.error(f"Ошибка получения сертификата {certificate_id}: {e}")
            if isinstance(e, StorageError):
                raise
            raise StorageError(f"Ошибка при получении сертификата: {e}")

        if certificate is None:
            logger.info(f"Сертификат {certificate_id} не найден")
            raise CertificateNotFoundError(certificate_id)

        return certificate

    def delete_certificate(self, certificate_id: str) -> None:
        """
        Удаляет сертификат: сначала файл, затем запись метаданных.

        Raises:
            CertificateNotFoundError: Если сертификат не найден
            StorageError: Если одна из частей не удалена
        """
        certificate = self.get_certificate(certificate_id)
        logger.info(f"Удаление сертификата {certificate_id}")

        try:
            self.blob_storage.delete(certificate.blob_name)
        except Exception as e:
            logger.error(f"Ошибка удаления файла {certificate.blob_name}: {e}")
            if isinstance(e, StorageError):
                raise
            raise StorageError(f"Ошибка при удалении файла: {e}")

        try:
            deleted = self.certificate_repo.delete_certificate(certificate_id)
        except Exception as e:
            logger.error(
                f"Ошибка удаления записи {certificate_id}: {e}. "
                f"Запись ссылается на удаленный файл {certificate.blob_name}"
            )
            if isinstance(e, StorageError):
                raise
            raise StorageError(f"Ошибка при удалении записи: {e}")

        if not deleted:
            logger.warning(f"Запись {certificate_id} исчезла до удаления")

        logger.info(f"Сертификат {certificate_id} успешно удален")

    def download_certificate(self, certificate_id: str) -> Tuple[Certificate, Iterator[bytes]]:
        """
        Возвращает сертификат и поток содержимого файла.

        Raises:
            CertificateNotFoundError: Если сертификат не найден
            StorageError: Если файл отсутствует в хранилище
        """
        certificate = self.get_certificate(certificate_id)
        logger.info(f"Скачивание файла {certificate.blob_name}")

        try:
            stream = self.blob_storage.stream(certificate.blob_name)
        except Exception as e:
            logger.error(f"Ошибка чтения файла {certificate.blob_name}: {e}")
            if isinstance(e, StorageError):
                raise
            raise StorageError(f"Ошибка при чтении файла: {e}")

        return certificate, stream


def build_certificate_service(settings) -> CertificateService:
    """
    Создает сервис сертификатов по настройкам приложения.

    Args:
        settings: Настройки приложения

    Returns:
        CertificateService: Готовый к работе сервис
    """
    settings.create_directories()

    db_manager = DatabaseManager(settings.database_url)
    db_manager.create_tables()

    return CertificateService(
        CertificateRepository(db_manager),
        BlobStorage(str(settings.blob_storage_path), settings.blob_base_url),
        settings.max_file_size
    )
