"""
Кастомные исключения для хранилища сертификатов.
"""

from typing import List, Optional


class CertificateError(Exception):
    """Базовое исключение для всех ошибок сертификатов."""
    pass


class ValidationError(CertificateError):
    """Ошибка валидации входных данных."""

    def __init__(self, message: str, missing_fields: Optional[List[str]] = None):
        super().__init__(message)
        self.missing_fields = list(missing_fields or [])


class DateValidationError(ValidationError):
    """Ошибка валидации даты сертификата."""
    pass


class FileValidationError(ValidationError):
    """Ошибка валидации загружаемого файла."""
    pass


class CertificateNotFoundError(CertificateError):
    """Сертификат не найден."""

    def __init__(self, certificate_id: str):
        super().__init__(f"Сертификат {certificate_id} не найден")
        self.certificate_id = certificate_id


class StorageError(CertificateError):
    """Ошибка работы с хранилищем (файлы, БД, локальное хранилище)."""
    pass


class QuotaExceededError(StorageError):
    """Превышен лимит локального хранилища."""
    pass


class FileReadTimeoutError(CertificateError):
    """Чтение файла не уложилось в отведенное время."""
    pass


class GenerationError(CertificateError):
    """Ошибка генерации идентификатора сертификата."""
    pass
