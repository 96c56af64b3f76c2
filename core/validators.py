"""
Модуль валидации входных данных для сертификатов.
"""

import base64
import binascii
import re
from typing import List, Optional, Tuple
from .exceptions import *
from .models import (
    PDF_CONTENT_TYPE, Category, CertificateDate, CertificateFields, CertificateUpload
)

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MiB

REQUIRED_FIELDS = ("name", "issuer", "date", "category")


class DateValidator:
    """Валидатор даты сертификата."""

    def validate(self, year, month, day) -> Tuple[bool, str]:
        """
        Валидация даты, введенной по частям.

        Returns:
            Tuple[bool, str]: (валидна ли дата, сообщение об ошибке)
        """
        try:
            CertificateDate.parse(year, month, day)
        except DateValidationError as e:
            return False, str(e)
        return True, ""

    def validate_iso(self, value: str) -> Tuple[bool, str]:
        """Валидация даты в формате YYYY-MM-DD."""
        try:
            CertificateDate.from_iso(value)
        except DateValidationError as e:
            return False, str(e)
        return True, ""


class FileValidator:
    """Валидатор загружаемого PDF файла."""

    def __init__(self, max_file_size: int = MAX_FILE_SIZE):
        self.max_file_size = max_file_size

    def validate(self, content_type: Optional[str], size: int) -> Tuple[bool, str]:
        """
        Проверка типа и размера файла.

        Args:
            content_type: MIME тип файла
            size: Размер в байтах

        Returns:
            Tuple[bool, str]: (валиден ли файл, сообщение об ошибке)
        """
        if content_type != PDF_CONTENT_TYPE:
            return False, "Можно загружать только PDF файлы"

        if size > self.max_file_size:
            return False, f"Размер файла не должен превышать {self.max_file_size // (1024 * 1024)} МБ"

        return True, ""

    def validate_file_name(self, file_name: str) -> bool:
        """Имя файла не должно содержать разделителей пути."""
        name = file_name.strip()
        if not name or name in (".", ".."):
            return False
        return "/" not in name and "\\" not in name and "\x00" not in name


class DataURLCodec:
    """Кодирование файлов в data URL и обратно."""

    pattern = re.compile(r'^data:(?P<media_type>[^;,]*)(?P<params>(;[^;,]*)*?);base64,(?P<payload>.*)$', re.DOTALL)

    def encode(self, content: bytes, content_type: str = PDF_CONTENT_TYPE) -> str:
        """Кодирует байты в data URL."""
        payload = base64.b64encode(content).decode("ascii")
        return f"data:{content_type};base64,{payload}"

    def decode(self, data_url: str) -> Tuple[Optional[str], bytes]:
        """
        Декодирует data URL (или голую base64 строку).

        Returns:
            Tuple[Optional[str], bytes]: MIME тип (если указан) и содержимое

        Raises:
            FileValidationError: При некорректном формате
        """
        media_type = None
        payload = data_url.strip()

        if payload.startswith("data:"):
            match = self.pattern.match(payload)
            if not match:
                raise FileValidationError("Некорректный формат data URL")
            media_type = match.group("media_type") or None
            payload = match.group("payload")

        try:
            content = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise FileValidationError(f"Некорректные base64 данные файла: {e}")

        return media_type, content


class DataValidator:
    """Общий валидатор данных сертификата."""

    def __init__(self, max_file_size: int = MAX_FILE_SIZE):
        self.date_validator = DateValidator()
        self.file_validator = FileValidator(max_file_size)

    def missing_fields(self, fields: CertificateFields, file_bytes: Optional[bytes],
                       file_name: Optional[str]) -> List[str]:
        """Возвращает список незаполненных обязательных полей."""
        missing = [
            field for field in REQUIRED_FIELDS
            if not (getattr(fields, field) or "").strip()
        ]
        if not (file_name or "").strip():
            missing.append("fileName")
        if not file_bytes:
            missing.append("fileData")
        return missing

    def validate_upload(self, fields: CertificateFields, file_bytes: Optional[bytes],
                        file_name: Optional[str]) -> CertificateUpload:
        """
        Валидация всех данных загрузки.

        Args:
            fields: Поля формы
            file_bytes: Содержимое файла
            file_name: Имя файла

        Returns:
            CertificateUpload: Проверенные данные

        Raises:
            ValidationError: Если не хватает полей или данные некорректны
        """
        missing = self.missing_fields(fields, file_bytes, file_name)
        if missing:
            raise ValidationError(
                f"Не заполнены обязательные поля: {', '.join(missing)}",
                missing_fields=missing
            )

        certificate_date = CertificateDate.from_iso(fields.date)

        try:
            category = Category(fields.category.strip().lower())
        except ValueError:
            allowed = ", ".join(c.value for c in Category)
            raise ValidationError(f"Неизвестная категория: {fields.category}. Допустимые: {allowed}")

        if not self.file_validator.validate_file_name(file_name):
            raise FileValidationError(f"Некорректное имя файла: {file_name}")

        valid, error = self.file_validator.validate(PDF_CONTENT_TYPE, len(file_bytes))
        if not valid:
            raise FileValidationError(error)

        return CertificateUpload(
            name=fields.name.strip(),
            issuer=fields.issuer.strip(),
            date=certificate_date,
            category=category,
            notes=(fields.notes or "").strip(),
            file_name=file_name.strip(),
            content=file_bytes
        )
