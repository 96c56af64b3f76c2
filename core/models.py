"""
Pydantic модели для валидации и сериализации данных сертификатов.
"""

import re
from datetime import date as calendar_date, datetime, timezone
from enum import Enum
from typing import Optional, Union
from pydantic import BaseModel, Field, field_validator, model_validator
from .exceptions import DateValidationError

PDF_CONTENT_TYPE = "application/pdf"
MIN_YEAR = 1900
MAX_YEAR = 2100

ISO_DATE_PATTERN = re.compile(r'^(\d{4})-(\d{2})-(\d{2})$')


class Category(str, Enum):
    """Категория сертификата."""

    DEGREE = "degree"
    COURSE = "course"
    ACHIEVEMENT = "achievement"
    PROFESSIONAL = "professional"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        """Возвращает название категории для отображения."""
        return CATEGORY_DISPLAY_NAMES[self]


CATEGORY_DISPLAY_NAMES = {
    Category.DEGREE: "Диплом",
    Category.COURSE: "Окончание курса",
    Category.ACHIEVEMENT: "Достижение",
    Category.PROFESSIONAL: "Профессиональный",
    Category.OTHER: "Другое",
}


class CertificateDate(BaseModel):
    """Дата сертификата (год, месяц, день), всегда корректная по календарю."""
    year: int
    month: int
    day: int

    @model_validator(mode="after")
    def validate_calendar(self):
        """Проверка, что дата существует в календаре."""
        if not MIN_YEAR <= self.year <= MAX_YEAR:
            raise DateValidationError(f"Год должен быть в диапазоне {MIN_YEAR}-{MAX_YEAR}: {self.year}")
        if not 1 <= self.month <= 12:
            raise DateValidationError(f"Месяц должен быть от 1 до 12: {self.month}")
        if not 1 <= self.day <= 31:
            raise DateValidationError(f"День должен быть от 1 до 31: {self.day}")

        try:
            calendar_date(self.year, self.month, self.day)
        except ValueError:
            raise DateValidationError(
                f"Несуществующая дата: {self.year:04d}-{self.month:02d}-{self.day:02d}"
            )

        return self

    @classmethod
    def parse(cls, year: Union[str, int], month: Union[str, int],
              day: Union[str, int]) -> "CertificateDate":
        """
        Собирает дату из отдельных частей (как их вводит пользователь).

        Args:
            year: Год
            month: Месяц
            day: День

        Returns:
            CertificateDate: Корректная дата

        Raises:
            DateValidationError: Если части не образуют существующую дату
        """
        parts = []
        for label, value in (("год", year), ("месяц", month), ("день", day)):
            text = str(value).strip() if value is not None else ""
            if not text.isdigit():
                raise DateValidationError(f"Некорректное значение поля «{label}»: {value!r}")
            parts.append(int(text))

        return cls(year=parts[0], month=parts[1], day=parts[2])

    @classmethod
    def from_iso(cls, value: str) -> "CertificateDate":
        """Разбирает дату в формате YYYY-MM-DD."""
        match = ISO_DATE_PATTERN.match((value or "").strip())
        if not match:
            raise DateValidationError(f"Дата должна быть в формате YYYY-MM-DD: {value!r}")
        year, month, day = match.groups()
        return cls.parse(year, month, day)

    def isoformat(self) -> str:
        """Возвращает дату в формате YYYY-MM-DD."""
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"

    def to_date(self) -> calendar_date:
        return calendar_date(self.year, self.month, self.day)

    class Config:
        """Конфигурация модели."""
        frozen = True


class CertificateFields(BaseModel):
    """Поля формы сертификата; все необязательны до валидации."""
    name: Optional[str] = Field(None, description="Название сертификата")
    issuer: Optional[str] = Field(None, description="Кем выдан")
    date: Optional[str] = Field(None, description="Дата выдачи YYYY-MM-DD")
    category: Optional[str] = Field(None, description="Категория")
    notes: Optional[str] = Field(None, description="Заметки")


class UploadRequest(CertificateFields):
    """Модель тела запроса на загрузку сертификата."""
    file_name: Optional[str] = Field(None, alias="fileName", description="Исходное имя файла")
    file_data: Optional[str] = Field(None, alias="fileData", description="Файл в виде data URL (base64)")

    class Config:
        """Конфигурация модели."""
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "name": "AWS Solutions Architect",
                "issuer": "Amazon",
                "date": "2024-05-10",
                "category": "professional",
                "notes": "",
                "fileName": "aws.pdf",
                "fileData": "data:application/pdf;base64,JVBERi0xLjQK"
            }
        }


class CertificateUpload(BaseModel):
    """Проверенные данные для создания сертификата."""
    name: str
    issuer: str
    date: CertificateDate
    category: Category
    notes: str = ""
    file_name: str
    content: bytes


class Certificate(BaseModel):
    """Запись метаданных сертификата."""
    id: str = Field(..., description="Уникальный ID сертификата")
    name: str = Field(..., description="Название сертификата")
    issuer: str = Field(..., description="Кем выдан")
    date: str = Field(..., description="Дата выдачи YYYY-MM-DD")
    category: Category = Field(..., description="Категория")
    notes: str = Field(default="", description="Заметки")
    file_name: str = Field(..., alias="fileName", description="Исходное имя файла")
    blob_name: str = Field(..., alias="blobName", description="Ключ файла в хранилище")
    file_url: str = Field(..., alias="fileUrl", description="Расположение содержимого файла")
    uploaded_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        alias="uploadedAt",
        description="Время загрузки"
    )

    @field_validator('date')
    def validate_date(cls, v):
        """Дата должна быть корректной по календарю."""
        return CertificateDate.from_iso(v).isoformat()

    @field_validator('notes', mode='before')
    def default_notes(cls, v):
        return v or ""

    def to_dict(self) -> dict:
        """Конвертирует запись в словарь для JSON сериализации."""
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def from_dict(cls, data: dict) -> "Certificate":
        """Создает запись из словаря (формат API и локального хранилища)."""
        return cls.model_validate(data)

    def matches(self, term: str) -> bool:
        """Проверяет вхождение строки в название, издателя или заметки (без учета регистра)."""
        needle = term.lower()
        return (
            needle in self.name.lower()
            or needle in self.issuer.lower()
            or needle in (self.notes or "").lower()
        )

    class Config:
        """Конфигурация модели."""
        populate_by_name = True
        from_attributes = True
        json_schema_extra = {
            "example": {
                "id": "5b1f8f0e-3c56-4f0b-9a7e-3d9b2f1c6a10",
                "name": "AWS Solutions Architect",
                "issuer": "Amazon",
                "date": "2024-05-10",
                "category": "professional",
                "notes": "",
                "fileName": "aws.pdf",
                "blobName": "5b1f8f0e-3c56-4f0b-9a7e-3d9b2f1c6a10-aws.pdf",
                "fileUrl": "http://localhost:5000/blobs/5b1f8f0e-3c56-4f0b-9a7e-3d9b2f1c6a10-aws.pdf",
                "uploadedAt": "2024-05-10T12:00:00Z"
            }
        }
