"""
Форма загрузки сертификата и маски ввода даты.
"""
import re
from dataclasses import dataclass
from typing import Optional

from core.exceptions import DateValidationError, ValidationError
from core.models import CertificateDate, CertificateFields

NON_DIGITS = re.compile(r'\D')


def _mask_two_digits(value: str, first_digit_limit: int, maximum: int) -> str:
    digits = NON_DIGITS.sub('', value or '')[:2]

    if len(digits) == 1 and int(digits) > first_digit_limit:
        return '0' + digits

    if len(digits) == 2:
        number = int(digits)
        if number > maximum:
            return f"{maximum:02d}"
        if number < 1:
            return "01"

    return digits


def mask_month(value: str) -> str:
    """Маска ввода месяца: только цифры, не больше двух, 01..12."""
    return _mask_two_digits(value, 1, 12)


def mask_day(value: str) -> str:
    """Маска ввода дня: только цифры, не больше двух, 01..31."""
    return _mask_two_digits(value, 3, 31)


def mask_year(value: str) -> str:
    """Маска ввода года: только цифры, не больше четырех."""
    return NON_DIGITS.sub('', value or '')[:4]


def complete_two_digits(value: str) -> str:
    """Дополняет месяц или день до двух цифр при уходе с поля."""
    if len(value) == 1:
        value = '0' + value
    if value == '00':
        value = '01'
    return value


@dataclass
class UploadForm:
    """Данные формы загрузки в том виде, в каком их ввел пользователь."""

    name: str = ""
    issuer: str = ""
    category: str = ""
    month: str = ""
    day: str = ""
    year: str = ""
    notes: str = ""

    def missing_fields(self):
        required = {
            "name": self.name,
            "issuer": self.issuer,
            "category": self.category,
            "month": self.month,
            "day": self.day,
            "year": self.year,
        }
        return [label for label, value in required.items() if not value.strip()]

    def to_date(self) -> CertificateDate:
        return CertificateDate.parse(self.year, self.month, self.day)

    def to_fields(self) -> CertificateFields:
        """
        Проверяет форму и собирает поля запроса.

        Raises:
            ValidationError: Если не заполнены обязательные поля
            DateValidationError: Если части даты не образуют существующую дату
        """
        missing = self.missing_fields()
        if missing:
            raise ValidationError("Заполните все обязательные поля", missing_fields=missing)

        certificate_date = self.to_date()

        return CertificateFields(
            name=self.name.strip(),
            issuer=self.issuer.strip(),
            date=certificate_date.isoformat(),
            category=self.category.strip(),
            notes=self.notes.strip()
        )

    def validation_error(self) -> Optional[str]:
        """Сообщение для отображения под формой или None."""
        try:
            self.to_fields()
        except (ValidationError, DateValidationError) as e:
            return str(e)
        return None
