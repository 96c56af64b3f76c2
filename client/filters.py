"""
Фильтрация и отображение списка сертификатов.
"""
from typing import Iterable, List

from core.exceptions import DateValidationError
from core.models import Category, Certificate, CertificateDate

CATEGORY_ALL = "all"

MONTH_NAMES = (
    "января", "февраля", "марта", "апреля", "мая", "июня",
    "июля", "августа", "сентября", "октября", "ноября", "декабря",
)


def filter_certificates(certificates: Iterable[Certificate], category: str = CATEGORY_ALL,
                        term: str = "") -> List[Certificate]:
    """
    Фильтр по категории, затем поиск по строке.

    Args:
        certificates: Записи из кэша
        category: Категория или CATEGORY_ALL
        term: Строка поиска; пустая строка ничего не отсекает

    Returns:
        List[Certificate]: Подходящие записи в исходном порядке
    """
    result = list(certificates)

    if category != CATEGORY_ALL:
        result = [cert for cert in result if cert.category.value == category]

    term = term.strip()
    if term:
        result = [cert for cert in result if cert.matches(term)]

    return result


def category_name(category: str) -> str:
    """Название категории для отображения; неизвестное значение выводится как есть."""
    try:
        return Category(category).display_name
    except ValueError:
        return category


def format_date(value: str) -> str:
    """Дата в длинном формате: '10 мая 2024 г.'"""
    try:
        parsed = CertificateDate.from_iso(value)
    except DateValidationError:
        return value
    return f"{parsed.day} {MONTH_NAMES[parsed.month - 1]} {parsed.year} г."
