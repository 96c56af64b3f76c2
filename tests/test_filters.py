"""
Тесты для фильтрации, формы и масок ввода
"""
from datetime import datetime, timezone

import pytest

from client.filters import CATEGORY_ALL, category_name, filter_certificates, format_date
from client.forms import UploadForm, complete_two_digits, mask_day, mask_month, mask_year
from core.exceptions import DateValidationError, ValidationError
from core.models import Certificate


def make_record(index, name, issuer, category, notes=""):
    certificate_id = f"00000000-0000-4000-8000-00000000000{index}"
    return Certificate(
        id=certificate_id,
        name=name,
        issuer=issuer,
        date="2024-05-10",
        category=category,
        notes=notes,
        file_name=f"{index}.pdf",
        blob_name=f"{certificate_id}-{index}.pdf",
        file_url=f"http://testserver/blobs/{certificate_id}-{index}.pdf",
        uploaded_at=datetime(2024, 5, 10, tzinfo=timezone.utc)
    )


@pytest.fixture
def records():
    return [
        make_record(1, "AWS Solutions Architect", "Amazon", "professional"),
        make_record(2, "Python для анализа данных", "Stepik", "course", notes="Курс по pandas"),
        make_record(3, "Бакалавр информатики", "МГУ", "degree"),
        make_record(4, "AWS Cloud Practitioner", "Amazon", "course"),
    ]


class TestFilterCertificates:
    """Тесты фильтра и поиска"""

    def test_all_with_empty_term(self, records):
        assert filter_certificates(records, CATEGORY_ALL, "") == records

    def test_category_only(self, records):
        result = filter_certificates(records, "course")

        assert [cert.name for cert in result] == ["Python для анализа данных", "AWS Cloud Practitioner"]

    def test_search_case_insensitive(self, records):
        result = filter_certificates(records, CATEGORY_ALL, "aws")

        assert [cert.issuer for cert in result] == ["Amazon", "Amazon"]

    def test_search_by_notes(self, records):
        assert [cert.name for cert in filter_certificates(records, term="PANDAS")] == [
            "Python для анализа данных"
        ]

    def test_category_and_search(self, records):
        """Фильтр и поиск объединяются через И"""
        result = filter_certificates(records, "course", "amazon")

        assert [cert.name for cert in result] == ["AWS Cloud Practitioner"]

    def test_whitespace_term_is_noop(self, records):
        assert filter_certificates(records, "degree", "   ") == [records[2]]

    def test_no_matches(self, records):
        assert filter_certificates(records, "achievement", "aws") == []


class TestDisplayHelpers:
    """Тесты для отображения"""

    def test_category_name(self):
        assert category_name("degree") == "Диплом"
        assert category_name("course") == "Окончание курса"
        assert category_name("unknown") == "unknown"

    def test_format_date(self):
        assert format_date("2024-05-10") == "10 мая 2024 г."
        assert format_date("2023-12-01") == "1 декабря 2023 г."

    def test_format_date_invalid(self):
        assert format_date("not a date") == "not a date"


class TestDateMasks:
    """Тесты масок ввода даты"""

    @pytest.mark.parametrize("value,expected", [
        ("1", "1"),
        ("2", "02"),
        ("13", "12"),
        ("00", "01"),
        ("0a5", "05"),
        ("123", "12"),
        ("", ""),
    ])
    def test_mask_month(self, value, expected):
        assert mask_month(value) == expected

    @pytest.mark.parametrize("value,expected", [
        ("3", "3"),
        ("4", "04"),
        ("32", "31"),
        ("00", "01"),
        ("2x9", "29"),
    ])
    def test_mask_day(self, value, expected):
        assert mask_day(value) == expected

    def test_mask_year(self):
        assert mask_year("20a24x9") == "2024"

    def test_complete_two_digits(self):
        assert complete_two_digits("5") == "05"
        assert complete_two_digits("00") == "01"
        assert complete_two_digits("11") == "11"


class TestUploadForm:
    """Тесты формы загрузки"""

    def test_to_fields(self):
        form = UploadForm(name=" AWS Cert ", issuer="Amazon", category="professional",
                          month="05", day="10", year="2024", notes=" заметка ")

        fields = form.to_fields()

        assert fields.name == "AWS Cert"
        assert fields.date == "2024-05-10"
        assert fields.notes == "заметка"

    def test_missing_fields(self):
        form = UploadForm(name="AWS Cert", month="05")

        with pytest.raises(ValidationError) as exc_info:
            form.to_fields()

        assert exc_info.value.missing_fields == ["issuer", "category", "day", "year"]

    @pytest.mark.parametrize("month,day,year", [("02", "31", "2023"), ("13", "01", "2023")])
    def test_invalid_dates(self, month, day, year):
        form = UploadForm(name="a", issuer="b", category="other", month=month, day=day, year=year)

        with pytest.raises(DateValidationError):
            form.to_fields()
        assert form.validation_error()

    @pytest.mark.parametrize("month,day,year", [("02", "28", "2023"), ("02", "29", "2024")])
    def test_valid_dates(self, month, day, year):
        form = UploadForm(name="a", issuer="b", category="other", month=month, day=day, year=year)

        assert form.validation_error() is None
