"""
Тесты для модуля валидации
"""
import pytest

from core.exceptions import DateValidationError, FileValidationError, ValidationError
from core.models import Category, CertificateDate, CertificateFields
from core.validators import DataURLCodec, DataValidator, DateValidator, FileValidator


class TestCertificateDate:
    """Тесты для даты сертификата"""

    @pytest.mark.parametrize("year,month,day", [
        ("2023", "02", "31"),
        ("2023", "13", "01"),
        ("2023", "00", "10"),
        ("2023", "04", "31"),
        ("1899", "01", "01"),
        ("2101", "01", "01"),
    ])
    def test_parse_rejects_impossible_dates(self, year, month, day):
        """Тест отклонения несуществующих дат"""
        with pytest.raises(DateValidationError):
            CertificateDate.parse(year, month, day)

    @pytest.mark.parametrize("year,month,day", [
        ("2023", "02", "28"),
        ("2024", "02", "29"),
        ("1900", "01", "01"),
        ("2100", "12", "31"),
    ])
    def test_parse_accepts_real_dates(self, year, month, day):
        """Тест корректных дат"""
        parsed = CertificateDate.parse(year, month, day)
        assert parsed.isoformat() == f"{year}-{month}-{day}"

    def test_parse_rejects_non_numeric(self):
        with pytest.raises(DateValidationError):
            CertificateDate.parse("20a4", "05", "10")
        with pytest.raises(DateValidationError):
            CertificateDate.parse("2024", "", "10")

    def test_parse_accepts_ints_and_spaces(self):
        assert CertificateDate.parse(2024, " 5 ", 9).isoformat() == "2024-05-09"

    def test_from_iso(self):
        """Тест разбора ISO даты"""
        parsed = CertificateDate.from_iso("2024-05-10")
        assert (parsed.year, parsed.month, parsed.day) == (2024, 5, 10)
        assert parsed.to_date().isoformat() == "2024-05-10"

    @pytest.mark.parametrize("value", ["2024/05/10", "10.05.2024", "2024-5-10", "", "2023-02-29"])
    def test_from_iso_invalid(self, value):
        with pytest.raises(DateValidationError):
            CertificateDate.from_iso(value)

    def test_date_validator_returns_message(self):
        validator = DateValidator()

        assert validator.validate("2024", "02", "29") == (True, "")
        valid, error = validator.validate("2023", "02", "29")
        assert valid is False
        assert "2023-02-29" in error

        assert validator.validate_iso("2024-05-10")[0] is True
        assert validator.validate_iso("2024-13-10")[0] is False


class TestFileValidator:
    """Тесты для проверки файла"""

    def test_pdf_within_limit(self):
        assert FileValidator().validate("application/pdf", 10 * 1024 * 1024) == (True, "")

    def test_rejects_other_types(self):
        valid, error = FileValidator().validate("image/png", 100)
        assert valid is False
        assert "PDF" in error

        assert FileValidator().validate(None, 100)[0] is False

    def test_rejects_large_file(self):
        valid, error = FileValidator().validate("application/pdf", 10 * 1024 * 1024 + 1)
        assert valid is False
        assert "10 МБ" in error

    def test_custom_limit(self):
        assert FileValidator(max_file_size=100).validate("application/pdf", 101)[0] is False

    @pytest.mark.parametrize("name,expected", [
        ("aws.pdf", True),
        ("сертификат 2024.pdf", True),
        ("../etc/passwd", False),
        ("dir/file.pdf", False),
        ("dir\\file.pdf", False),
        ("..", False),
        ("   ", False),
    ])
    def test_validate_file_name(self, name, expected):
        assert FileValidator().validate_file_name(name) is expected


class TestDataURLCodec:
    """Тесты для кодирования data URL"""

    def test_encode(self):
        assert DataURLCodec().encode(b"%PDF") == "data:application/pdf;base64,JVBERg=="

    def test_decode_data_url(self):
        media_type, content = DataURLCodec().decode("data:application/pdf;base64,JVBERg==")
        assert media_type == "application/pdf"
        assert content == b"%PDF"

    def test_decode_with_parameters(self):
        media_type, content = DataURLCodec().decode("data:application/pdf;name=a.pdf;base64,JVBERg==")
        assert media_type == "application/pdf"
        assert content == b"%PDF"

    def test_decode_bare_base64(self):
        assert DataURLCodec().decode("JVBERg==") == (None, b"%PDF")

    @pytest.mark.parametrize("value", ["data:application/pdf,JVBERg==", "not base64!", "JVBERg="])
    def test_decode_invalid(self, value):
        with pytest.raises(FileValidationError):
            DataURLCodec().decode(value)


class TestDataValidator:
    """Тесты для общей валидации загрузки"""

    def test_validate_upload(self, certificate_fields, pdf_bytes):
        upload = DataValidator().validate_upload(certificate_fields, pdf_bytes, " aws.pdf ")

        assert upload.name == "AWS Cert"
        assert upload.category == Category.PROFESSIONAL
        assert upload.date.isoformat() == "2024-05-10"
        assert upload.file_name == "aws.pdf"
        assert upload.content == pdf_bytes

    def test_missing_fields_listed(self):
        fields = CertificateFields(name="AWS Cert", issuer="  ")

        with pytest.raises(ValidationError) as exc_info:
            DataValidator().validate_upload(fields, None, None)

        assert exc_info.value.missing_fields == ["issuer", "date", "category", "fileName", "fileData"]

    def test_missing_file_data(self, certificate_fields):
        with pytest.raises(ValidationError) as exc_info:
            DataValidator().validate_upload(certificate_fields, b"", "aws.pdf")

        assert exc_info.value.missing_fields == ["fileData"]

    def test_unknown_category(self, certificate_fields, pdf_bytes):
        fields = certificate_fields.model_copy(update={"category": "hobby"})

        with pytest.raises(ValidationError) as exc_info:
            DataValidator().validate_upload(fields, pdf_bytes, "aws.pdf")

        assert "hobby" in str(exc_info.value)

    def test_impossible_date(self, certificate_fields, pdf_bytes):
        fields = certificate_fields.model_copy(update={"date": "2023-02-31"})

        with pytest.raises(DateValidationError):
            DataValidator().validate_upload(fields, pdf_bytes, "aws.pdf")

    def test_file_too_large(self, certificate_fields):
        with pytest.raises(FileValidationError):
            DataValidator(max_file_size=1024).validate_upload(certificate_fields, b"0" * 1025, "aws.pdf")

    def test_file_name_with_separator(self, certificate_fields, pdf_bytes):
        with pytest.raises(FileValidationError):
            DataValidator().validate_upload(certificate_fields, pdf_bytes, "../aws.pdf")
