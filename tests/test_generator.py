"""
Тесты для генератора идентификаторов
"""
import itertools

import pytest

from core.exceptions import GenerationError
from core.generator import CertificateIDGenerator


class TestCertificateIDGenerator:
    """Тесты генератора ID сертификатов."""

    def test_generate_valid_id(self):
        """Тест генерации валидного ID."""
        cert_id = CertificateIDGenerator().generate()

        assert len(cert_id) == 36
        assert cert_id.count('-') == 4
        assert CertificateIDGenerator.validate_id_format(cert_id)

    def test_generate_skips_existing(self):
        """Занятые ID пропускаются"""
        ids = itertools.cycle(["taken", "free"])
        generator = CertificateIDGenerator(id_factory=lambda: next(ids))

        assert generator.generate({"taken"}) == "free"

    def test_generate_gives_up(self):
        generator = CertificateIDGenerator(id_factory=lambda: "taken")

        with pytest.raises(GenerationError):
            generator.generate({"taken"})

    def test_validate_id_format(self):
        """Тест валидации формата ID."""
        assert CertificateIDGenerator.validate_id_format("5b1f8f0e-3c56-4f0b-9a7e-3d9b2f1c6a10")

        assert not CertificateIDGenerator.validate_id_format("SHORT")
        assert not CertificateIDGenerator.validate_id_format("5b1f8f0e-3c56-4f0b-9a7e")
        assert not CertificateIDGenerator.validate_id_format("")

    def test_blob_name(self):
        assert CertificateIDGenerator.blob_name("abc", "aws.pdf") == "abc-aws.pdf"
