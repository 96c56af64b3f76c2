"""
Общие фикстуры для тестов
"""
import pytest
from fastapi.testclient import TestClient

from config.settings import Settings
from core.api import CertificateAPI
from core.database import CertificateRepository, DatabaseManager
from core.local_storage import LocalCertificateVault, LocalStorage
from core.models import CertificateFields
from core.service import CertificateService
from core.storage import BlobStorage
from core.validators import DataURLCodec


def make_pdf(size: int = 2048) -> bytes:
    """PDF-подобное содержимое заданного размера"""
    header = b"%PDF-1.4\n"
    return header + b"0" * (size - len(header))


@pytest.fixture
def pdf_bytes():
    """Файл на 2 КБ"""
    return make_pdf()


@pytest.fixture
def pdf_file(tmp_path, pdf_bytes):
    """PDF файл на диске"""
    path = tmp_path / "aws.pdf"
    path.write_bytes(pdf_bytes)
    return path


@pytest.fixture
def certificate_fields():
    """Поля сертификата из примера"""
    return CertificateFields(
        name="AWS Cert",
        issuer="Amazon",
        date="2024-05-10",
        category="professional",
        notes="Solutions Architect"
    )


@pytest.fixture
def upload_payload(pdf_bytes):
    """Тело запроса на загрузку"""
    return {
        "name": "AWS Cert",
        "issuer": "Amazon",
        "date": "2024-05-10",
        "category": "professional",
        "notes": "Solutions Architect",
        "fileName": "aws.pdf",
        "fileData": DataURLCodec().encode(pdf_bytes)
    }


@pytest.fixture
def test_settings(tmp_path):
    """Настройки с путями во временной директории"""
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'db' / 'test.db'}",
        blob_storage_path=tmp_path / "blobs",
        local_storage_path=tmp_path / "local" / "storage.json",
        log_file=tmp_path / "logs" / "test.log",
        public_url="http://testserver"
    )


@pytest.fixture
def db_manager(test_settings):
    """БД во временном файле"""
    test_settings.create_directories()
    manager = DatabaseManager(test_settings.database_url)
    manager.create_tables()
    yield manager
    manager.dispose()


@pytest.fixture
def blob_storage(test_settings):
    return BlobStorage(str(test_settings.blob_storage_path), test_settings.blob_base_url)


@pytest.fixture
def repository(db_manager):
    return CertificateRepository(db_manager)


@pytest.fixture
def service(repository, blob_storage):
    """Сервис поверх временных хранилищ"""
    return CertificateService(repository, blob_storage)


@pytest.fixture
def api(service):
    return CertificateAPI(service)


@pytest.fixture
def client(api):
    """Тестовый клиент"""
    return TestClient(api.app)


@pytest.fixture
def local_storage(tmp_path):
    return LocalStorage(str(tmp_path / "local_storage.json"), quota_bytes=5 * 1024 * 1024)


@pytest.fixture
def vault(local_storage):
    return LocalCertificateVault(local_storage)
