"""
Основной модуль бизнес-логики хранилища сертификатов.
"""

from .service import CertificateService, build_certificate_service
from .models import Category, Certificate, CertificateDate, CertificateFields, UploadRequest
from .generator import CertificateIDGenerator
from .validators import DataValidator, DataURLCodec
from .database import CertificateRepository, DatabaseManager
from .storage import BlobStorage
from .local_storage import LocalCertificateVault, LocalStorage

__version__ = "1.0.0"

__all__ = [
    'CertificateService',
    'build_certificate_service',
    'Category',
    'Certificate',
    'CertificateDate',
    'CertificateFields',
    'UploadRequest',
    'CertificateIDGenerator',
    'DataValidator',
    'DataURLCodec',
    'CertificateRepository',
    'DatabaseManager',
    'BlobStorage',
    'LocalCertificateVault',
    'LocalStorage'
]
