"""
Клиентская часть хранилища сертификатов, не зависящая от конкретного UI.
"""

from .backends import LocalBackend, RemoteBackend, create_backend
from .controller import Intent, VaultController, VaultView
from .state import AppState, Page, UploadState

__all__ = [
    'AppState',
    'Intent',
    'LocalBackend',
    'Page',
    'RemoteBackend',
    'UploadState',
    'VaultController',
    'VaultView',
    'create_backend',
]
