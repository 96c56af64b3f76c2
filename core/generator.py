"""
Генератор уникальных идентификаторов сертификатов и ключей хранилища.
"""

import uuid
from typing import Callable, Optional, Set
from .exceptions import GenerationError


class CertificateIDGenerator:
    """Генератор уникальных ID сертификатов."""

    def __init__(self, id_factory: Optional[Callable[[], str]] = None):
        self.id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self.max_attempts = 10  # Максимальное количество попыток генерации уникального ID

    def generate(self, existing_ids: Set[str] = None) -> str:
        """
        Генерирует уникальный ID сертификата (UUID4).

        Args:
            existing_ids: Множество существующих ID для проверки уникальности

        Returns:
            str: Уникальный ID сертификата

        Raises:
            GenerationError: Если не удалось сгенерировать уникальный ID
        """
        if existing_ids is None:
            existing_ids = set()

        for attempt in range(self.max_attempts):
            certificate_id = self.id_factory()

            if certificate_id not in existing_ids:
                return certificate_id

        raise GenerationError(
            f"Не удалось сгенерировать уникальный ID сертификата за {self.max_attempts} попыток"
        )

    @staticmethod
    def blob_name(certificate_id: str, file_name: str) -> str:
        """Возвращает ключ файла в хранилище: {id}-{fileName}."""
        return f"{certificate_id}-{file_name}"

    @staticmethod
    def validate_id_format(certificate_id: str) -> bool:
        """
        Проверяет, что ID является корректным UUID.

        Args:
            certificate_id: ID для проверки

        Returns:
            bool: True если формат корректен, False иначе
        """
        try:
            uuid.UUID(str(certificate_id))
        except ValueError:
            return False
        return True
