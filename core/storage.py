"""
Модуль для работы с файловым хранилищем сертификатов (объектное хранилище).
"""
import json
import logging
import os
from pathlib import Path
from typing import Iterator, Optional
from urllib.parse import quote

from .exceptions import StorageError
from .models import PDF_CONTENT_TYPE

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class BlobStorage:
    """Хранилище бинарного содержимого файлов по ключу."""

    def __init__(self, base_path: str = "blobs", base_url: Optional[str] = None):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.base_url = base_url.rstrip('/') if base_url else None

    def upload(self, key: str, data: bytes, content_type: str = PDF_CONTENT_TYPE) -> str:
        """
        Сохранение файла под заданным ключом

        Args:
            key: Ключ файла
            data: Содержимое
            content_type: MIME тип содержимого

        Returns:
            URL сохраненного файла

        Raises:
            StorageError: При ошибке сохранения
        """
        file_path = self._path_for(key)
        tmp_path = file_path.with_name(f".{file_path.name}.tmp")

        try:
            with open(tmp_path, 'wb') as f:
                f.write(data)
            os.replace(tmp_path, file_path)

            # Метаданные файла храним рядом
            with open(self._meta_path_for(key), 'w', encoding='utf-8') as f:
                json.dump({"content_type": content_type, "size": len(data)}, f)

            os.chmod(file_path, 0o644)

        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            raise StorageError(f"Ошибка сохранения файла {key}: {e}")

        logger.debug(f"Файл {key} сохранен ({len(data)} байт)")
        return self.url_for(key)

    def download(self, key: str) -> bytes:
        """Чтение файла целиком"""
        return b"".join(self.stream(key))

    def stream(self, key: str, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
        """
        Потоковое чтение файла

        Наличие файла проверяется сразу, до начала чтения.

        Raises:
            StorageError: Если файл не найден
        """
        file_path = self._path_for(key)
        if not file_path.is_file():
            raise StorageError(f"Файл {key} не найден в хранилище")

        return self._iter_file(file_path, chunk_size)

    def delete(self, key: str) -> None:
        """
        Удаление файла

        Raises:
            StorageError: Если файл не найден или не может быть удален
        """
        file_path = self._path_for(key)

        try:
            file_path.unlink()
        except FileNotFoundError:
            raise StorageError(f"Файл {key} не найден в хранилище")
        except OSError as e:
            raise StorageError(f"Ошибка удаления файла {key}: {e}")

        self._meta_path_for(key).unlink(missing_ok=True)
        logger.debug(f"Файл {key} удален")

    def exists(self, key: str) -> bool:
        return self._path_for(key).is_file()

    def content_type(self, key: str) -> str:
        """Возвращает MIME тип, с которым файл был сохранен."""
        try:
            with open(self._meta_path_for(key), 'r', encoding='utf-8') as f:
                return json.load(f).get("content_type", PDF_CONTENT_TYPE)
        except (OSError, ValueError):
            return PDF_CONTENT_TYPE

    def url_for(self, key: str) -> str:
        """URL файла: публичный адрес если задан, иначе file:// путь."""
        if self.base_url:
            return f"{self.base_url}/{quote(key)}"
        return self._path_for(key).resolve().as_uri()

    def _path_for(self, key: str) -> Path:
        """Путь к файлу; ключ не может выходить за пределы хранилища."""
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise StorageError(f"Некорректный ключ файла: {key!r}")
        return self.base_path / key

    def _meta_path_for(self, key: str) -> Path:
        return self.base_path / f".{key}.meta.json"

    @staticmethod
    def _iter_file(file_path: Path, chunk_size: int) -> Iterator[bytes]:
        with open(file_path, 'rb') as f:
            while True:
                chunk = f.read(chunk_size)
                if not chunk:
                    break
                yield chunk
