"""
Выбор и чтение файла сертификата на стороне клиента.
"""
import asyncio
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from core.exceptions import FileReadTimeoutError, FileValidationError, StorageError
from core.models import PDF_CONTENT_TYPE
from core.validators import DataURLCodec

logger = logging.getLogger(__name__)

DEFAULT_READ_TIMEOUT = 30.0


@dataclass(frozen=True)
class SelectedFile:
    """Файл, выбранный пользователем."""

    path: Path
    name: str
    mime_type: Optional[str]
    size: int

    @classmethod
    def from_path(cls, path) -> "SelectedFile":
        """
        Описывает файл на диске.

        Raises:
            FileValidationError: Если файла нет
        """
        path = Path(path)
        if not path.is_file():
            raise FileValidationError(f"Файл не найден: {path}")

        mime_type, _ = mimetypes.guess_type(path.name)
        return cls(path=path, name=path.name, mime_type=mime_type, size=path.stat().st_size)

    @property
    def is_pdf(self) -> bool:
        return self.mime_type == PDF_CONTENT_TYPE

    @property
    def size_kb(self) -> str:
        """Размер в килобайтах с двумя знаками после запятой."""
        return f"{self.size / 1024:.2f}"


def _read_bytes(path: Path) -> bytes:
    return path.read_bytes()


async def read_file_bytes(selected: SelectedFile, timeout: float = DEFAULT_READ_TIMEOUT) -> bytes:
    """
    Читает содержимое файла с ограничением по времени.

    Raises:
        FileReadTimeoutError: Если чтение не уложилось в timeout секунд
        StorageError: Если файл не удалось прочитать
    """
    try:
        return await asyncio.wait_for(asyncio.to_thread(_read_bytes, selected.path), timeout)
    except asyncio.TimeoutError:
        logger.error(f"Чтение файла {selected.name} превысило {timeout} с")
        raise FileReadTimeoutError(f"Не удалось прочитать файл за {timeout:g} с")
    except OSError as e:
        logger.error(f"Ошибка чтения файла {selected.name}: {e}")
        raise StorageError(f"Не удалось прочитать файл: {e}")


async def read_file_as_data_url(selected: SelectedFile, timeout: float = DEFAULT_READ_TIMEOUT) -> str:
    """Читает файл и кодирует его в data URL."""
    content = await read_file_bytes(selected, timeout)
    return DataURLCodec().encode(content, selected.mime_type or PDF_CONTENT_TYPE)
