"""
Настройки приложения, загружаемые из переменных окружения.
"""

import logging
from pathlib import Path
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Настройки приложения."""

    # Настройки API сервера
    app_name: str = Field(default="CertVault API", description="Название API")
    host: str = Field(default="0.0.0.0", description="Адрес для прослушивания")
    port: int = Field(default=5000, description="Порт API сервера")
    environment: str = Field(default="production", description="Окружение (development/production)")
    public_url: str = Field(
        default="http://localhost:5000",
        description="Публичный адрес сервера, из которого строятся ссылки на файлы"
    )
    serve_blobs: bool = Field(default=True, description="Раздавать сохраненные файлы по /blobs")

    # Настройки хранилищ
    database_url: str = Field(
        default="sqlite:///./data/certvault.db",
        description="URL базы данных для метаданных"
    )
    blob_storage_path: Path = Field(
        default=Path("./data/blobs"),
        description="Директория для содержимого файлов"
    )

    # Локальное хранилище (режим без сервера)
    local_storage_path: Path = Field(
        default=Path("./data/local_storage.json"),
        description="Файл локального хранилища"
    )
    local_storage_quota: int = Field(
        default=5 * 1024 * 1024,
        ge=1,
        description="Лимит локального хранилища в байтах"
    )

    # Ограничения загрузки
    max_file_size: int = Field(default=10 * 1024 * 1024, ge=1, description="Максимальный размер PDF")
    file_read_timeout: float = Field(default=30.0, gt=0, description="Таймаут чтения файла, сек")

    # Настройки клиента
    api_url: str = Field(default="http://localhost:5000", description="Адрес API для клиента")

    # Настройки логирования
    log_level: str = Field(default="INFO", description="Уровень логирования")
    log_file: Path = Field(
        default=Path("./logs/certvault.log"),
        description="Путь к файлу логов"
    )

    debug: bool = Field(default=False, description="Режим отладки")

    @property
    def blob_base_url(self) -> Optional[str]:
        """Возвращает базовый URL файлов, если они раздаются сервером."""
        if not self.serve_blobs:
            return None
        return f"{self.public_url.rstrip('/')}/blobs"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @field_validator('log_level')
    def validate_log_level(cls, v):
        """Валидация уровня логирования."""
        level = v.upper().strip()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Неизвестный уровень логирования: {v}")
        return level

    def create_directories(self):
        """Создает необходимые директории."""
        paths = [
            self.blob_storage_path,
            self.local_storage_path.parent,
            self.log_file.parent,
        ]

        if self.database_url.startswith("sqlite:///"):
            db_path = self.database_url[len("sqlite:///"):]
            if db_path and db_path != ":memory:":
                paths.append(Path(db_path).parent)

        for path in paths:
            path.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Директория готова: {path}")

    class Config:
        """Конфигурация настроек."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Игнорировать дополнительные поля из .env


# Глобальная переменная с настройками
settings = Settings()


def get_settings() -> Settings:
    """Возвращает объект настроек."""
    return settings
