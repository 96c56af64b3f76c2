"""
FastAPI сервер для API сертификатов
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from config.settings import Settings, get_settings
from core.api import CertificateAPI
from core.service import build_certificate_service


def setup_logging(settings: Settings):
    """Настройка логирования"""
    settings.log_file.parent.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(settings.log_file, encoding='utf-8'),
            logging.StreamHandler()
        ]
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Создание FastAPI приложения"""
    settings = settings or get_settings()
    setup_logging(settings)

    # Настройка хранилищ
    service = build_certificate_service(settings)
    db_manager = service.certificate_repo.db_manager

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Управление жизненным циклом приложения"""
        logging.info("Запуск API сервера...")

        if db_manager.health_check():
            logging.info("Подключение к БД установлено")
        else:
            logging.warning("База данных недоступна")

        yield

        logging.info("Остановка API сервера...")
        db_manager.dispose()

    certificate_api = CertificateAPI(
        service, settings.app_name, lifespan=lifespan, serve_blobs=settings.serve_blobs
    )
    app = certificate_api.app
    app.state.certificate_api = certificate_api

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "api_server:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.is_development
    )
