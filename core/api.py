"""
API для работы с сертификатами
"""
import logging
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import quote

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, StreamingResponse

from .exceptions import (
    CertificateNotFoundError, FileValidationError, StorageError, ValidationError
)
from .models import CertificateFields, PDF_CONTENT_TYPE, UploadRequest
from .service import CertificateService
from .validators import DataURLCodec


def content_disposition(file_name: str, disposition: str = "attachment") -> str:
    """Заголовок Content-Disposition с исходным именем файла."""
    try:
        file_name.encode("latin-1")
    except UnicodeEncodeError:
        return f"{disposition}; filename*=UTF-8''{quote(file_name)}"

    escaped = file_name.replace('\\', '\\\\').replace('"', '\\"')
    return f'{disposition}; filename="{escaped}"'


class CertificateAPI:
    """API для работы с сертификатами"""

    def __init__(self, service: CertificateService, title: str = "CertVault API", lifespan=None,
                 serve_blobs: bool = False):
        self.service = service
        self.serve_blobs = serve_blobs
        self.codec = DataURLCodec()
        self.logger = logging.getLogger(__name__)

        # Создание FastAPI приложения
        self.app = FastAPI(
            title=title,
            description="API для хранения PDF сертификатов",
            version="1.0.0",
            lifespan=lifespan
        )

        self._setup_exception_handlers()
        self._setup_routes()

    @staticmethod
    def _error_response(status_code: int, message: str, error: Optional[Exception] = None) -> JSONResponse:
        """Ответ об ошибке в едином формате"""
        content = {"success": False, "message": message}
        if error is not None:
            content["error"] = str(error)
            missing = getattr(error, "missing_fields", None)
            if missing:
                content["missingFields"] = missing
        return JSONResponse(status_code=status_code, content=content)

    def _decode_file(self, request: UploadRequest) -> Optional[bytes]:
        """Декодирует fileData; пустое значение считается отсутствующим файлом"""
        if not request.file_data:
            return None

        media_type, content = self.codec.decode(request.file_data)
        if media_type and media_type != PDF_CONTENT_TYPE:
            raise FileValidationError(f"Можно загружать только PDF файлы, получен {media_type}")
        return content

    def _setup_exception_handlers(self):
        """Ошибки разбора тела запроса отдаются как 400 в общем формате"""

        @self.app.exception_handler(RequestValidationError)
        async def request_validation_handler(request: Request, exc: RequestValidationError):
            self.logger.warning(f"Некорректный запрос {request.method} {request.url.path}: {exc.errors()}")
            return self._error_response(400, "Некорректный формат запроса", exc)

    def _setup_routes(self):
        """Настройка маршрутов API"""

        @self.app.post("/api/certificates/upload", status_code=201)
        def upload_certificate(request: UploadRequest):
            """Загрузка нового сертификата"""
            try:
                file_bytes = self._decode_file(request)
                fields = CertificateFields(
                    name=request.name,
                    issuer=request.issuer,
                    date=request.date,
                    category=request.category,
                    notes=request.notes
                )

                certificate = self.service.create_certificate(fields, file_bytes, request.file_name)

                return {
                    "success": True,
                    "message": "Сертификат успешно загружен",
                    "data": certificate.to_dict()
                }

            except ValidationError as e:
                self.logger.warning(f"Ошибка валидации: {e}")
                return self._error_response(400, str(e), e)
            except StorageError as e:
                self.logger.error(f"Ошибка сохранения: {e}")
                return self._error_response(500, "Не удалось загрузить сертификат", e)
            except Exception as e:
                self.logger.error(f"Неожиданная ошибка: {e}")
                return self._error_response(500, "Не удалось загрузить сертификат", e)

        @self.app.get("/api/certificates")
        def list_certificates():
            """Получение всех сертификатов"""
            try:
                certificates = self.service.list_certificates()

                return {
                    "success": True,
                    "count": len(certificates),
                    "data": [cert.to_dict() for cert in certificates]
                }

            except Exception as e:
                self.logger.error(f"Ошибка получения сертификатов: {e}")
                return self._error_response(500, "Не удалось получить список сертификатов", e)

        @self.app.get("/api/certificates/download/{certificate_id}")
        def download_certificate(certificate_id: str):
            """Скачивание PDF файла сертификата"""
            try:
                certificate, stream = self.service.download_certificate(certificate_id)
                self.logger.info(f"Начато скачивание {certificate.file_name}")

                return StreamingResponse(
                    stream,
                    media_type=self.service.blob_storage.content_type(certificate.blob_name),
                    headers={"Content-Disposition": content_disposition(certificate.file_name)}
                )

            except CertificateNotFoundError as e:
                return self._error_response(404, "Сертификат не найден", e)
            except Exception as e:
                self.logger.error(f"Ошибка скачивания сертификата {certificate_id}: {e}")
                return self._error_response(500, "Не удалось скачать сертификат", e)

        @self.app.get("/api/certificates/{certificate_id}")
        def get_certificate(certificate_id: str):
            """Получение сертификата по ID"""
            try:
                certificate = self.service.get_certificate(certificate_id)

                return {"success": True, "data": certificate.to_dict()}

            except CertificateNotFoundError as e:
                return self._error_response(404, "Сертификат не найден", e)
            except Exception as e:
                self.logger.error(f"Ошибка получения сертификата {certificate_id}: {e}")
                return self._error_response(500, "Не удалось получить сертификат", e)

        @self.app.delete("/api/certificates/{certificate_id}")
        def delete_certificate(certificate_id: str):
            """Удаление сертификата вместе с файлом"""
            try:
                self.service.delete_certificate(certificate_id)

                return {"success": True, "message": "Сертификат успешно удален"}

            except CertificateNotFoundError as e:
                return self._error_response(404, "Сертификат не найден", e)
            except Exception as e:
                self.logger.error(f"Ошибка удаления сертификата {certificate_id}: {e}")
                return self._error_response(500, "Не удалось удалить сертификат", e)

        if self.serve_blobs:
            self._setup_blob_route()

        @self.app.get("/health")
        async def health_check():
            """Проверка здоровья API"""
            return {
                "status": "ok",
                "message": "CertVault API is running",
                "timestamp": datetime.now(timezone.utc).isoformat()
            }

    def _setup_blob_route(self):
        """Раздача сохраненных файлов, на которые ссылается fileUrl"""
        blob_storage = self.service.blob_storage

        @self.app.get("/blobs/{blob_name}")
        def serve_blob(blob_name: str):
            # Служебные файлы хранилища отсекаются проверкой ключа в stream()
            try:
                stream = blob_storage.stream(blob_name)
            except StorageError as e:
                self.logger.info(f"Файл {blob_name!r} не отдан: {e}")
                return self._error_response(404, "Файл не найден")

            return StreamingResponse(
                stream,
                media_type=blob_storage.content_type(blob_name),
                headers={"Content-Disposition": content_disposition(blob_name, "inline")}
            )
