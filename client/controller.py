"""
Контроллер клиентского UI: таблица намерений пользователя и их обработчики.

Контроллер не зависит от конкретного UI: все отображение идет через объект
view, который реализует методы протокола VaultView.
"""
import inspect
import logging
from enum import Enum
from typing import Dict, List, Optional, Protocol

from core.exceptions import (
    CertificateNotFoundError, FileReadTimeoutError, FileValidationError,
    QuotaExceededError, StorageError, ValidationError
)
from core.models import Certificate
from core.validators import FileValidator, MAX_FILE_SIZE

from .file_reader import DEFAULT_READ_TIMEOUT, SelectedFile
from .filters import filter_certificates
from .forms import mask_day, mask_month, mask_year
from .state import AppState, Page, UploadState

logger = logging.getLogger(__name__)

QUOTA_MESSAGE = "Превышен лимит хранилища. Удалите часть сертификатов."


class Intent(str, Enum):
    """Действия пользователя."""

    SELECT_FILE = "select_file"
    REMOVE_FILE = "remove_file"
    EDIT_FIELD = "edit_field"
    SUBMIT = "submit"
    FILTER_CHANGE = "filter_change"
    SEARCH_CHANGE = "search_change"
    REQUEST_DELETE = "request_delete"
    CONFIRM_DELETE = "confirm_delete"
    CANCEL_DELETE = "cancel_delete"
    VIEW = "view"
    CLOSE_VIEWER = "close_viewer"
    DOWNLOAD = "download"
    NAVIGATE = "navigate"
    REFRESH = "refresh"


class VaultView(Protocol):
    """То, что контроллер ожидает от UI."""

    def show_toast(self, message: str, kind: str = "success") -> None: ...

    def show_file_preview(self, selected: Optional[SelectedFile]) -> None: ...

    def show_form_error(self, message: Optional[str]) -> None: ...

    def render(self, certificates: List[Certificate]) -> None: ...

    def ask_delete_confirmation(self, certificate: Certificate) -> None: ...

    def show_preview(self, certificate: Certificate, source: str) -> None: ...

    def close_preview(self) -> None: ...

    def save_file(self, file_name: str, content: bytes) -> None: ...

    def navigate(self, page: Page) -> None: ...


FIELD_MASKS = {
    "month": mask_month,
    "day": mask_day,
    "year": mask_year,
}


class VaultController:
    """Контроллер хранилища сертификатов."""

    def __init__(self, backend, view: VaultView, max_file_size: int = MAX_FILE_SIZE,
                 read_timeout: float = DEFAULT_READ_TIMEOUT, state: Optional[AppState] = None):
        self.backend = backend
        self.view = view
        self.read_timeout = read_timeout
        self.file_validator = FileValidator(max_file_size)
        self.state = state or AppState()

        self.handlers: Dict[Intent, object] = {
            Intent.SELECT_FILE: self.select_file,
            Intent.REMOVE_FILE: self.remove_file,
            Intent.EDIT_FIELD: self.edit_field,
            Intent.SUBMIT: self.submit,
            Intent.FILTER_CHANGE: self.filter_change,
            Intent.SEARCH_CHANGE: self.search_change,
            Intent.REQUEST_DELETE: self.request_delete,
            Intent.CONFIRM_DELETE: self.confirm_delete,
            Intent.CANCEL_DELETE: self.cancel_delete,
            Intent.VIEW: self.view_certificate,
            Intent.CLOSE_VIEWER: self.close_viewer,
            Intent.DOWNLOAD: self.download,
            Intent.NAVIGATE: self.navigate,
            Intent.REFRESH: self.refresh,
        }

    async def dispatch(self, intent: Intent, *args, **kwargs):
        """Вызывает обработчик намерения."""
        handler = self.handlers[Intent(intent)]
        result = handler(*args, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result

    def visible_certificates(self) -> List[Certificate]:
        return filter_certificates(
            self.state.certificates, self.state.current_filter, self.state.search_term
        )

    def _render(self):
        self.view.render(self.visible_certificates())

    def find_certificate(self, certificate_id: str) -> Optional[Certificate]:
        for certificate in self.state.certificates:
            if certificate.id == certificate_id:
                return certificate
        return None

    async def refresh(self, render: bool = True) -> List[Certificate]:
        """Загружает список в кэш и перерисовывает его."""
        try:
            self.state.certificates = await self.backend.load_all()
        except Exception as e:
            logger.error(f"Ошибка загрузки сертификатов: {e}")
            self.state.certificates = []
            self.view.show_toast("Ошибка загрузки сертификатов. Список пуст.", "error")

        if render:
            self._render()
        return self.state.certificates

    def select_file(self, path) -> bool:
        """Выбор файла: только PDF и не больше допустимого размера."""
        if self.state.is_submitting:
            logger.info("Загрузка выполняется, выбор файла проигнорирован")
            return False

        try:
            selected = SelectedFile.from_path(path)
        except FileValidationError as e:
            self.view.show_toast(str(e), "error")
            return False

        valid, error = self.file_validator.validate(selected.mime_type, selected.size)
        if not valid:
            logger.info(f"Файл {selected.name} отклонен: {error}")
            self.view.show_toast(error, "error")
            return False

        self.state.current_file = selected
        self.state.upload_state = UploadState.FILE_SELECTED
        self.view.show_file_preview(selected)
        return True

    def remove_file(self) -> bool:
        """Сбрасывает выбранный файл и форму."""
        if self.state.is_submitting:
            logger.info("Загрузка выполняется, сброс формы проигнорирован")
            return False

        self.state.reset_upload()
        self.view.show_file_preview(None)
        self.view.show_form_error(None)
        return True

    def edit_field(self, field: str, value: str) -> str:
        """Изменение поля формы; для частей даты применяется маска."""
        if not hasattr(self.state.form, field):
            raise ValueError(f"Неизвестное поле формы: {field}")
        if self.state.is_submitting:
            return getattr(self.state.form, field)

        mask = FIELD_MASKS.get(field)
        if mask is not None:
            value = mask(value)

        setattr(self.state.form, field, value)
        return value

    async def submit(self) -> Optional[Certificate]:
        """
        Отправка формы.

        Повторная отправка, пока идет текущая попытка, игнорируется. При любой
        ошибке форма и выбранный файл сохраняются.
        """
        state = self.state
        if state.is_submitting:
            logger.info("Загрузка уже выполняется, повторная отправка проигнорирована")
            return None

        if state.current_file is None:
            self.view.show_toast("Сначала выберите файл", "error")
            return None

        state.upload_state = UploadState.VALIDATING
        try:
            fields = state.form.to_fields()
        except ValidationError as e:
            state.form_error = str(e)
            state.upload_state = UploadState.FILE_SELECTED
            self.view.show_form_error(state.form_error)
            self.view.show_toast(state.form_error, "error")
            return None

        state.form_error = None
        self.view.show_form_error(None)
        state.upload_state = UploadState.SUBMITTING

        try:
            certificate = await self.backend.create(fields, state.current_file, self.read_timeout)
        except QuotaExceededError as e:
            self._upload_failed(e, QUOTA_MESSAGE)
            return None
        except FileReadTimeoutError as e:
            self._upload_failed(e, str(e))
            return None
        except ValidationError as e:
            self._upload_failed(e, str(e))
            return None
        except Exception as e:
            self._upload_failed(e, "Не удалось загрузить сертификат. Попробуйте еще раз.")
            return None

        state.upload_state = UploadState.SUCCESS
        logger.info(f"Сертификат {certificate.id} загружен")
        self.view.show_toast("Сертификат успешно загружен")

        state.reset_upload()
        self.view.show_file_preview(None)
        await self.refresh(render=False)
        self.navigate(Page.CERTIFICATES)
        return certificate

    def _upload_failed(self, error: Exception, message: str):
        logger.error(f"Ошибка загрузки сертификата: {error}")
        self.state.upload_state = UploadState.FAILED
        self.view.show_toast(message, "error")
        self.state.upload_state = UploadState.FILE_SELECTED

    def filter_change(self, category: str):
        self.state.current_filter = category
        self._render()

    def search_change(self, term: str):
        self.state.search_term = term
        self._render()

    def request_delete(self, certificate_id: str) -> bool:
        """Первый шаг удаления: запоминает ID и просит подтверждение."""
        certificate = self.find_certificate(certificate_id)
        if certificate is None:
            self.view.show_toast("Сертификат не найден", "error")
            return False

        self.state.pending_delete_id = certificate_id
        self.view.ask_delete_confirmation(certificate)
        return True

    def cancel_delete(self):
        self.state.pending_delete_id = None

    async def confirm_delete(self) -> bool:
        """
        Второй шаг удаления.

        Если удаление не удалось, ID остается в состоянии для повторной попытки.
        """
        certificate_id = self.state.pending_delete_id
        if certificate_id is None:
            return False

        try:
            await self.backend.delete(certificate_id)
        except CertificateNotFoundError as e:
            logger.warning(f"Удаление несуществующего сертификата: {e}")
            self.state.pending_delete_id = None
            self.view.show_toast("Сертификат не найден", "error")
            await self.refresh()
            return False
        except Exception as e:
            logger.error(f"Ошибка удаления сертификата {certificate_id}: {e}")
            self.view.show_toast("Не удалось удалить сертификат", "error")
            return False

        self.state.pending_delete_id = None
        if self.state.viewing_id == certificate_id:
            self.close_viewer()

        self.view.show_toast("Сертификат успешно удален")
        await self.refresh()
        return True

    def view_certificate(self, certificate_id: str) -> bool:
        """Открывает просмотр файла без скачивания."""
        certificate = self.find_certificate(certificate_id)
        if certificate is None:
            self.view.show_toast("Сертификат не найден", "error")
            return False

        try:
            source = self.backend.preview_source(certificate)
        except Exception as e:
            logger.error(f"Ошибка открытия сертификата {certificate_id}: {e}")
            self.view.show_toast("Не удалось открыть сертификат", "error")
            return False

        self.state.viewing_id = certificate_id
        self.view.show_preview(certificate, source)
        return True

    def close_viewer(self):
        self.state.viewing_id = None
        self.view.close_preview()

    async def download(self, certificate_id: Optional[str] = None) -> bool:
        """Скачивание файла; без ID скачивается открытый в просмотре сертификат."""
        certificate_id = certificate_id or self.state.viewing_id
        if certificate_id is None:
            return False

        try:
            file_name, content = await self.backend.download(certificate_id)
            self.view.save_file(file_name, content)
        except CertificateNotFoundError:
            self.view.show_toast("Сертификат не найден", "error")
            return False
        except (StorageError, ValidationError, OSError) as e:
            logger.error(f"Ошибка скачивания сертификата {certificate_id}: {e}")
            self.view.show_toast("Не удалось скачать сертификат", "error")
            return False
        except Exception as e:
            logger.error(f"Непредвиденная ошибка скачивания сертификата {certificate_id}: {e}")
            self.view.show_toast("Не удалось скачать сертификат", "error")
            return False

        self.view.show_toast("Сертификат успешно скачан")
        return True

    def navigate(self, page: Page):
        self.state.current_page = Page(page)
        if self.state.current_page == Page.CERTIFICATES:
            self._render()
        self.view.navigate(self.state.current_page)
