"""
Состояние клиентского приложения.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from core.models import Certificate

from .file_reader import SelectedFile
from .filters import CATEGORY_ALL
from .forms import UploadForm


class UploadState(str, Enum):
    """Состояния попытки загрузки."""

    IDLE = "idle"
    FILE_SELECTED = "file_selected"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"


class Page(str, Enum):
    UPLOAD = "upload"
    CERTIFICATES = "certificates"


# Пока попытка в этих состояниях, повторная отправка игнорируется
IN_FLIGHT_STATES = (UploadState.VALIDATING, UploadState.SUBMITTING)


@dataclass
class AppState:
    """Явное состояние UI, которым владеет контроллер."""

    certificates: List[Certificate] = field(default_factory=list)
    current_filter: str = CATEGORY_ALL
    search_term: str = ""
    current_file: Optional[SelectedFile] = None
    form: UploadForm = field(default_factory=UploadForm)
    form_error: Optional[str] = None
    upload_state: UploadState = UploadState.IDLE
    pending_delete_id: Optional[str] = None
    viewing_id: Optional[str] = None
    current_page: Page = Page.UPLOAD

    @property
    def is_submitting(self) -> bool:
        return self.upload_state in IN_FLIGHT_STATES

    def reset_upload(self) -> None:
        """Очищает форму и выбранный файл."""
        self.form = UploadForm()
        self.current_file = None
        self.form_error = None
        self.upload_state = UploadState.IDLE
