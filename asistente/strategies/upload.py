"""Upload strategy: read data back from a previously filed form."""

import itertools
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import PurePath

from asistente.exceptions import InvalidTransitionError, OperationPendingError
from asistente.models.enums import MethodId, UploadStatus
from asistente.models.records import ExtractedData, FilingDraft
from asistente.strategies import mock_data
from asistente.strategies.base import AcquisitionStrategy
from asistente.timers import Timer

logger = logging.getLogger(__name__)

ACCEPTED_TYPES: dict[str, tuple[str, ...]] = {
    "application/pdf": (".pdf",),
    "image/jpeg": (".jpg", ".jpeg"),
    "image/png": (".png",),
}

UNSUPPORTED_MESSAGE = "Tipo de archivo no soportado. Por favor, sube un archivo PDF, JPG o PNG."
TOO_MANY_MESSAGE = "Solo se puede subir un archivo. Por favor, sube un archivo PDF, JPG o PNG."


@dataclass(frozen=True)
class UploadFile:
    name: str
    size: int
    mime_type: str

    @property
    def size_label(self) -> str:
        return f"{self.size / 1024 / 1024:.2f} MB"

    @property
    def accepted(self) -> bool:
        extensions = ACCEPTED_TYPES.get(self.mime_type)
        if extensions is None:
            return False
        return PurePath(self.name).suffix.lower() in extensions


class PreviewRegistry:
    """Hands out preview URLs and tracks their release.

    Revoking a URL that is not live raises, so a double release shows up
    as an error instead of passing silently.
    """

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self.live: set[str] = set()
        self.revoked: list[str] = []

    def create(self, file: UploadFile) -> str:
        url = f"blob:preview/{next(self._ids)}/{file.name}"
        self.live.add(url)
        return url

    def revoke(self, url: str) -> None:
        if url not in self.live:
            raise InvalidTransitionError("revoke preview", "released")
        self.live.remove(url)
        self.revoked.append(url)
        logger.debug("Preview released: %s", url)


class UploadStrategy(AcquisitionStrategy):
    """idle -> uploading -> processing -> success | error.

    `remove_file()` also calls ``on_cancel`` unless the strategy is built
    with ``cancel_on_remove=False``.
    """

    method = MethodId.UPLOAD

    def __init__(self, *args, previews: PreviewRegistry | None = None, cancel_on_remove: bool = True, **kwargs):
        super().__init__(*args, **kwargs)
        self.previews = previews or PreviewRegistry()
        self.cancel_on_remove = cancel_on_remove
        self.file: UploadFile | None = None
        self.preview_url: str | None = None
        self.status = UploadStatus.IDLE
        self.progress = 0
        self.retry_count = 0
        self.extracted: ExtractedData | None = None
        self.error: str | None = None
        self.rejection: str | None = None
        self._ticker: Timer | None = None

    @property
    def title(self) -> str:
        return f"{self.form.display_name} ({self.form.description})"

    @property
    def busy(self) -> bool:
        return self.status in (UploadStatus.UPLOADING, UploadStatus.PROCESSING)

    # --- File selection ---

    def select_file(self, file: UploadFile) -> str | None:
        return self.select_files([file])

    def select_files(self, files: Sequence[UploadFile]) -> str | None:
        """Accept a single supported file; return a rejection message otherwise.

        A rejection never changes the upload state.
        """
        self._ensure_live("select a file")
        if self.busy:
            raise OperationPendingError("select a file")
        if not files:
            return None
        if len(files) > 1:
            return self._reject(TOO_MANY_MESSAGE, files)
        file = files[0]
        if not file.accepted:
            return self._reject(UNSUPPORTED_MESSAGE, files)

        self._release_preview()
        self.file = file
        self.preview_url = self.previews.create(file)
        self._reset()
        self.rejection = None
        logger.info("File selected: %s (%s)", file.name, file.mime_type)
        self.notifier.success("Archivo añadido", f"{file.name} seleccionado para subir.")
        return None

    def _reject(self, message: str, files: Sequence[UploadFile]) -> str:
        self.rejection = message
        logger.warning("File rejected: %s", ", ".join(f.name for f in files))
        return message

    # --- Upload and processing ---

    def upload(self) -> None:
        self._ensure_live("upload")
        if self.busy:
            raise OperationPendingError("upload")
        if self.file is None:
            raise InvalidTransitionError("upload", "no file")
        if self.status not in (UploadStatus.IDLE, UploadStatus.ERROR):
            raise InvalidTransitionError("upload", self.status.value)

        self.status = UploadStatus.UPLOADING
        self.progress = 0
        self.error = None
        logger.info("Uploading %s (attempt %d)", self.file.name, self.retry_count + 1)
        self._ticker = self.timers.call_every(self.settings.upload_tick, self._tick)
        self.timers.call_later(self.settings.upload_duration, self._uploaded)

    def _tick(self) -> None:
        if self.progress >= 100:
            self._stop_ticker()
            return
        self.progress = min(100, self.progress + self.settings.upload_step)

    def _stop_ticker(self) -> None:
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None

    def _uploaded(self) -> None:
        self._stop_ticker()
        self.progress = 100
        self.status = UploadStatus.PROCESSING
        logger.info("Processing %s", self.file.name)
        self.timers.call_later(self.settings.processing_duration, self._processed)

    def _processed(self) -> None:
        if self.retry_count == 0:
            rate = self.settings.upload_first_success_rate
        else:
            rate = self.settings.upload_retry_success_rate
        if self.rng.random() < rate:
            self.extracted = mock_data.extracted_record(self.form_type)
            self.status = UploadStatus.SUCCESS
            logger.info("Extraction succeeded for %s", self.form_type.value)
            self.notifier.success("Formulario procesado correctamente", "Hemos extraído los datos de tu documento.")
        else:
            self.status = UploadStatus.ERROR
            self.error = mock_data.EXTRACTION_ERROR
            logger.warning("Extraction failed (attempt %d, p=%.2f)", self.retry_count + 1, rate)
            self.notifier.error(
                "Error al procesar el documento",
                "No se ha podido extraer la información. Intenta de nuevo o usa otro método.",
            )

    def retry(self) -> None:
        self._ensure_live("retry")
        if self.status != UploadStatus.ERROR:
            raise InvalidTransitionError("retry", self.status.value)
        self.retry_count += 1
        self.upload()

    # --- Leaving ---

    def remove_file(self) -> None:
        """Drop the file and go back to idle."""
        self._ensure_live("remove the file")
        self.timers.cancel_all()
        self._ticker = None
        self._release_preview()
        self.file = None
        self._reset()
        if self.cancel_on_remove:
            self._cancel()

    def confirm(self) -> None:
        if self.status != UploadStatus.SUCCESS:
            raise InvalidTransitionError("confirm", self.status.value)
        self._complete()

    def cancel(self) -> None:
        self._cancel()

    def _reset(self) -> None:
        self.status = UploadStatus.IDLE
        self.progress = 0
        self.extracted = None
        self.error = None

    def _release_preview(self) -> None:
        if self.preview_url is not None:
            self.previews.revoke(self.preview_url)
            self.preview_url = None

    def _release(self) -> None:
        self._release_preview()

    def draft(self) -> FilingDraft:
        if self.extracted is None:
            return FilingDraft(form_type=self.form_type, source=self.method)
        data = self.extracted
        personal = {k: v for k, v in data.personal_info.model_dump().items() if v is not None}
        income = {k: v for k, v in data.income.model_dump().items() if v is not None}
        deductions = {k: v for k, v in data.deductions.model_dump().items() if v is not None}
        result = {k: v for k, v in data.result.model_dump().items() if v is not None}
        notes = []
        if data.metadata is not None:
            notes.append(f"Ejercicio fiscal: {data.metadata.tax_year}")
            if data.metadata.reference_number:
                notes.append(f"Referencia: {data.metadata.reference_number}")
        if self.file is not None:
            notes.append(f"Documento: {self.file.name}")
        return FilingDraft(
            form_type=self.form_type,
            source=self.method,
            personal=personal,
            income=income,
            deductions=deductions,
            result=result,
            labels=EXTRACTED_LABELS,
            notes=notes,
        )


EXTRACTED_LABELS: dict[str, str] = {
    "name": "Nombre completo",
    "nif": "NIF/NIE",
    "address": "Dirección",
    "postal_code": "Código postal",
    "city": "Ciudad",
    "province": "Provincia",
    "phone": "Teléfono",
    "email": "Email",
    "total_salary": "Rendimientos del trabajo",
    "financial_income": "Rendimientos del capital mobiliario",
    "capital_gains": "Ganancias patrimoniales",
    "rental_income": "Rendimientos del capital inmobiliario",
    "business_income": "Rendimientos de actividades económicas",
    "social_security": "Seguridad Social",
    "pension_contributions": "Planes de pensiones",
    "total_deductions": "Total deducciones",
    "mortgage_interest": "Intereses de hipoteca",
    "donations": "Donativos",
    "tax_due": "A ingresar",
    "refund": "A devolver",
}
