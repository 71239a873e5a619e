"""Upload pipeline: one prescription photo from selection to result."""

import base64
import logging
import mimetypes
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from medibot.config import settings
from medibot.exceptions import MediBotError
from medibot.schemas.prescription import AnalysisResult
from medibot.services.analysis import AnalysisClient
from medibot.state.active_context import ActiveContextStore

logger = logging.getLogger(__name__)


class UploadState(str, Enum):
    IDLE = "idle"
    PREVIEW_READY = "preview_ready"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class SelectedFile:
    """A single image picked by the user."""

    filename: str
    content: bytes
    content_type: str = "image/jpeg"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "SelectedFile":
        path = Path(path)
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        return cls(filename=path.name, content=path.read_bytes(), content_type=content_type)

    def preview_uri(self) -> str:
        """Local preview reference, the equivalent of an object URL."""
        encoded = base64.b64encode(self.content).decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"


class UploadPipeline:
    """
    Drives one file through ``IDLE -> PREVIEW_READY -> SUBMITTING ->
    SUCCEEDED | FAILED``.

    The pipeline is reusable: selecting a new file from SUCCEEDED or FAILED
    starts over at PREVIEW_READY. Only one submission may be in flight.
    """

    def __init__(self, analysis: AnalysisClient, context: ActiveContextStore):
        self.analysis = analysis
        self.context = context
        self.state = UploadState.IDLE
        self.file: Optional[SelectedFile] = None
        self.preview: Optional[str] = None
        self.error: Optional[str] = None
        self.result: Optional[AnalysisResult] = None
        self._live = True

    @property
    def is_live(self) -> bool:
        return self._live

    @property
    def is_busy(self) -> bool:
        return self.state is UploadState.SUBMITTING

    def unmount(self) -> None:
        """Detach from the view. Results still in flight will be dropped."""
        self._live = False

    def select_file(self, file: SelectedFile) -> bool:
        """Replace the current selection. Ignored while a submission runs."""
        if self.is_busy:
            logger.info("File selection ignored while a submission is in flight")
            return False
        self.file = file
        self.preview = file.preview_uri()
        self.error = None
        self.result = None
        self.state = UploadState.PREVIEW_READY
        logger.debug("Preview ready for %s", file.filename)
        return True

    async def submit(self) -> Optional[AnalysisResult]:
        """
        Send the selected file for analysis.

        No-op unless the pipeline is in PREVIEW_READY. On success the result
        replaces the active context; on failure ``error`` holds the message
        to show.
        """
        if self.state is not UploadState.PREVIEW_READY or self.file is None:
            logger.debug("submit() ignored in state %s", self.state.value)
            return None

        file = self.file
        self.state = UploadState.SUBMITTING
        self.error = None
        try:
            result = await self.analysis.analyze(
                file.content, file.filename, file.content_type
            )
        except MediBotError as e:
            if not self._live:
                logger.info("Discarding analysis failure for unmounted pipeline")
                return None
            logger.warning(
                "Prescription analysis failed for %s: %s (%s)",
                file.filename, e.message, e.detail,
            )
            self.state = UploadState.FAILED
            self.error = e.message or settings.unreadable_failure_message
            return None
        except Exception:
            # not a collaborator failure; unlock the pipeline and propagate
            if self._live:
                self.state = UploadState.PREVIEW_READY
            raise

        if not self._live:
            logger.info("Discarding analysis result for unmounted pipeline")
            return None

        self.state = UploadState.SUCCEEDED
        self.result = result
        self.context.set(result)
        logger.info("Prescription analysed: %d medicines", len(result.medicines))
        return result

    async def upload(self, file: SelectedFile) -> Optional[AnalysisResult]:
        """Select and immediately submit, as the file picker does."""
        if not self.select_file(file):
            return None
        return await self.submit()

