import logging
import threading
from typing import Optional

from lpr.core.cancellable_task import CancellableTask, CompletionCallback
from lpr.core.config import settings
from lpr.core.errors import CaptureError
from lpr.domain.Interfaces.capture_device import ICaptureDelegate, ICaptureDevice
from lpr.domain.Models.frame import Frame
from lpr.domain.Models.stage_outcome import StageOutcome

logger = logging.getLogger(__name__)


class CapturePhotoTask(CancellableTask, ICaptureDelegate):
    """
    Etapa de captura: pide una foto al dispositivo y espera su señal final.

    El dispositivo puede no volver a llamar nunca; por eso esta es la única
    etapa con watchdog (settings.capture_timeout).
    """

    def __init__(
        self,
        device: ICaptureDevice,
        timeout: Optional[float] = None,
        completion: Optional[CompletionCallback] = None,
    ):
        super().__init__(
            name="capture",
            timeout=timeout if timeout is not None else settings.capture_timeout,
            completion=completion,
        )
        self.device = device
        self.capture_started = False

        self._photo_lock = threading.Lock()
        self._pending_frame: Optional[Frame] = None
        self._pending_error: Optional[Exception] = None

    @property
    def frame(self) -> Optional[Frame]:
        """Foto capturada; None hasta que la tarea termina con éxito."""
        outcome = self.outcome
        return outcome.value if outcome is not None and outcome.ok else None

    def main(self) -> None:
        logger.debug(f"[capture] Solicitando foto a {type(self.device).__name__}")
        self.device.capture(self)

    # ---------------------------------------------------------
    # DELEGATE
    # ---------------------------------------------------------
    def capture_will_begin(self) -> None:
        self.capture_started = True

    def capture_did_process_photo(self, frame: Optional[Frame], error: Optional[Exception] = None) -> None:
        if self.is_finished:
            return

        with self._photo_lock:
            if error is not None or frame is None or frame.data is None or frame.data.size == 0:
                self._pending_error = error or CaptureError("No se pudo procesar la imagen")
                logger.warning(f"[capture] {self._pending_error}")
                return
            self._pending_frame = frame

    def capture_did_finish(self, error: Optional[Exception] = None) -> None:
        with self._photo_lock:
            frame = self._pending_frame
            error = error or self._pending_error

        if self.is_cancelled:
            # checkpoint: la foto se descarta
            self.finish(StageOutcome.empty())
        elif frame is not None:
            self.finish(StageOutcome.success(frame))
        elif error is not None:
            self.finish(StageOutcome.failure(error))
        else:
            self.finish(StageOutcome.failure(CaptureError("La captura terminó sin imagen")))
