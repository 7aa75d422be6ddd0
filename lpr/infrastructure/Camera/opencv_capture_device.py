import cv2
import time
import logging
import threading
from typing import Optional, Union

from lpr.core.errors import CaptureError
from lpr.domain.Models.frame import Frame
from lpr.domain.Interfaces.capture_device import ICaptureDelegate, ICaptureDevice

logger = logging.getLogger(__name__)


class OpenCVCaptureDevice(ICaptureDevice):
    """
    Implementación de ICaptureDevice usando OpenCV.
    - Cada capture() abre el stream en un hilo propio, descarta algunos frames
      viejos del buffer y entrega UNA foto al delegate.
    - Las señales llegan desde el hilo de captura (will_begin -> did_process -> did_finish).
    """

    def __init__(self, source: Union[str, int], warmup_frames: int = 2, reconnect_attempts: int = 3):
        """
        :param source: URL del stream (RTSP/HTTP/archivo) o índice de webcam.
        :param warmup_frames: frames a descartar antes de la foto (buffer viejo de FFMPEG).
        :param reconnect_attempts: intentos de apertura antes de reportar error.
        """
        self.source = int(source) if isinstance(source, str) and source.isdigit() else source
        self.warmup_frames = warmup_frames
        self.reconnect_attempts = reconnect_attempts
        self._lock = threading.Lock()

    # ==========================================================
    # CAPTURE
    # ==========================================================
    def capture(self, delegate: ICaptureDelegate) -> None:
        thread = threading.Thread(
            target=self._capture_once,
            args=(delegate,),
            name=f"capture-{self.source}",
            daemon=True,
        )
        thread.start()

    def _capture_once(self, delegate: ICaptureDelegate) -> None:
        # un solo disparo a la vez por dispositivo
        with self._lock:
            cap = self._open()
            if cap is None:
                delegate.capture_did_finish(CaptureError(f"No se pudo abrir el stream: {self.source}"))
                return

            try:
                delegate.capture_will_begin()

                for _ in range(self.warmup_frames):
                    cap.grab()

                ok, image = cap.read()
                if ok and image is not None:
                    frame = Frame(data=image, timestamp=time.time(), source=str(self.source))
                    delegate.capture_did_process_photo(frame)
                    delegate.capture_did_finish()
                else:
                    error = CaptureError(f"No se pudo leer un frame de {self.source}")
                    delegate.capture_did_process_photo(None, error)
                    delegate.capture_did_finish(error)
            finally:
                cap.release()

    # ==========================================================
    # OPEN / RECONNECT
    # ==========================================================
    def _open(self) -> Optional[cv2.VideoCapture]:
        for attempt in range(1, self.reconnect_attempts + 1):
            if isinstance(self.source, int):
                cap = cv2.VideoCapture(self.source)
            else:
                cap = cv2.VideoCapture(self.source, cv2.CAP_FFMPEG)
                # Si es RTSP, reducir el buffer
                if self.source.startswith("rtsp://"):
                    cap.set(cv2.CAP_PROP_BUFFERSIZE, 1)

            if cap.isOpened():
                return cap

            logger.warning(f"[{self.source}] Reintentando conexión {attempt}/{self.reconnect_attempts}...")
            cap.release()
            time.sleep(0.5)

        logger.error(f"[{self.source}] No se pudo abrir el stream.")
        return None
