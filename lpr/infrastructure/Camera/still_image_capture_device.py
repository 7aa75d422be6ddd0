import cv2
import time
import threading
from typing import Optional

import numpy as np

from lpr.core.errors import CaptureError
from lpr.domain.Models.frame import Frame
from lpr.domain.Interfaces.capture_device import ICaptureDelegate, ICaptureDevice


class StillImageCaptureDevice(ICaptureDevice):
    """
    Simula una cámara a partir de una imagen en memoria o de un archivo.
    Útil para la API (imagen subida), la CLI y las pruebas.
    """

    def __init__(self, image: Optional[np.ndarray] = None, path: Optional[str] = None, source: Optional[str] = None):
        if image is None and path is None:
            raise ValueError("Se necesita una imagen o una ruta")
        self.image = image
        self.path = path
        self.source = source or path or "memory"

    @classmethod
    def from_bytes(cls, payload: bytes, source: str = "upload") -> "StillImageCaptureDevice":
        image = decode_image(payload)
        if image is None:
            raise CaptureError("No se pudo decodificar la imagen")
        return cls(image=image, source=source)

    # ==========================================================
    # CAPTURE
    # ==========================================================
    def capture(self, delegate: ICaptureDelegate) -> None:
        threading.Thread(
            target=self._deliver,
            args=(delegate,),
            name=f"capture-{self.source}",
            daemon=True,
        ).start()

    def _deliver(self, delegate: ICaptureDelegate) -> None:
        delegate.capture_will_begin()

        image = self.image if self.image is not None else cv2.imread(self.path)
        if image is None or image.size == 0:
            error = CaptureError(f"No se pudo leer la imagen {self.source}")
            delegate.capture_did_process_photo(None, error)
            delegate.capture_did_finish(error)
            return

        delegate.capture_did_process_photo(Frame(data=image, timestamp=time.time(), source=self.source))
        delegate.capture_did_finish()


def decode_image(payload: bytes) -> Optional[np.ndarray]:
    """Decodifica bytes JPEG/PNG a un array BGR. Devuelve None si no es una imagen."""
    if not payload:
        return None
    buffer = np.frombuffer(payload, dtype=np.uint8)
    return cv2.imdecode(buffer, cv2.IMREAD_COLOR)
