# lpr/infrastructure/Camera/capture_device_factory.py
from typing import Optional
from lpr.core.config import settings
from lpr.domain.Interfaces.capture_device import ICaptureDevice


def create_capture_device(source: Optional[str] = None) -> ICaptureDevice:
    """
    Factory responsable de crear el dispositivo de captura correcto.
    - "file://ruta" o una ruta de imagen -> StillImageCaptureDevice
    - cualquier otra cosa (RTSP/HTTP/video/índice de webcam) -> OpenCVCaptureDevice
    """
    source = source if source is not None else settings.camera_source
    if source is None:
        raise ValueError("No hay fuente de cámara configurada (CAMERA_SOURCE)")

    # ==========================================================
    # 🖼️ 1) Imagen fija
    # ==========================================================
    path = source.replace("file://", "", 1) if source.startswith("file://") else source
    if source.startswith("file://") or path.lower().endswith((".jpg", ".jpeg", ".png", ".bmp")):
        from lpr.infrastructure.Camera.still_image_capture_device import StillImageCaptureDevice
        return StillImageCaptureDevice(path=path)

    # ==========================================================
    # 📷 2) OpenCV (RTSP/HTTP/video/webcam)
    # ==========================================================
    from lpr.infrastructure.Camera.opencv_capture_device import OpenCVCaptureDevice
    return OpenCVCaptureDevice(source)
