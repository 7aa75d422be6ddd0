import logging
from typing import Optional

import cv2
import numpy as np

from lpr.core.config import settings
from lpr.domain.Interfaces.image_enhancer import IImageEnhancer

logger = logging.getLogger(__name__)


class OpenCVImageEnhancer(IImageEnhancer):
    """
    Variantes de preprocesado para OCR con OpenCV:
    - enhance: contraste x1.5 + máscara de enfoque (unsharp mask)
    - high_contrast: contraste x2, algo más de brillo, sin saturación
    Trabajan en uint8 (BGR o escala de grises) y devuelven uint8.
    """

    def __init__(
        self,
        contrast: Optional[float] = None,
        sharpen_radius: Optional[float] = None,
        sharpen_amount: Optional[float] = None,
        high_contrast: Optional[float] = None,
        high_contrast_brightness: Optional[float] = None,
    ):
        self.contrast = contrast if contrast is not None else settings.enhance_contrast
        self.sharpen_radius = sharpen_radius if sharpen_radius is not None else settings.enhance_sharpen_radius
        self.sharpen_amount = sharpen_amount if sharpen_amount is not None else settings.enhance_sharpen_amount
        self.high_contrast_factor = high_contrast if high_contrast is not None else settings.high_contrast
        self.high_contrast_brightness = (
            high_contrast_brightness if high_contrast_brightness is not None
            else settings.high_contrast_brightness
        )

    def enhance(self, image: np.ndarray) -> Optional[np.ndarray]:
        if image is None or image.size == 0:
            return None

        contrasted = _color_controls(image, contrast=self.contrast, brightness=0.0, saturation=1.0)
        if self.sharpen_radius <= 0 or self.sharpen_amount == 0:
            return contrasted

        # Unsharp mask: original + amount * (original - desenfoque)
        blurred = cv2.GaussianBlur(contrasted, (0, 0), sigmaX=self.sharpen_radius)
        return cv2.addWeighted(contrasted, 1.0 + self.sharpen_amount, blurred, -self.sharpen_amount, 0)

    def high_contrast(self, image: np.ndarray) -> Optional[np.ndarray]:
        if image is None or image.size == 0:
            return None

        return _color_controls(
            image,
            contrast=self.high_contrast_factor,
            brightness=self.high_contrast_brightness,
            saturation=0.0,
        )


def _color_controls(image: np.ndarray, contrast: float, brightness: float, saturation: float) -> np.ndarray:
    """
    Ajuste de color estilo "color controls" en espacio 0..1:
    saturación (mezcla con la luminancia), brillo y contraste alrededor de 0.5.
    """
    img = image.astype(np.float32) / 255.0

    if img.ndim == 3 and img.shape[2] >= 3 and saturation != 1.0:
        gray = cv2.cvtColor(img[:, :, :3], cv2.COLOR_BGR2GRAY)[:, :, None]
        img = gray + saturation * (img[:, :, :3] - gray)

    img = img + brightness
    img = (img - 0.5) * contrast + 0.5

    return (np.clip(img, 0.0, 1.0) * 255.0).astype(np.uint8)
