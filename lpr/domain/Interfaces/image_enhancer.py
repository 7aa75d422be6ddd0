from typing import Optional, Protocol

import numpy as np


class IImageEnhancer(Protocol):
    """
    Variantes de preprocesado usadas antes de cada intento de OCR.
    Devuelven None si la variante no se puede generar.
    """
    def enhance(self, image: np.ndarray) -> Optional[np.ndarray]: ...

    def high_contrast(self, image: np.ndarray) -> Optional[np.ndarray]: ...
