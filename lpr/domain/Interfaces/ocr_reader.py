from abc import ABC, abstractmethod
from typing import List, Sequence

import numpy as np

from lpr.domain.Models.rect import Rect
from lpr.domain.Models.text_candidate import RecognitionLevel, TextObservation


class IOCRReader(ABC):
    """
    Motor OCR que extrae observaciones de texto de una región de la imagen.
    """
    @abstractmethod
    def recognize(
        self,
        image: np.ndarray,
        region: Rect,
        level: RecognitionLevel,
        custom_words: Sequence[str] = (),
    ) -> List[TextObservation]:
        """
        Reconoce texto dentro de `region` (normalizada).
        Las alturas de las observaciones se expresan relativas a la región.
        """
        pass
