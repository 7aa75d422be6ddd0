import logging
from typing import List, Optional, Sequence

import numpy as np

from lpr.core.config import settings
from lpr.core.errors import OCRError
from lpr.domain.Interfaces.ocr_reader import IOCRReader
from lpr.domain.Models.rect import Rect
from lpr.domain.Models.text_candidate import RecognitionLevel, TextObservation

logger = logging.getLogger(__name__)

PLATE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"


class EasyOCR_OCRReader(IOCRReader):
    """
    Implementación usando EasyOCR:
    - Recorta la región de interés antes de leer
    - FAST -> decoder greedy; ACCURATE -> beamsearch
    - Alfabeto restringido a A-Z0-9
    - Altura de cada observación normalizada a la altura de la región

    EasyOCR entrega un solo texto por caja, así que cada observación trae un
    único candidato. EasyOCR no admite vocabulario por llamada: `custom_words`
    solo queda registrado en el log.
    """
    def __init__(self, lang: Optional[str] = None, gpu: Optional[bool] = None):
        try:
            import easyocr
        except ImportError as e:
            raise ImportError(
                "Falta dependencia para OCR. Instala:\n"
                "  pip install easyocr"
            ) from e

        self.reader = easyocr.Reader(
            [lang or settings.ocr_lang],
            gpu=settings.ocr_gpu if gpu is None else gpu,
        )

    def recognize(
        self,
        image: np.ndarray,
        region: Rect,
        level: RecognitionLevel,
        custom_words: Sequence[str] = (),
    ) -> List[TextObservation]:
        if image is None or image.size == 0:
            return []

        # Recortar región
        h_img, w_img = image.shape[:2]
        x, y, w, h = region.to_pixels(w_img, h_img)
        if w == 0 or h == 0:
            return []
        crop = image[y:y + h, x:x + w]

        if custom_words:
            logger.debug(f"EasyOCR ignora vocabulario personalizado: {list(custom_words)}")

        decoder = "greedy" if level == RecognitionLevel.FAST else "beamsearch"
        try:
            results = self.reader.readtext(crop, decoder=decoder, allowlist=PLATE_ALPHABET, detail=1)
        except Exception as e:
            raise OCRError(f"EasyOCR falló: {e}") from e

        observations: List[TextObservation] = []
        for bbox, text, _confidence in results:
            ys = [float(p[1]) for p in bbox]
            observations.append(TextObservation(
                candidates=[text],
                height=(max(ys) - min(ys)) / h,
            ))

        return observations
