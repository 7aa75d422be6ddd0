# lpr/domain/Services/text_candidate_extractor.py
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

import numpy as np

from lpr.core.config import settings
from lpr.domain.Interfaces.image_enhancer import IImageEnhancer
from lpr.domain.Interfaces.ocr_reader import IOCRReader
from lpr.domain.Models.rect import Rect
from lpr.domain.Models.text_candidate import RecognitionLevel, TextCandidate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecognitionPass:
    variant: str
    level: RecognitionLevel
    primed: bool = False


# Orden fijo de intentos; el último solo corre en cuadro completo y sin resultados previos
ORIGINAL_FAST = RecognitionPass("original", RecognitionLevel.FAST)
ORIGINAL_ACCURATE = RecognitionPass("original", RecognitionLevel.ACCURATE, primed=True)
ENHANCED_ACCURATE = RecognitionPass("enhanced", RecognitionLevel.ACCURATE, primed=True)
HIGH_CONTRAST_ACCURATE = RecognitionPass("high_contrast", RecognitionLevel.ACCURATE, primed=True)


class TextCandidateExtractor:
    """
    Corre el OCR sobre varias variantes de la imagen y junta las lecturas crudas.

    1) original, modo rápido
    2) original, modo preciso (con vocabulario de códigos de región)
    3) contraste + nitidez, modo preciso
    4) solo en cuadro completo y si 1-3 no dieron nada: alto contraste sin color

    De cada observación se toman hasta `max_candidates` cadenas, y solo si la
    altura de los glifos supera `min_height` (descarta texto pequeño de fondo).
    No deduplica: cada cadena admitida se entrega tal cual.
    """

    def __init__(
        self,
        ocr_reader: IOCRReader,
        enhancer: IImageEnhancer,
        min_height: Optional[float] = None,
        max_candidates: Optional[int] = None,
        custom_words: Optional[Sequence[str]] = None,
    ):
        self.ocr_reader = ocr_reader
        self.enhancer = enhancer
        self.min_height = min_height if min_height is not None else settings.ocr_min_height
        self.max_candidates = max_candidates if max_candidates is not None else settings.ocr_max_candidates
        self.custom_words = tuple(custom_words if custom_words is not None else settings.ocr_region_codes)

    def extract(
        self,
        image: np.ndarray,
        region: Rect,
        should_cancel: Callable[[], bool] = lambda: False,
    ) -> List[TextCandidate]:
        pooled: List[TextCandidate] = []

        for recognition_pass in (ORIGINAL_FAST, ORIGINAL_ACCURATE, ENHANCED_ACCURATE):
            if should_cancel():
                logger.debug("Extracción cancelada antes de la pasada %s", recognition_pass)
                return pooled
            pooled.extend(self._run_pass(recognition_pass, image, region))

        if region.is_full_frame and not pooled:
            if should_cancel():
                return pooled
            pooled.extend(self._run_pass(HIGH_CONTRAST_ACCURATE, image, region))

        logger.debug(f"Extracción terminada: {len(pooled)} candidatos crudos")
        return pooled

    # ---------------------------------------------------------
    # PASADAS
    # ---------------------------------------------------------
    def _run_pass(self, recognition_pass: RecognitionPass, image: np.ndarray, region: Rect) -> List[TextCandidate]:
        variant_image = self._variant(recognition_pass.variant, image)
        if variant_image is None:
            logger.debug(f"Variante {recognition_pass.variant} no disponible, se omite")
            return []

        words = self.custom_words if recognition_pass.primed else ()
        try:
            observations = self.ocr_reader.recognize(variant_image, region, recognition_pass.level, words)
        except Exception:
            logger.exception(
                f"OCR falló en la pasada {recognition_pass.variant}/{recognition_pass.level.value}"
            )
            return []

        admitted: List[TextCandidate] = []
        for obs in observations or []:
            if obs.height <= self.min_height:
                continue
            for text in obs.candidates[:self.max_candidates]:
                admitted.append(TextCandidate(
                    raw_string=text,
                    source_height=obs.height,
                    variant=recognition_pass.variant,
                    level=recognition_pass.level,
                ))
        return admitted

    def _variant(self, variant: str, image: np.ndarray) -> Optional[np.ndarray]:
        if variant == "original":
            return image
        try:
            if variant == "enhanced":
                return self.enhancer.enhance(image)
            if variant == "high_contrast":
                return self.enhancer.high_contrast(image)
        except Exception:
            logger.exception(f"No se pudo generar la variante {variant}")
            return None
        raise ValueError(f"Variante desconocida: {variant}")
