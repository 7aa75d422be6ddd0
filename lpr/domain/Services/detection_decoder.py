# lpr/domain/Services/detection_decoder.py
import logging
import math
from typing import List, Optional

from lpr.core.config import settings
from lpr.domain.Models.detection import Detection
from lpr.domain.Models.rect import Rect
from lpr.domain.Models.tensor_bundle import TensorBundle

logger = logging.getLogger(__name__)

# Tope duro de detecciones que se recorren, diga lo que diga `count`
MAX_DETECTIONS = 10


class DetectionDecoder:
    """
    Convierte los tensores crudos de un detector tipo SSD en rectángulos en píxeles.

    - recorre i en [0, min(count, max_detections))
    - conserva i si score >= umbral y round(clase) == clase de placa
    - cajas (y1, x1, y2, x2) normalizadas -> Rect(x, y, w, h) en píxeles
    - sin NMS: las cajas solapadas se devuelven todas, en el orden del modelo

    Un buffer mal formado o corto produce una lista vacía, nunca una excepción.
    """

    def __init__(
        self,
        score_threshold: Optional[float] = None,
        plate_class_id: Optional[int] = None,
        max_detections: Optional[int] = None,
    ):
        self.score_threshold = (
            score_threshold if score_threshold is not None else settings.detection_score_threshold
        )
        self.plate_class_id = (
            plate_class_id if plate_class_id is not None else settings.detection_plate_class_id
        )
        self.max_detections = min(
            MAX_DETECTIONS,
            max_detections if max_detections is not None else settings.detection_max_results,
        )

    def decode(self, bundle: TensorBundle, image_width: int, image_height: int) -> List[Detection]:
        n = self._entry_count(bundle)
        if n == 0:
            return []

        # Validar límites antes de leer cualquier offset
        if bundle.scores.size < n or bundle.classes.size < n or bundle.boxes.size < 4 * n:
            logger.warning(
                f"Tensores incompletos: count={n} scores={bundle.scores.size} "
                f"classes={bundle.classes.size} boxes={bundle.boxes.size}"
            )
            return []

        detections: List[Detection] = []
        for i in range(n):
            score = float(bundle.scores[i])
            class_value = float(bundle.classes[i])
            if not math.isfinite(score) or not math.isfinite(class_value):
                continue
            if score < self.score_threshold or round(class_value) != self.plate_class_id:
                continue

            y1, x1, y2, x2 = (float(v) for v in bundle.boxes[4 * i:4 * i + 4])
            if not all(math.isfinite(v) for v in (y1, x1, y2, x2)) or x2 < x1 or y2 < y1:
                logger.debug(f"Caja inválida descartada en i={i}: {(y1, x1, y2, x2)}")
                continue

            detections.append(Detection(
                rect=Rect(
                    x=x1 * image_width,
                    y=y1 * image_height,
                    width=(x2 - x1) * image_width,
                    height=(y2 - y1) * image_height,
                ),
                score=score,
                class_id=self.plate_class_id,
            ))

        return detections

    def _entry_count(self, bundle: TensorBundle) -> int:
        if bundle.count.size < 1:
            return 0
        raw = float(bundle.count[0])
        if not math.isfinite(raw) or raw <= 0:
            return 0
        return min(int(raw), self.max_detections)
