from dataclasses import dataclass
from typing import Optional, Tuple

from lpr.domain.Models.detection import Detection
from lpr.domain.Models.rect import Rect, FULL_FRAME


@dataclass(frozen=True)
class PipelineResult:
    """
    Resultado de una lectura completa Capture → Detect → Recognize.
    """
    detections: Tuple[Detection, ...] = ()
    best_plate: Optional[str] = None
    region: Rect = FULL_FRAME        # ROI normalizada usada por el reconocimiento
    error: Optional[str] = None      # primer error absorbido por alguna etapa

    def to_dict(self) -> dict:
        """Convierte a dict serializable."""
        return {
            "plate": self.best_plate,
            "detections": [d.to_dict() for d in self.detections],
            "region": self.region.to_dict(),
            "error": self.error,
        }
