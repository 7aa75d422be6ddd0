import logging
from typing import List, Optional

from lpr.core.cancellable_task import CancellableTask, CompletionCallback
from lpr.core.errors import InferenceError
from lpr.domain.Interfaces.plate_detector import IPlateDetector
from lpr.domain.Models.detection import Detection
from lpr.domain.Models.frame import Frame
from lpr.domain.Models.rect import Rect
from lpr.domain.Models.stage_outcome import StageOutcome
from lpr.monitoring.metrics import detections_total

logger = logging.getLogger(__name__)


class DetectPlatesTask(CancellableTask):
    """
    Etapa de detección: corre el detector sobre el frame de forma síncrona.
    Un error del detector se absorbe y la etapa entrega una lista vacía.
    """

    def __init__(self, frame: Frame, detector: IPlateDetector, completion: Optional[CompletionCallback] = None):
        super().__init__(name="detect", completion=completion)
        self.frame = frame
        self.detector = detector

    @property
    def detections(self) -> List[Detection]:
        outcome = self.outcome
        return list(outcome.value or []) if outcome is not None else []

    @property
    def rects(self) -> List[Rect]:
        return [d.rect for d in self.detections]

    def main(self) -> None:
        if self.is_cancelled:
            self.finish(self.empty_outcome())
            return

        try:
            detections = list(self.detector.detect(self.frame) or [])
        except Exception as e:
            logger.exception("[detect] El detector falló")
            self.finish(StageOutcome.failure(InferenceError(str(e)), value=[]))
            return

        detections_total.inc(len(detections))
        logger.debug(f"[detect] {len(detections)} detecciones")
        self.finish(StageOutcome.success(detections) if detections else StageOutcome.empty([]))

    def empty_outcome(self) -> StageOutcome:
        return StageOutcome.empty([])
