import logging
import threading
from concurrent.futures import Executor
from typing import Callable, Optional, Sequence

from lpr.application.capture_photo_task import CapturePhotoTask
from lpr.application.detect_plates_task import DetectPlatesTask
from lpr.application.recognize_text_task import RecognizeTextTask
from lpr.core.cancellable_task import CancellableTask, CompletionCallback
from lpr.domain.Interfaces.capture_device import ICaptureDevice
from lpr.domain.Interfaces.plate_detector import IPlateDetector
from lpr.domain.Interfaces.text_normalizer import ITextNormalizer
from lpr.domain.Models.detection import Detection
from lpr.domain.Models.frame import Frame
from lpr.domain.Models.pipeline_result import PipelineResult
from lpr.domain.Models.rect import FULL_FRAME, Rect
from lpr.domain.Models.stage_outcome import StageOutcome
from lpr.domain.Services.candidate_selector import CandidateSelector
from lpr.domain.Services.text_candidate_extractor import TextCandidateExtractor
from lpr.monitoring.metrics import plates_recognized_total

logger = logging.getLogger(__name__)

DetectionPicker = Callable[[Sequence[Detection]], Optional[Detection]]


def first_detection(detections: Sequence[Detection]) -> Optional[Detection]:
    """La primera detección decodificada se toma como la más prominente."""
    return detections[0] if detections else None


class ReadPlateNumberTask(CancellableTask):
    """
    Orquestador: Capture -> Detect -> Recognize.

    Cada etapa es una CancellableTask y la siguiente no arranca hasta que la
    anterior está FINISHED. Sin imagen no hay reconocimiento. Cancelar el
    orquestador avisa a la etapa en curso y pre-cancela las que faltan.
    """

    def __init__(
        self,
        capture_device: ICaptureDevice,
        detector: IPlateDetector,
        extractor: TextCandidateExtractor,
        corrector: ITextNormalizer,
        selector: CandidateSelector,
        region: Optional[Rect] = None,
        recognition_executor: Optional[Executor] = None,
        capture_timeout: Optional[float] = None,
        detection_picker: DetectionPicker = first_detection,
        completion: Optional[CompletionCallback] = None,
    ):
        super().__init__(name="read_plate", completion=completion)
        self.capture_device = capture_device
        self.detector = detector
        self.extractor = extractor
        self.corrector = corrector
        self.selector = selector
        self.region = region
        self.recognition_executor = recognition_executor
        self.capture_timeout = capture_timeout
        self.detection_picker = detection_picker

        self._stage_lock = threading.Lock()
        self._current_stage: Optional[CancellableTask] = None

    @property
    def result(self) -> PipelineResult:
        outcome = self.outcome
        return outcome.value if outcome is not None and outcome.value is not None else PipelineResult()

    @property
    def best_plate(self) -> Optional[str]:
        return self.result.best_plate

    def empty_outcome(self) -> StageOutcome:
        return StageOutcome.empty(PipelineResult())

    # ---------------------------------------------------------
    # CANCEL
    # ---------------------------------------------------------
    def cancel(self) -> None:
        super().cancel()
        with self._stage_lock:
            stage = self._current_stage
        if stage is not None:
            stage.cancel()

    # ---------------------------------------------------------
    # PIPELINE
    # ---------------------------------------------------------
    def main(self) -> None:
        capture = self._run_stage(CapturePhotoTask(self.capture_device, timeout=self.capture_timeout))
        frame = capture.frame
        if frame is None:
            logger.info("[read_plate] La captura no produjo imagen, no se reconoce texto")
            self.finish(StageOutcome.empty(PipelineResult(error=_error_message(capture))))
            return

        detect = self._run_stage(DetectPlatesTask(frame, self.detector))
        detections = tuple(detect.detections)
        region = self._recognition_region(frame, detections)

        recognize = self._run_stage(RecognizeTextTask(
            frame,
            region,
            self.extractor,
            self.corrector,
            self.selector,
            executor=self.recognition_executor,
        ))

        result = PipelineResult(
            detections=detections,
            best_plate=recognize.recognized_text,
            region=region,
            error=_error_message(capture) or _error_message(detect) or _error_message(recognize),
        )
        if result.best_plate:
            plates_recognized_total.inc()
            logger.info(f"[read_plate] Placa reconocida: {result.best_plate}")
            self.finish(StageOutcome.success(result))
        else:
            logger.info("[read_plate] Sin placa")
            self.finish(StageOutcome.empty(result))

    def _run_stage(self, stage: CancellableTask) -> CancellableTask:
        with self._stage_lock:
            self._current_stage = stage
            if self.is_cancelled:
                stage.cancel()

        stage.start()
        stage.wait()

        with self._stage_lock:
            self._current_stage = None
        return stage

    def _recognition_region(self, frame: Frame, detections: Sequence[Detection]) -> Rect:
        if self.region is not None:
            return self.region

        chosen = self.detection_picker(detections)
        if chosen is None:
            return FULL_FRAME

        region = chosen.rect.normalized(frame.width, frame.height)
        if region.width == 0 or region.height == 0:
            return FULL_FRAME
        return region


def _error_message(task: CancellableTask) -> Optional[str]:
    outcome = task.outcome
    if outcome is None or not outcome.failed:
        return None
    return str(outcome.error)
