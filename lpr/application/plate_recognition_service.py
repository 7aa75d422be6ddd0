import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional

from lpr.application.detect_plates_task import DetectPlatesTask
from lpr.application.read_plate_number_task import DetectionPicker, ReadPlateNumberTask, first_detection
from lpr.application.recognize_text_task import RecognizeTextTask
from lpr.core.cancellable_task import CancellableTask
from lpr.domain.Interfaces.capture_device import ICaptureDevice
from lpr.domain.Interfaces.plate_detector import IPlateDetector
from lpr.domain.Interfaces.text_normalizer import ITextNormalizer
from lpr.domain.Models.frame import Frame
from lpr.domain.Models.rect import FULL_FRAME, Rect
from lpr.domain.Services.candidate_selector import CandidateSelector
from lpr.domain.Services.text_candidate_extractor import TextCandidateExtractor
from lpr.infrastructure.Normalizer.candidate_corrector import CandidateCorrector

logger = logging.getLogger(__name__)

PlateCallback = Callable[[Optional[str]], None]
RectsCallback = Callable[[List[Rect]], None]


class PlateRecognitionService:
    """
    Punto de entrada del pipeline para los colaboradores externos:

    - read_plate_number: Capture -> Detect -> Recognize, callback con la placa o None
    - recognize_plate:   reconoce la placa en la región R de la imagen I
    - detect_plates:     detecta regiones de placa en la imagen I

    Cada operación devuelve la tarea ya arrancada (se puede esperar con wait()).
    Las lecturas completas van de a una (cola de un solo worker) y las pasadas
    de OCR usan su propio worker dedicado.
    """

    def __init__(
        self,
        detector: IPlateDetector,
        extractor: TextCandidateExtractor,
        corrector: Optional[ITextNormalizer] = None,
        selector: Optional[CandidateSelector] = None,
        capture_device: Optional[ICaptureDevice] = None,
        capture_timeout: Optional[float] = None,
        detection_picker: DetectionPicker = first_detection,
    ):
        self.detector = detector
        self.extractor = extractor
        self.corrector = corrector or CandidateCorrector()
        self.selector = selector or CandidateSelector()
        self.capture_device = capture_device
        self.capture_timeout = capture_timeout
        self.detection_picker = detection_picker

        # worker pools
        self.pipeline_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="lpr-pipeline")
        self.detection_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="lpr-detect")
        self.recognition_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="lpr-recognize")

        self._active_lock = threading.Lock()
        self._active: set[CancellableTask] = set()

    # ---------------------------------------------------------
    # OPERACIONES
    # ---------------------------------------------------------
    def read_plate_number(
        self,
        region: Optional[Rect] = None,
        completion: Optional[PlateCallback] = None,
        capture_device: Optional[ICaptureDevice] = None,
    ) -> ReadPlateNumberTask:
        device = capture_device or self.capture_device
        if device is None:
            raise ValueError("No hay dispositivo de captura configurado")

        task = ReadPlateNumberTask(
            capture_device=device,
            detector=self.detector,
            extractor=self.extractor,
            corrector=self.corrector,
            selector=self.selector,
            region=region,
            recognition_executor=self.recognition_executor,
            capture_timeout=self.capture_timeout,
            detection_picker=self.detection_picker,
            completion=self._completion(lambda t: t.best_plate, completion),
        )
        self._track(task)
        self.pipeline_executor.submit(task.start)
        return task

    def recognize_plate(
        self,
        frame: Frame,
        region: Rect = FULL_FRAME,
        completion: Optional[PlateCallback] = None,
    ) -> RecognizeTextTask:
        task = RecognizeTextTask(
            frame,
            region,
            self.extractor,
            self.corrector,
            self.selector,
            executor=self.recognition_executor,
            completion=self._completion(lambda t: t.recognized_text, completion),
        )
        self._track(task)
        task.start()
        return task

    def detect_plates(self, frame: Frame, completion: Optional[RectsCallback] = None) -> DetectPlatesTask:
        task = DetectPlatesTask(
            frame,
            self.detector,
            completion=self._completion(lambda t: t.rects, completion),
        )
        self._track(task)
        self.detection_executor.submit(task.start)
        return task

    # ---------------------------------------------------------
    # CANCEL / SHUTDOWN
    # ---------------------------------------------------------
    def cancel_all(self) -> None:
        with self._active_lock:
            tasks = list(self._active)
        for task in tasks:
            task.cancel()
        if tasks:
            logger.info(f"Cancelando {len(tasks)} tareas en curso")

    def shutdown(self, wait: bool = True) -> None:
        self.cancel_all()
        self.pipeline_executor.shutdown(wait=wait)
        self.detection_executor.shutdown(wait=wait)
        self.recognition_executor.shutdown(wait=wait)

    # ---------------------------------------------------------
    # INTERNOS
    # ---------------------------------------------------------
    def _track(self, task: CancellableTask) -> None:
        with self._active_lock:
            self._active.add(task)

    def _completion(self, extract: Callable, callback: Optional[Callable]):
        def on_complete(task: CancellableTask) -> None:
            with self._active_lock:
                self._active.discard(task)
            if callback is not None:
                callback(extract(task))
        return on_complete
