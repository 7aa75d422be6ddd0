import time
from typing import Dict, List, Optional, Sequence

import numpy as np
import pytest

from lpr.domain.Interfaces.capture_device import ICaptureDelegate, ICaptureDevice
from lpr.domain.Interfaces.ocr_reader import IOCRReader
from lpr.domain.Interfaces.plate_detector import IPlateDetector
from lpr.domain.Models.detection import Detection
from lpr.domain.Models.frame import Frame
from lpr.domain.Models.rect import Rect
from lpr.domain.Models.text_candidate import RecognitionLevel, TextObservation
from lpr.domain.Services.candidate_selector import CandidateSelector
from lpr.domain.Services.text_candidate_extractor import TextCandidateExtractor
from lpr.infrastructure.Normalizer.candidate_corrector import CandidateCorrector


# Valores de píxel que identifican cada variante en las pruebas
ORIGINAL_PIXEL = 10
ENHANCED_PIXEL = 20
HIGH_CONTRAST_PIXEL = 30


class MarkerEnhancer:
    """Devuelve imágenes llenas con un valor conocido para identificar la variante."""

    def __init__(self, fail_enhance: bool = False):
        self.fail_enhance = fail_enhance

    def enhance(self, image):
        if self.fail_enhance:
            raise RuntimeError("filtro no disponible")
        return np.full_like(image, ENHANCED_PIXEL)

    def high_contrast(self, image):
        return np.full_like(image, HIGH_CONTRAST_PIXEL)


class ScriptedOCRReader(IOCRReader):
    """
    OCR falso: responde según (variante, nivel) y registra cada llamada.
    """
    VARIANTS = {ORIGINAL_PIXEL: "original", ENHANCED_PIXEL: "enhanced", HIGH_CONTRAST_PIXEL: "high_contrast"}

    def __init__(self, script: Optional[Dict[tuple, List[TextObservation]]] = None, errors: Sequence[tuple] = ()):
        self.script = script or {}
        self.errors = set(errors)
        self.calls: List[tuple] = []

    def recognize(self, image, region: Rect, level: RecognitionLevel, custom_words: Sequence[str] = ()):
        variant = self.VARIANTS.get(int(image.flat[0]), "unknown")
        key = (variant, level)
        self.calls.append((variant, level, tuple(custom_words), region))
        if key in self.errors:
            raise RuntimeError(f"OCR caído en {key}")
        return list(self.script.get(key, []))


class StubDetector(IPlateDetector):
    def __init__(self, detections: Optional[List[Detection]] = None, error: Optional[Exception] = None):
        self.detections = detections or []
        self.error = error
        self.calls = 0

    def detect(self, frame: Frame) -> List[Detection]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.detections)


class ScriptedCaptureDevice(ICaptureDevice):
    """
    Dispositivo de captura falso y síncrono.
    mode: "ok" | "no_image" | "error" | "silent" (nunca vuelve a llamar)
    """

    def __init__(self, frame: Optional[Frame] = None, mode: str = "ok"):
        self.frame = frame
        self.mode = mode
        self.captures = 0

    def capture(self, delegate: ICaptureDelegate) -> None:
        self.captures += 1
        if self.mode == "silent":
            return
        delegate.capture_will_begin()
        if self.mode == "ok":
            delegate.capture_did_process_photo(self.frame)
            delegate.capture_did_finish()
        elif self.mode == "no_image":
            delegate.capture_did_process_photo(None, RuntimeError("sin datos de imagen"))
            delegate.capture_did_finish()
        elif self.mode == "error":
            delegate.capture_did_finish(RuntimeError("cámara desconectada"))


def make_frame(width: int = 200, height: int = 100) -> Frame:
    return Frame(
        data=np.full((height, width, 3), ORIGINAL_PIXEL, dtype=np.uint8),
        timestamp=time.time(),
        source="test",
    )


def obs(*candidates: str, height: float = 0.5) -> TextObservation:
    return TextObservation(candidates=list(candidates), height=height)


@pytest.fixture
def frame() -> Frame:
    return make_frame()


@pytest.fixture
def corrector() -> CandidateCorrector:
    return CandidateCorrector()


@pytest.fixture
def selector() -> CandidateSelector:
    return CandidateSelector()


def make_extractor(reader: IOCRReader, enhancer=None) -> TextCandidateExtractor:
    return TextCandidateExtractor(
        ocr_reader=reader,
        enhancer=enhancer or MarkerEnhancer(),
        min_height=0.15,
        max_candidates=10,
        custom_words=["MH", "DL"],
    )
