import logging
from typing import Optional

from lpr.application.plate_recognition_service import PlateRecognitionService
from lpr.core.config import settings
from lpr.domain.Interfaces.capture_device import ICaptureDevice
from lpr.domain.Services.candidate_selector import CandidateSelector
from lpr.domain.Services.text_candidate_extractor import TextCandidateExtractor
from lpr.infrastructure.Detector.factory import create_plate_detector
from lpr.infrastructure.Normalizer.candidate_corrector import CandidateCorrector
from lpr.infrastructure.OCR.EasyOCR_OCRReader import EasyOCR_OCRReader
from lpr.infrastructure.Preprocessing.opencv_image_enhancer import OpenCVImageEnhancer

logger = logging.getLogger(__name__)


def create_recognition_service(capture_device: Optional[ICaptureDevice] = None) -> PlateRecognitionService:
    """
    Arma el pipeline con las implementaciones reales (ONNX + EasyOCR + OpenCV).
    Si no se pasa dispositivo y hay CAMERA_SOURCE en .env, se crea desde la factory.
    """
    if capture_device is None and settings.camera_source:
        from lpr.infrastructure.Camera.capture_device_factory import create_capture_device
        capture_device = create_capture_device(settings.camera_source)

    logger.info(f"🎥 Armando pipeline (captura={type(capture_device).__name__ if capture_device else None})")

    detector = create_plate_detector()
    extractor = TextCandidateExtractor(
        ocr_reader=EasyOCR_OCRReader(),
        enhancer=OpenCVImageEnhancer(),
        min_height=settings.ocr_min_height,
        max_candidates=settings.ocr_max_candidates,
        custom_words=settings.ocr_region_codes,
    )

    return PlateRecognitionService(
        detector=detector,
        extractor=extractor,
        corrector=CandidateCorrector(),
        selector=CandidateSelector(),
        capture_device=capture_device,
        capture_timeout=settings.capture_timeout,
    )
