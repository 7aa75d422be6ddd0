from typing import List, Optional

from loguru import logger

from lpr.domain.Interfaces.plate_detector import IPlateDetector
from lpr.domain.Interfaces.tensor_inference import ITensorInference
from lpr.domain.Models.detection import Detection
from lpr.domain.Models.frame import Frame
from lpr.domain.Services.detection_decoder import DetectionDecoder


class TensorPlateDetector(IPlateDetector):
    """
    Detector de placas: inferencia (colaborador externo) + DetectionDecoder.
    Un error de inferencia se registra y se traduce en lista vacía.
    """

    def __init__(self, inference: ITensorInference, decoder: Optional[DetectionDecoder] = None):
        self.inference = inference
        self.decoder = decoder or DetectionDecoder()

    def detect(self, frame: Frame) -> List[Detection]:
        if frame is None or frame.data is None or frame.data.size == 0:
            return []

        try:
            bundle = self.inference.infer(frame)
        except Exception as e:
            logger.error(f"[Detector] Error en inferencia: {e}")
            return []

        detections = self.decoder.decode(bundle, frame.width, frame.height)
        logger.debug(f"[Detector] {len(detections)} placas en {frame.source}")
        return detections
