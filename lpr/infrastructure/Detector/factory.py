from typing import Optional

from lpr.domain.Interfaces.plate_detector import IPlateDetector
from lpr.domain.Interfaces.tensor_inference import ITensorInference
from lpr.domain.Services.detection_decoder import DetectionDecoder
from lpr.infrastructure.Detector.tensor_plate_detector import TensorPlateDetector


def create_plate_detector(inference: Optional[ITensorInference] = None) -> IPlateDetector:
    if inference is None:
        from lpr.infrastructure.Detector.onnx_tensor_inference import OnnxTensorInference
        inference = OnnxTensorInference()
    return TensorPlateDetector(inference, DetectionDecoder())
