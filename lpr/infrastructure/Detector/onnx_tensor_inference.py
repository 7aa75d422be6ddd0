import os
from typing import Optional

import cv2
import numpy as np
from loguru import logger

from lpr.core.config import settings
from lpr.core.errors import InferenceError
from lpr.domain.Interfaces.tensor_inference import ITensorInference
from lpr.domain.Models.frame import Frame
from lpr.domain.Models.tensor_bundle import TensorBundle

# Orden de las salidas del detector SSD exportado (boxes, scores, classes, count)
OUTPUT_BOXES = 0
OUTPUT_SCORES = 1
OUTPUT_CLASSES = 2
OUTPUT_COUNT = 3


class OnnxTensorInference(ITensorInference):
    """
    Ejecuta un detector de placas tipo SSD exportado a ONNX con onnxruntime.
    - Redimensiona el frame al tamaño de entrada del modelo (por defecto 300x300, RGB).
    - Devuelve los cuatro tensores de postproceso sin interpretar.
    """

    def __init__(self, model_path: Optional[str] = None, input_size: int = 300):
        try:
            import onnxruntime as ort
        except ImportError as e:
            raise ImportError(
                "Falta dependencia para el detector ONNX. Instala:\n"
                "  pip install onnxruntime"
            ) from e

        model_path = model_path or settings.detector_model_path
        if not os.path.isfile(model_path):
            raise FileNotFoundError(
                f"No se encontró el modelo de detección en {model_path}. "
                f"Configura DETECTOR_MODEL_PATH en .env"
            )

        so = ort.SessionOptions()
        so.intra_op_num_threads = 2
        so.inter_op_num_threads = 1
        self.session = ort.InferenceSession(model_path, sess_options=so, providers=["CPUExecutionProvider"])
        self.input = self.session.get_inputs()[0]

        shape = self.input.shape
        # NHWC (TFLite exportado) o NCHW
        self.channels_last = len(shape) == 4 and shape[-1] == 3
        if self.channels_last:
            self.in_h = shape[1] if isinstance(shape[1], int) else input_size
            self.in_w = shape[2] if isinstance(shape[2], int) else input_size
        else:
            self.in_h = shape[2] if isinstance(shape[2], int) else input_size
            self.in_w = shape[3] if isinstance(shape[3], int) else input_size
        self.float_input = "float" in str(self.input.type)

        logger.info(
            f"[ONNX] Modelo: {model_path}, entrada {self.in_w}x{self.in_h}, "
            f"{'NHWC' if self.channels_last else 'NCHW'}, float={self.float_input}"
        )

    def _preprocess(self, image: np.ndarray) -> np.ndarray:
        rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        resized = cv2.resize(rgb, (self.in_w, self.in_h), interpolation=cv2.INTER_LINEAR)
        tensor = resized.astype(np.float32) / 255.0 if self.float_input else resized.astype(np.uint8)
        if not self.channels_last:
            tensor = tensor.transpose(2, 0, 1)
        return tensor[None, ...]

    def infer(self, frame: Frame) -> TensorBundle:
        if frame is None or frame.data is None or frame.data.size == 0:
            raise InferenceError("Frame vacío")

        try:
            outputs = self.session.run(None, {self.input.name: self._preprocess(frame.data)})
        except Exception as e:
            raise InferenceError(f"Error en inferencia ONNX: {e}") from e

        if len(outputs) <= OUTPUT_COUNT:
            raise InferenceError(f"El modelo devolvió {len(outputs)} salidas, se esperaban 4")

        return TensorBundle.from_buffers(
            boxes=outputs[OUTPUT_BOXES],
            scores=outputs[OUTPUT_SCORES],
            classes=outputs[OUTPUT_CLASSES],
            count=outputs[OUTPUT_COUNT],
        )
