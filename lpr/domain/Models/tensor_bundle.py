from dataclasses import dataclass
from typing import Any

import numpy as np


def _as_float_array(data: Any) -> np.ndarray:
    """Acepta bytes/memoryview (float32 crudos), listas o ndarrays y devuelve un vector plano."""
    if data is None:
        return np.empty(0, dtype=np.float32)
    if isinstance(data, (bytes, bytearray, memoryview)):
        usable = len(data) - len(data) % 4
        return np.frombuffer(bytes(data[:usable]), dtype=np.float32)
    return np.asarray(data, dtype=np.float32).reshape(-1)


@dataclass(frozen=True)
class TensorBundle:
    """
    Salida cruda de un detector tipo SSD:
    - boxes:   [N, 4] (y1, x1, y2, x2) normalizados
    - scores:  [N]
    - classes: [N]
    - count:   escalar con el número de detecciones válidas
    Todo se guarda como vectores float32 planos; el decoder valida los límites.
    """
    boxes: np.ndarray
    scores: np.ndarray
    classes: np.ndarray
    count: np.ndarray

    @classmethod
    def from_buffers(cls, boxes: Any, scores: Any, classes: Any, count: Any) -> "TensorBundle":
        return cls(
            boxes=_as_float_array(boxes),
            scores=_as_float_array(scores),
            classes=_as_float_array(classes),
            count=_as_float_array(count),
        )
