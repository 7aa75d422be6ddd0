from abc import ABC, abstractmethod

from lpr.domain.Models.frame import Frame
from lpr.domain.Models.tensor_bundle import TensorBundle


class ITensorInference(ABC):
    """
    Ejecuta el modelo de detección y devuelve sus tensores de salida crudos.
    """
    @abstractmethod
    def infer(self, frame: Frame) -> TensorBundle:
        """Puede lanzar excepción si el modelo no está disponible."""
        pass
