from abc import ABC, abstractmethod
from typing import List

from lpr.domain.Models.detection import Detection
from lpr.domain.Models.frame import Frame


class IPlateDetector(ABC):
    """
    Detector de placas en un frame.
    """
    @abstractmethod
    def detect(self, frame: Frame) -> List[Detection]:
        """Detecta placas en el frame y devuelve la lista de Detection (en píxeles)."""
        pass
