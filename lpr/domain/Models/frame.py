from dataclasses import dataclass
import numpy as np


@dataclass
class Frame:
    """
    Representa un frame capturado desde una cámara.
    """
    data: np.ndarray   # imagen en formato numpy array (BGR)
    timestamp: float   # momento en que se capturó
    source: str        # identificador de la cámara, archivo o URL

    @property
    def image(self) -> np.ndarray:
        """Alias para compatibilidad con librerías que esperan 'image'."""
        return self.data

    @property
    def width(self) -> int:
        return int(self.data.shape[1]) if self.data is not None and self.data.ndim >= 2 else 0

    @property
    def height(self) -> int:
        return int(self.data.shape[0]) if self.data is not None and self.data.ndim >= 2 else 0

    def to_dict(self) -> dict:
        """
        Convierte el frame a un dict serializable (sin incluir la imagen).
        Ideal para logs.
        """
        return {
            "timestamp": self.timestamp,
            "source": self.source,
            "shape": self.data.shape if isinstance(self.data, np.ndarray) else None
        }
