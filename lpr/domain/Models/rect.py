from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Rect:
    """
    Caja alineada a los ejes, en coordenadas normalizadas (0..1) o en píxeles.
    El origen es la esquina superior izquierda de la imagen.
    """
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Rect con dimensiones negativas: {self.width}x{self.height}")

    @property
    def is_full_frame(self) -> bool:
        """Una ROI de cuadro completo se codifica como width == height == 1."""
        return self.width == 1 and self.height == 1

    def normalized(self, image_width: int, image_height: int) -> "Rect":
        """Convierte un rect en píxeles a coordenadas normalizadas, recortado a [0, 1]."""
        if image_width <= 0 or image_height <= 0:
            return FULL_FRAME

        x1 = _clamp(self.x / image_width)
        y1 = _clamp(self.y / image_height)
        x2 = _clamp((self.x + self.width) / image_width)
        y2 = _clamp((self.y + self.height) / image_height)
        return Rect(x1, y1, x2 - x1, y2 - y1)

    def to_pixels(self, image_width: int, image_height: int) -> Tuple[int, int, int, int]:
        """
        Convierte un rect normalizado a (x, y, w, h) enteros dentro de la imagen.
        """
        x1 = int(round(_clamp(self.x) * image_width))
        y1 = int(round(_clamp(self.y) * image_height))
        x2 = int(round(_clamp(self.x + self.width) * image_width))
        y2 = int(round(_clamp(self.y + self.height) * image_height))
        return x1, y1, max(0, x2 - x1), max(0, y2 - y1)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


FULL_FRAME = Rect(0.0, 0.0, 1.0, 1.0)
