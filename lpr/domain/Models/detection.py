from dataclasses import dataclass

from lpr.domain.Models.rect import Rect


@dataclass(frozen=True)
class Detection:
    """
    Placa detectada por el modelo de objetos.
    """
    rect: Rect        # en píxeles de la imagen de entrada
    score: float      # confianza del detector (0..1)
    class_id: int

    def to_dict(self) -> dict:
        return {
            "rect": self.rect.to_dict(),
            "score": self.score,
            "class_id": self.class_id,
        }
