from dataclasses import dataclass, field
from enum import Enum
from typing import List


class RecognitionLevel(str, Enum):
    FAST = "fast"
    ACCURATE = "accurate"


@dataclass
class TextObservation:
    """
    Una observación del motor OCR: candidatos ordenados por ranking y la
    altura de los glifos normalizada respecto a la región escaneada.
    """
    candidates: List[str] = field(default_factory=list)
    height: float = 0.0


@dataclass(frozen=True)
class TextCandidate:
    """
    Cadena cruda admitida en un intento de OCR.
    """
    raw_string: str
    source_height: float
    variant: str = "original"
    level: RecognitionLevel = RecognitionLevel.FAST
