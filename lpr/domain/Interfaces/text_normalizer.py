from typing import Protocol

class ITextNormalizer(Protocol):
    """
    Limpia una lectura OCR cruda. Puede devolver "" si no queda nada útil.
    """
    def normalize(self, text: str) -> str: ...
