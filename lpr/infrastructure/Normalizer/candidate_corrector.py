# lpr/infrastructure/Normalizer/candidate_corrector.py
import re
from typing import Optional

from lpr.domain.Interfaces.text_normalizer import ITextNormalizer

# Pares que el OCR confunde con frecuencia. Solo es una tabla de consulta:
# aplicarla a ciegas corrompe lecturas que ya eran correctas.
CONFUSABLE_CHARACTERS = {
    "0": "O", "O": "0",
    "1": "I", "I": "1",
    "8": "B", "B": "8",
    "5": "S", "S": "5",
    "2": "Z", "Z": "2",
}


def confusable_with(char: str) -> Optional[str]:
    """Devuelve el carácter con el que `char` suele confundirse, si hay uno."""
    return CONFUSABLE_CHARACTERS.get(char.upper())


class CandidateCorrector(ITextNormalizer):
    """
    Corrige una lectura OCR cruda:
    - Mayúsculas
    - Aceptar solo A-Z0-9
    - Regla de contexto: código de región de 2 letras seguido de "O" + dígito
      -> la "O" es un cero (MHO1 -> MH01)
    No aplica otras sustituciones de CONFUSABLE_CHARACTERS.
    """
    _NOT_ALNUM = re.compile(r"[^A-Z0-9]")
    _REGION_CODE_NUMBER = re.compile(r"([A-Z]{2})([0O][1-9])")

    def normalize(self, text: str) -> str:
        if not text:
            return ""

        # dejar sólo A-Z0-9
        t = self._NOT_ALNUM.sub("", text.upper())
        return self._fix_region_code_zero(t)

    def _fix_region_code_zero(self, text: str) -> str:
        match = self._REGION_CODE_NUMBER.search(text)
        if not match:
            return text

        code, number = match.group(1), match.group(2)
        if not number.startswith("O"):
            return text

        # se reemplazan todas las apariciones del fragmento detectado
        return text.replace(code + number, code + "0" + number[1:])
