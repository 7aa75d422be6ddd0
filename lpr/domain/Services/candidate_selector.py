# lpr/domain/Services/candidate_selector.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence


@dataclass(frozen=True)
class PlatePattern:
    """
    Formato de placa conocido. La lista de patrones va de más a menos específico.
    """
    name: str
    regex: re.Pattern

    @classmethod
    def compile(cls, name: str, expression: str) -> "PlatePattern":
        return cls(name=name, regex=re.compile(expression))

    def matches(self, text: str) -> bool:
        return self.regex.search(text) is not None


# Formato regional: 2 letras + 1-2 dígitos + 1-3 letras + 4 dígitos (ej. MH12AB1234)
REGIONAL_PATTERN = PlatePattern.compile("regional", r"^[A-Z]{2}\s*[0-9]{1,2}\s*[A-Z]{1,3}\s*[0-9]{4}$")
# Alfanumérico genérico para otros formatos
GENERIC_PATTERN = PlatePattern.compile("generic", r"^[A-Z0-9]{5,10}$")

DEFAULT_PATTERNS = (REGIONAL_PATTERN, GENERIC_PATTERN)

PLAUSIBLE_MIN_LENGTH = 5
PLAUSIBLE_MAX_LENGTH = 10


class CandidateSelector:
    """
    Elige la mejor placa entre las lecturas corregidas.

    Orden (gana el primer nivel con coincidencias, desempate por la más larga):
    1) patrones conocidos, en orden (regional, luego genérico)
    2) solo en cuadro completo: longitud alfanumérica 5..10, prefiriendo
       las que mezclan letras y dígitos
    3) la lectura más larga del conjunto

    Devuelve una sola cadena o None; nunca una puntuación.
    """

    def __init__(self, patterns: Optional[Sequence[PlatePattern]] = None):
        self.patterns = tuple(patterns) if patterns is not None else DEFAULT_PATTERNS

    def select(self, candidates: Iterable[str], full_frame: bool = False) -> Optional[str]:
        # Dedup; el orden no importa, se ordena para que el desempate sea determinista
        unique = sorted({c for c in candidates if c})
        if not unique:
            return None

        for pattern in self.patterns:
            matches = [c for c in unique if pattern.matches(c)]
            if matches:
                return _longest(matches)

        if full_frame:
            plausible = [
                c for c in unique
                if PLAUSIBLE_MIN_LENGTH <= len(_alnum(c)) <= PLAUSIBLE_MAX_LENGTH
            ]
            if plausible:
                mixed = [c for c in plausible if _has_letter_and_digit(c)]
                return _longest(mixed or plausible)

        return _longest(unique)


def _longest(candidates: List[str]) -> str:
    # max() conserva el primero entre empatados -> el menor en orden lexicográfico
    return max(candidates, key=len)


def _alnum(text: str) -> str:
    return "".join(ch for ch in text if ch.isalnum())


def _has_letter_and_digit(text: str) -> bool:
    return any(ch.isalpha() for ch in text) and any(ch.isdigit() for ch in text)
