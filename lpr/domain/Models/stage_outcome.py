from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    EMPTY = "empty"
    ERROR = "error"


@dataclass(frozen=True)
class StageOutcome:
    """
    Resultado etiquetado de una etapa. Los errores viajan aquí, no como
    excepciones ni notificaciones globales.
    """
    status: OutcomeStatus
    value: Any = None
    error: Optional[BaseException] = None

    @classmethod
    def success(cls, value: Any) -> "StageOutcome":
        return cls(OutcomeStatus.SUCCESS, value=value)

    @classmethod
    def empty(cls, value: Any = None) -> "StageOutcome":
        return cls(OutcomeStatus.EMPTY, value=value)

    @classmethod
    def failure(cls, error: BaseException, value: Any = None) -> "StageOutcome":
        return cls(OutcomeStatus.ERROR, value=value, error=error)

    @property
    def ok(self) -> bool:
        return self.status == OutcomeStatus.SUCCESS

    @property
    def failed(self) -> bool:
        return self.status == OutcomeStatus.ERROR
