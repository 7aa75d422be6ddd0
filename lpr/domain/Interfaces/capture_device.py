from abc import ABC, abstractmethod
from typing import Optional

from lpr.domain.Models.frame import Frame


class ICaptureDelegate(ABC):
    """
    Receptor de los eventos de una captura. El dispositivo puede llamar
    varias veces antes de la señal final; solo capture_did_finish cierra la captura.
    """
    @abstractmethod
    def capture_will_begin(self) -> None:
        """La captura empezó."""
        pass

    @abstractmethod
    def capture_did_process_photo(self, frame: Optional[Frame], error: Optional[Exception] = None) -> None:
        """Foto procesada (o error al procesarla)."""
        pass

    @abstractmethod
    def capture_did_finish(self, error: Optional[Exception] = None) -> None:
        """Señal final de la secuencia de captura."""
        pass


class ICaptureDevice(ABC):
    """
    Abstracción de un dispositivo que entrega una foto de forma asíncrona.
    """
    @abstractmethod
    def capture(self, delegate: ICaptureDelegate) -> None:
        """Inicia una captura y reporta el progreso al delegate."""
        pass
