import logging
import threading
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Callable, List, Optional, Tuple

from lpr.core.errors import TaskTimeoutError
from lpr.domain.Models.stage_outcome import StageOutcome
from lpr.monitoring.metrics import stage_errors_total, stage_latency, task_timeouts_total

logger = logging.getLogger(__name__)


class TaskState(str, Enum):
    READY = "ready"
    EXECUTING = "executing"
    CANCELLED = "cancelled"
    FINISHED = "finished"


CompletionCallback = Callable[["CancellableTask"], None]


class CancellableTask(ABC):
    """
    Unidad de trabajo asíncrona con máquina de estados compartida por todas las etapas.

    - READY -> EXECUTING en start() (una sola vez; llamadas repetidas no hacen nada).
    - READY -> CANCELLED en cancel(); una tarea cancelada igual termina en FINISHED.
      Si ya está EXECUTING, cancel() solo levanta la bandera: el trabajo la
      consulta en su próximo checkpoint (is_cancelled).
    - -> FINISHED en finish(), exactamente una vez. El callback de completion se
      dispara después del cambio de estado, una sola vez, haya error o no.
    - Con `timeout`, un watchdog fuerza FINISHED con TaskTimeoutError si nadie
      termina la tarea a tiempo.

    Las subclases implementan main(), que puede terminar de forma síncrona o
    delegar el trabajo y llamar a finish() más tarde desde otro hilo.
    """

    def __init__(
        self,
        name: Optional[str] = None,
        timeout: Optional[float] = None,
        completion: Optional[CompletionCallback] = None,
    ):
        self.name = name or type(self).__name__
        self.timeout = timeout
        self.completion = completion

        self._lock = threading.Lock()
        self._state = TaskState.READY
        self._history: List[TaskState] = [TaskState.READY]
        self._cancel_requested = False
        self._outcome: Optional[StageOutcome] = None
        self._finished_event = threading.Event()
        self._watchdog: Optional[threading.Timer] = None
        self._started_at: Optional[float] = None

    # ---------------------------------------------------------
    # ESTADO
    # ---------------------------------------------------------
    @property
    def state(self) -> TaskState:
        with self._lock:
            return self._state

    @property
    def state_history(self) -> Tuple[TaskState, ...]:
        with self._lock:
            return tuple(self._history)

    @property
    def is_cancelled(self) -> bool:
        with self._lock:
            return self._cancel_requested

    @property
    def is_finished(self) -> bool:
        return self._finished_event.is_set()

    @property
    def outcome(self) -> Optional[StageOutcome]:
        with self._lock:
            return self._outcome

    def _transition(self, new_state: TaskState) -> None:
        # llamar con el lock tomado
        self._state = new_state
        self._history.append(new_state)

    # ---------------------------------------------------------
    # START / CANCEL / FINISH
    # ---------------------------------------------------------
    def start(self) -> None:
        with self._lock:
            if self._state == TaskState.CANCELLED:
                pre_cancelled = True
            elif self._state == TaskState.READY:
                pre_cancelled = False
                self._transition(TaskState.EXECUTING)
                self._started_at = time.perf_counter()
                self._arm_watchdog()
            else:
                return

        if pre_cancelled:
            logger.debug(f"[{self.name}] cancelada antes de empezar")
            self.finish(self.empty_outcome())
            return

        try:
            self.main()
        except Exception as e:
            logger.exception(f"[{self.name}] Error ejecutando la tarea")
            self.finish(StageOutcome.failure(e, value=self.empty_outcome().value))

    def cancel(self) -> None:
        with self._lock:
            if self._state == TaskState.FINISHED:
                return
            self._cancel_requested = True
            if self._state == TaskState.READY:
                self._transition(TaskState.CANCELLED)
        logger.debug(f"[{self.name}] cancelación solicitada")

    def finish(self, outcome: Optional[StageOutcome] = None) -> bool:
        """
        Marca la tarea como FINISHED. Devuelve False si ya estaba terminada
        o si todavía no arrancó (READY).
        """
        with self._lock:
            # solo EXECUTING o CANCELLED pueden terminar
            if self._state not in (TaskState.EXECUTING, TaskState.CANCELLED):
                return False
            self._transition(TaskState.FINISHED)
            self._outcome = outcome if outcome is not None else self.empty_outcome()
            watchdog, self._watchdog = self._watchdog, None
            final = self._outcome

        if watchdog is not None:
            watchdog.cancel()

        if self._started_at is not None:
            stage_latency.labels(stage=self.name).observe(time.perf_counter() - self._started_at)
        if final.failed:
            stage_errors_total.labels(stage=self.name).inc()

        self._fire_completion()
        self._finished_event.set()
        return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Bloquea hasta que la tarea termine y su callback de completion haya corrido.
        Devuelve False si expira el timeout.
        """
        return self._finished_event.wait(timeout)

    # ---------------------------------------------------------
    # WATCHDOG
    # ---------------------------------------------------------
    def _arm_watchdog(self) -> None:
        if self.timeout is None or self.timeout <= 0:
            return
        self._watchdog = threading.Timer(self.timeout, self._on_timeout)
        self._watchdog.daemon = True
        self._watchdog.name = f"watchdog-{self.name}"
        self._watchdog.start()

    def _on_timeout(self) -> None:
        error = TaskTimeoutError(self.name, self.timeout)
        if self.finish(StageOutcome.failure(error, value=self.empty_outcome().value)):
            task_timeouts_total.labels(stage=self.name).inc()
            logger.warning(f"[{self.name}] {error}")

    # ---------------------------------------------------------
    # COMPLETION
    # ---------------------------------------------------------
    def _fire_completion(self) -> None:
        if self.completion is None:
            return
        try:
            self.completion(self)
        except Exception:
            logger.exception(f"[{self.name}] El callback de completion lanzó una excepción")

    # ---------------------------------------------------------
    # A IMPLEMENTAR POR CADA ETAPA
    # ---------------------------------------------------------
    @abstractmethod
    def main(self) -> None:
        """Trabajo de la tarea. Debe terminar llamando a finish() (ahora o más tarde)."""

    def empty_outcome(self) -> StageOutcome:
        """Resultado vacío que la etapa entrega cuando no produce nada."""
        return StageOutcome.empty()
