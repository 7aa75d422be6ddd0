class PipelineError(Exception):
    """Error base del pipeline de reconocimiento."""


class ResourceError(PipelineError):
    """Un colaborador externo (cámara, inferencia, OCR) no está disponible o falló."""


class CaptureError(ResourceError):
    pass


class InferenceError(ResourceError):
    pass


class OCRError(ResourceError):
    pass


class TaskTimeoutError(PipelineError):
    """El watchdog de una tarea expiró antes de que la tarea terminara."""

    def __init__(self, task_name: str, timeout: float):
        super().__init__(f"{task_name} no terminó en {timeout:.1f}s")
        self.task_name = task_name
        self.timeout = timeout
