import logging

from prometheus_client import Counter, Histogram, start_http_server

logger = logging.getLogger(__name__)

# Latencia por etapa (capture / detect / recognize / pipeline)
stage_latency = Histogram(
    "lpr_stage_latency_seconds",
    "Tiempo de ejecución de cada etapa del pipeline",
    ["stage"]
)

# Watchdogs que forzaron el fin de una tarea
task_timeouts_total = Counter(
    "lpr_task_timeouts_total",
    "Tareas terminadas por timeout",
    ["stage"]
)

# Errores absorbidos en el borde de una etapa
stage_errors_total = Counter(
    "lpr_stage_errors_total",
    "Errores de colaboradores convertidos en resultado vacío",
    ["stage"]
)

# Detecciones decodificadas
detections_total = Counter(
    "lpr_detections_total",
    "Total de cajas de placa decodificadas"
)

# Lecturas con placa
plates_recognized_total = Counter(
    "lpr_plates_recognized_total",
    "Total de lecturas que produjeron una placa"
)


def start_metrics_server(port: int = 9100):
    """Arranca servidor de métricas Prometheus."""
    start_http_server(port)
    logger.info(f"📊 Prometheus metrics disponible en :{port}")
