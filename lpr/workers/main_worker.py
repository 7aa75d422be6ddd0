import warnings
warnings.filterwarnings("ignore")

import argparse
import logging
import sys
from typing import Optional

from lpr.core.config import settings
from lpr.domain.Models.rect import Rect
from lpr.monitoring.metrics import start_metrics_server

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


def parse_region(value: Optional[str]) -> Optional[Rect]:
    """'x,y,w,h' normalizados -> Rect"""
    if not value:
        return None
    try:
        x, y, w, h = (float(v) for v in value.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError("La región debe ser x,y,w,h (normalizados)")
    return Rect(x, y, w, h)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Lee una placa desde una imagen o una cámara")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--image", help="ruta de una imagen")
    source.add_argument("--camera", help="URL RTSP/HTTP, video o índice de webcam")
    parser.add_argument("--region", type=parse_region, default=None, help="ROI normalizada x,y,w,h")
    parser.add_argument("--metrics-port", type=int, default=None, help="expone métricas Prometheus")
    parser.add_argument("--timeout", type=float, default=None, help="watchdog de captura (s)")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    from lpr.application.service_factory import create_recognition_service
    from lpr.infrastructure.Camera.capture_device_factory import create_capture_device

    source = args.image or args.camera or settings.camera_source
    if source is None:
        logger.error("Indica --image, --camera o CAMERA_SOURCE")
        return 2

    if args.metrics_port:
        start_metrics_server(port=args.metrics_port)

    service = create_recognition_service(capture_device=create_capture_device(source))
    if args.timeout is not None:
        service.capture_timeout = args.timeout

    try:
        task = service.read_plate_number(region=args.region)
        task.wait()
    except KeyboardInterrupt:
        logger.info("🧠 Deteniendo…")
        service.cancel_all()
        return 130
    finally:
        service.shutdown(wait=False)

    result = task.result
    if result.error:
        logger.warning(f"Lectura degradada: {result.error}")
    print(result.best_plate or "")
    return 0 if result.best_plate else 1


if __name__ == "__main__":
    sys.exit(main())
