import time
from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.concurrency import run_in_threadpool

from lpr.application.plate_recognition_service import PlateRecognitionService
from lpr.core.config import settings
from lpr.domain.Models.frame import Frame
from lpr.domain.Models.rect import FULL_FRAME, Rect
from lpr.infrastructure.Camera.still_image_capture_device import StillImageCaptureDevice, decode_image

app = FastAPI(title=settings.app_name)


@lru_cache(maxsize=1)
def get_service() -> PlateRecognitionService:
    from lpr.application.service_factory import create_recognition_service
    return create_recognition_service()


def get_region(
    x: Optional[float] = Query(None, ge=0.0, le=1.0),
    y: Optional[float] = Query(None, ge=0.0, le=1.0),
    width: Optional[float] = Query(None, ge=0.0, le=1.0),
    height: Optional[float] = Query(None, ge=0.0, le=1.0),
) -> Optional[Rect]:
    """ROI normalizada opcional; hay que mandar los cuatro valores o ninguno."""
    values = (x, y, width, height)
    if all(v is None for v in values):
        return None
    if any(v is None for v in values):
        raise HTTPException(status_code=422, detail="La región necesita x, y, width y height")
    return Rect(x, y, width, height)


async def read_frame(request: Request) -> Frame:
    payload = await request.body()
    image = decode_image(payload)
    if image is None:
        raise HTTPException(status_code=400, detail="El cuerpo no es una imagen válida")
    return Frame(data=image, timestamp=time.time(), source="upload")


@app.get("/health")
def health_check():
    return {"status": "ok", "env": settings.app_env}


@app.post("/detect")
async def detect(frame: Frame = Depends(read_frame), service: PlateRecognitionService = Depends(get_service)):
    task = service.detect_plates(frame)
    await run_in_threadpool(task.wait)
    return {"detections": [d.to_dict() for d in task.detections]}


@app.post("/recognize")
async def recognize(
    frame: Frame = Depends(read_frame),
    region: Optional[Rect] = Depends(get_region),
    service: PlateRecognitionService = Depends(get_service),
):
    task = service.recognize_plate(frame, region or FULL_FRAME)
    await run_in_threadpool(task.wait)
    return {"plate": task.recognized_text}


@app.post("/read")
async def read_plate(
    frame: Frame = Depends(read_frame),
    region: Optional[Rect] = Depends(get_region),
    service: PlateRecognitionService = Depends(get_service),
):
    device = StillImageCaptureDevice(image=frame.data, source=frame.source)
    task = service.read_plate_number(region=region, capture_device=device)
    await run_in_threadpool(task.wait)
    return task.result.to_dict()
