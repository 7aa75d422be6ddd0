import threading

import pytest
from conftest import ScriptedCaptureDevice, ScriptedOCRReader, StubDetector, make_extractor, obs

from lpr.application.plate_recognition_service import PlateRecognitionService
from lpr.domain.Models.detection import Detection
from lpr.domain.Models.rect import Rect
from lpr.domain.Models.text_candidate import RecognitionLevel

FAST, ACCURATE = RecognitionLevel.FAST, RecognitionLevel.ACCURATE


@pytest.fixture
def service_factory():
    created = []

    def build(detector=None, reader=None, device=None):
        service = PlateRecognitionService(
            detector=detector or StubDetector(),
            extractor=make_extractor(reader or ScriptedOCRReader()),
            capture_device=device,
            capture_timeout=1,
        )
        created.append(service)
        return service

    yield build
    for service in created:
        service.shutdown(wait=True)


class Collector:
    def __init__(self):
        self.values = []
        self.done = threading.Event()

    def __call__(self, value):
        self.values.append(value)
        self.done.set()


def test_read_plate_number_reports_plate(service_factory, frame):
    reader = ScriptedOCRReader({("original", FAST): [obs("GJ01AB1234")]})
    service = service_factory(reader=reader, device=ScriptedCaptureDevice(frame))
    callback = Collector()

    task = service.read_plate_number(completion=callback)

    assert callback.done.wait(2)
    assert callback.values == ["GJ01AB1234"]
    assert task.result.best_plate == "GJ01AB1234"


def test_read_plate_number_reports_none_when_nothing_is_found(service_factory, frame):
    service = service_factory(device=ScriptedCaptureDevice(frame))
    callback = Collector()

    service.read_plate_number(completion=callback)

    assert callback.done.wait(2)
    assert callback.values == [None]


def test_read_plate_number_needs_a_device(service_factory):
    with pytest.raises(ValueError):
        service_factory().read_plate_number()


def test_per_call_device_overrides_default(service_factory, frame):
    default = ScriptedCaptureDevice(frame)
    override = ScriptedCaptureDevice(frame)
    service = service_factory(device=default)

    service.read_plate_number(capture_device=override).wait(2)

    assert override.captures == 1
    assert default.captures == 0


def test_recognize_plate_in_region(service_factory, frame):
    reader = ScriptedOCRReader({("enhanced", ACCURATE): [obs("rj14cv0002")]})
    service = service_factory(reader=reader)
    callback = Collector()
    region = Rect(0.1, 0.1, 0.5, 0.5)

    service.recognize_plate(frame, region, completion=callback)

    assert callback.done.wait(2)
    assert callback.values == ["RJ14CV0002"]
    assert {c[3] for c in reader.calls} == {region}


def test_detect_plates_reports_rects(service_factory, frame):
    detector = StubDetector([Detection(rect=Rect(40, 10, 80, 40), score=0.9, class_id=1)])
    service = service_factory(detector=detector)
    callback = Collector()

    service.detect_plates(frame, completion=callback)

    assert callback.done.wait(2)
    assert callback.values == [[Rect(40, 10, 80, 40)]]


def test_finished_tasks_are_no_longer_tracked(service_factory, frame):
    service = service_factory()
    task = service.detect_plates(frame)
    assert task.wait(2)
    assert not service._active


def test_cancel_all_cancels_pending_reads(service_factory, frame):
    gate = threading.Event()
    entered = threading.Event()

    class GatedDevice(ScriptedCaptureDevice):
        def capture(self, delegate):
            entered.set()
            gate.wait(2)
            super().capture(delegate)

    device = GatedDevice(frame)
    service = service_factory(device=device)
    first = service.read_plate_number()
    second = service.read_plate_number()
    assert entered.wait(2)

    service.cancel_all()
    gate.set()

    assert first.wait(2) and second.wait(2)
    assert first.best_plate is None
    assert second.best_plate is None
    # la segunda lectura estaba en cola: nunca llega a capturar
    assert device.captures == 1
