import threading

import cv2
import numpy as np
import pytest
from conftest import make_frame

from lpr.core.errors import CaptureError, OCRError
from lpr.domain.Models.rect import FULL_FRAME, Rect
from lpr.domain.Models.tensor_bundle import TensorBundle
from lpr.domain.Models.text_candidate import RecognitionLevel
from lpr.infrastructure.Camera.capture_device_factory import create_capture_device
from lpr.infrastructure.Camera.opencv_capture_device import OpenCVCaptureDevice
from lpr.infrastructure.Camera.still_image_capture_device import StillImageCaptureDevice, decode_image
from lpr.infrastructure.Detector.factory import create_plate_detector
from lpr.infrastructure.OCR.EasyOCR_OCRReader import PLATE_ALPHABET, EasyOCR_OCRReader
from lpr.infrastructure.Preprocessing.opencv_image_enhancer import OpenCVImageEnhancer


class FakeInference:
    def __init__(self, bundle=None, error=None):
        self.bundle = bundle
        self.error = error

    def infer(self, frame):
        if self.error:
            raise self.error
        return self.bundle


class RecordingDelegate:
    def __init__(self):
        self.events = []
        self.done = threading.Event()

    def capture_will_begin(self):
        self.events.append("begin")

    def capture_did_process_photo(self, frame, error=None):
        self.events.append(("photo", frame, error))

    def capture_did_finish(self, error=None):
        self.events.append(("finish", error))
        self.done.set()


# ==========================================================
# DETECTOR
# ==========================================================
def test_detector_decodes_inference_output():
    bundle = TensorBundle.from_buffers([0.1, 0.2, 0.5, 0.6], [0.9], [1], [1])
    detector = create_plate_detector(FakeInference(bundle))

    (detection,) = detector.detect(make_frame(200, 100))

    assert detection.rect.x == pytest.approx(40)
    assert detection.rect.height == pytest.approx(40)


def test_detector_swallows_inference_errors():
    detector = create_plate_detector(FakeInference(error=RuntimeError("sesión cerrada")))
    assert detector.detect(make_frame()) == []


# ==========================================================
# ENHANCER
# ==========================================================
def test_enhance_keeps_shape_and_dtype():
    image = np.random.default_rng(0).integers(0, 255, size=(40, 80, 3), dtype=np.uint8)
    enhanced = OpenCVImageEnhancer().enhance(image)

    assert enhanced.shape == image.shape
    assert enhanced.dtype == np.uint8


def test_enhance_increases_contrast():
    image = np.zeros((20, 20, 3), dtype=np.uint8)
    image[:, 10:] = 160
    image[:, :10] = 96
    enhanced = OpenCVImageEnhancer(sharpen_amount=0.01).enhance(image)

    assert int(enhanced[:, 15].mean()) > 160
    assert int(enhanced[:, 5].mean()) < 96


def test_high_contrast_removes_color():
    image = np.zeros((10, 10, 3), dtype=np.uint8)
    image[:, :, 2] = 200
    out = OpenCVImageEnhancer().high_contrast(image)

    assert np.all(out[:, :, 0] == out[:, :, 1])
    assert np.all(out[:, :, 1] == out[:, :, 2])


def test_enhancer_rejects_empty_image():
    enhancer = OpenCVImageEnhancer()
    empty = np.zeros((0, 0, 3), dtype=np.uint8)
    assert enhancer.enhance(empty) is None
    assert enhancer.high_contrast(empty) is None


# ==========================================================
# OCR
# ==========================================================
class FakeEasyOCR:
    def __init__(self, results=None, error=None):
        self.results = results or []
        self.error = error
        self.calls = []

    def readtext(self, image, **kwargs):
        self.calls.append((image.shape, kwargs))
        if self.error:
            raise self.error
        return self.results


def make_reader(fake):
    reader = EasyOCR_OCRReader.__new__(EasyOCR_OCRReader)
    reader.reader = fake
    return reader


def test_easyocr_crops_region_and_normalizes_height():
    fake = FakeEasyOCR([([[0, 5], [30, 5], [30, 25], [0, 25]], "MH12AB1234", 0.8)])
    image = np.zeros((100, 200, 3), dtype=np.uint8)

    observations = make_reader(fake).recognize(image, Rect(0.2, 0.1, 0.4, 0.4), RecognitionLevel.ACCURATE, ["MH"])

    (shape, kwargs), = fake.calls
    assert shape[:2] == (40, 80)
    assert kwargs["decoder"] == "beamsearch"
    assert kwargs["allowlist"] == PLATE_ALPHABET
    assert observations[0].candidates == ["MH12AB1234"]
    assert observations[0].height == pytest.approx(0.5)


def test_easyocr_fast_uses_greedy_decoder():
    fake = FakeEasyOCR()
    make_reader(fake).recognize(np.zeros((10, 10), dtype=np.uint8), FULL_FRAME, RecognitionLevel.FAST)
    assert fake.calls[0][1]["decoder"] == "greedy"


def test_easyocr_errors_become_ocr_error():
    reader = make_reader(FakeEasyOCR(error=RuntimeError("cuda")))
    with pytest.raises(OCRError):
        reader.recognize(np.zeros((10, 10), dtype=np.uint8), FULL_FRAME, RecognitionLevel.FAST)


def test_easyocr_empty_region_reads_nothing():
    fake = FakeEasyOCR()
    out = make_reader(fake).recognize(np.zeros((10, 10), dtype=np.uint8), Rect(0.5, 0.5, 0, 0), RecognitionLevel.FAST)
    assert out == []
    assert fake.calls == []


# ==========================================================
# CAMERA
# ==========================================================
def test_still_image_device_delivers_frame():
    image = np.full((30, 40, 3), 7, dtype=np.uint8)
    delegate = RecordingDelegate()

    StillImageCaptureDevice(image=image, source="memoria").capture(delegate)

    assert delegate.done.wait(2)
    assert delegate.events[0] == "begin"
    _, frame, error = delegate.events[1]
    assert error is None
    assert frame.source == "memoria"
    assert frame.width == 40 and frame.height == 30
    assert delegate.events[2] == ("finish", None)


def test_still_image_device_reports_unreadable_file(tmp_path):
    delegate = RecordingDelegate()

    StillImageCaptureDevice(path=str(tmp_path / "no_existe.jpg")).capture(delegate)

    assert delegate.done.wait(2)
    _, frame, error = delegate.events[1]
    assert frame is None
    assert isinstance(error, CaptureError)


def test_still_image_device_needs_a_source():
    with pytest.raises(ValueError):
        StillImageCaptureDevice()


def test_decode_image_roundtrip_and_garbage():
    ok, encoded = cv2.imencode(".png", np.full((8, 8, 3), 50, dtype=np.uint8))
    assert ok
    assert decode_image(encoded.tobytes()).shape == (8, 8, 3)
    assert decode_image(b"no es una imagen") is None
    assert decode_image(b"") is None

    with pytest.raises(CaptureError):
        StillImageCaptureDevice.from_bytes(b"basura")


@pytest.mark.parametrize("source", ["file:///tmp/placa.raw", "/tmp/placa.JPG", "placa.png"])
def test_factory_builds_still_image_device(source):
    assert isinstance(create_capture_device(source), StillImageCaptureDevice)


def test_factory_builds_opencv_device():
    assert isinstance(create_capture_device("rtsp://camara/stream"), OpenCVCaptureDevice)


# ==========================================================
# RECT
# ==========================================================
def test_rect_rejects_negative_size():
    with pytest.raises(ValueError):
        Rect(0, 0, -1, 1)


def test_rect_normalized_is_clamped():
    rect = Rect(150, -10, 100, 60).normalized(200, 100)
    assert (rect.x, rect.y, rect.width, rect.height) == pytest.approx((0.75, 0.0, 0.25, 0.5))


def test_rect_normalized_without_image_size_is_full_frame():
    assert Rect(1, 1, 1, 1).normalized(0, 0) == FULL_FRAME


def test_rect_to_pixels():
    assert Rect(0.2, 0.1, 0.4, 0.4).to_pixels(200, 100) == (40, 10, 80, 40)
    assert FULL_FRAME.is_full_frame
    assert not Rect(0, 0, 1, 0.5).is_full_frame


def test_enhancer_keeps_explicit_zero_settings():
    enhancer = OpenCVImageEnhancer(sharpen_amount=0.0, high_contrast_brightness=0.0)
    assert enhancer.sharpen_amount == 0.0
    assert enhancer.high_contrast_brightness == 0.0

    image = np.zeros((20, 20, 3), dtype=np.uint8)
    image[:, 10:] = 160
    image[:, :10] = 96
    # sin enfoque, el borde entre las dos zonas queda tal cual lo deja el contraste
    enhanced = enhancer.enhance(image)
    assert len(np.unique(enhanced)) == 2
