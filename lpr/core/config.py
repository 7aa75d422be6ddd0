import os
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv


# ==========================================================
# 1) Cargar .env raíz
# ==========================================================
load_dotenv(".env")
DEPLOY_ENV = os.getenv("DEPLOY_ENV", "prod").lower()

# ==========================================================
# 2) Cargar .env del entorno (opcional)
# ==========================================================
ENV_PATH = f"DevOps/{DEPLOY_ENV}/.env"
load_dotenv(ENV_PATH, override=True)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=ENV_PATH,
        extra="allow",
    )

    # =========================
    #  App
    # =========================
    deploy_env: str = Field("prod", description="DEPLOY_ENV")
    app_name: str = Field("lpr-pipeline", description="APP_NAME")
    app_env: str = Field("prod", description="APP_ENV")
    app_port: int = Field(8000, description="APP_PORT")

    # =========================
    #  Captura
    # =========================
    # Watchdog de la etapa de captura (segundos)
    capture_timeout: float = Field(10.0, description="CAPTURE_TIMEOUT")
    camera_source: Optional[str] = Field(None, description="CAMERA_SOURCE")

    # =========================
    #  Detector
    # =========================
    detection_score_threshold: float = Field(0.5, description="DETECTION_SCORE_THRESHOLD")
    detection_plate_class_id: int = Field(1, description="DETECTION_PLATE_CLASS_ID")
    detection_max_results: int = Field(10, description="DETECTION_MAX_RESULTS")
    detector_model_path: str = Field("./models/detect_plate.onnx", description="DETECTOR_MODEL_PATH")
    detector_device: str = Field("cpu", description="DETECTOR_DEVICE")

    # =========================
    #  OCR
    # =========================
    ocr_lang: str = Field("en", description="OCR_LANG")
    ocr_gpu: bool = Field(False, description="OCR_GPU")
    ocr_min_height: float = Field(0.15, description="OCR_MIN_HEIGHT")
    ocr_max_candidates: int = Field(10, description="OCR_MAX_CANDIDATES")
    ocr_region_codes: List[str] = Field(
        default_factory=lambda: ["MH", "DL", "KA", "TN", "AP", "TS", "GJ", "RJ", "UP", "MP"],
        description="OCR_REGION_CODES",
    )

    # =========================
    #  Preprocesado de variantes
    # =========================
    enhance_contrast: float = Field(1.5, description="ENHANCE_CONTRAST")
    enhance_sharpen_radius: float = Field(2.0, description="ENHANCE_SHARPEN_RADIUS")
    enhance_sharpen_amount: float = Field(1.5, description="ENHANCE_SHARPEN_AMOUNT")
    high_contrast: float = Field(2.0, description="HIGH_CONTRAST")
    high_contrast_brightness: float = Field(0.1, description="HIGH_CONTRAST_BRIGHTNESS")

    # =========================
    #  Monitoring
    # =========================
    metrics_port: int = Field(9100, description="METRICS_PORT")


settings = Settings()
