"""Application configuration from environment variables."""

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    log_level: str = "info"

    # CORS
    cors_origins: List[str] = ["*"]

    # Storage
    upload_dir: Path = BASE_DIR / "uploads"
    public_base_url: str = "http://localhost:8080"

    # Detection
    models_dir: Path = BASE_DIR / "models"
    face_detection_model: str = "hog"  # "hog" or "cnn"

    # Image fetching
    fetch_timeout: float = 10.0
    fetch_max_redirects: int = 5

    # Cartoon generation
    generation_base_url: str = "https://image.pollinations.ai"
    generation_timeout: float = 30.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "env_prefix": "KIDTOON_"}


settings = Settings()
