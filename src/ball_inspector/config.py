"""
Ball Inspector Configuration
============================

This module handles configuration loading for the inspection service.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    BALL_INSPECTOR_API_BASE        -> inference.api_base
    BALL_INSPECTOR_MODEL           -> inference.model
    OPENAI_API_KEY                 -> inference.api_key
    BALL_INSPECTOR_TIMEOUT         -> inference.timeout_seconds
    BALL_INSPECTOR_MAX_WIDTH       -> preprocess.max_width
    BALL_INSPECTOR_MAX_HEIGHT      -> preprocess.max_height
    BALL_INSPECTOR_CAMERA_BACKEND  -> camera.backend
    BALL_INSPECTOR_CAMERA_INDEX    -> camera.index
    BALL_INSPECTOR_STORAGE_ENABLED -> storage.enabled
    BALL_INSPECTOR_STORAGE_DIR     -> storage.directory
    BALL_INSPECTOR_PORT            -> server.port
    BALL_INSPECTOR_LOG_LEVEL       -> logging.level
    PORT                           -> server.port (Cloud Run)

Example:
    from ball_inspector.config import settings

    print(settings.inference.model)
    print(settings.preprocess.max_width)
"""

import os
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class ServiceConfig(BaseModel):
    """Service identification configuration."""

    name: str = Field(default="ball-inspector", description="Service name")
    version: str = Field(default="v0.1.0", description="Service version")


class PreprocessConfig(BaseModel):
    """Image preprocessing bounds."""

    max_width: int = Field(default=800, ge=1, description="Maximum frame width in pixels")
    max_height: int = Field(default=600, ge=1, description="Maximum frame height in pixels")
    jpeg_quality: Optional[int] = Field(
        default=None,
        ge=1,
        le=100,
        description="JPEG quality (None = encoder default)",
    )


class InferenceConfig(BaseModel):
    """Vision inference service configuration."""

    api_base: str = Field(
        default="https://api.openai.com/v1",
        description="Base URL of the OpenAI-compatible API",
    )
    model: str = Field(default="gpt-4o-mini", description="Vision-capable model name")
    api_key: Optional[str] = Field(default=None, description="Bearer token for the API")
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for the inference call",
    )
    max_tokens: int = Field(default=300, ge=1, description="Reply token limit")


class CameraConfig(BaseModel):
    """Live camera configuration."""

    backend: str = Field(
        default="cv2",
        description="Frame source: 'cv2' or 'static'",
    )
    index: int = Field(default=0, ge=0, description="OpenCV capture device index")
    static_path: Optional[str] = Field(
        default=None,
        description="Image file served by the static backend",
    )


class StorageConfig(BaseModel):
    """Captured image persistence."""

    enabled: bool = Field(default=False, description="Save submitted frames to disk")
    directory: str = Field(default="captured_images", description="Target directory")


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8000, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for the ball inspector.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    service: ServiceConfig = Field(default_factory=ServiceConfig)
    preprocess: PreprocessConfig = Field(default_factory=PreprocessConfig)
    inference: InferenceConfig = Field(default_factory=InferenceConfig)
    camera: CameraConfig = Field(default_factory=CameraConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path("/app/config.yaml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.warning("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Inference settings
    if env_base := os.environ.get("BALL_INSPECTOR_API_BASE"):
        config_data.setdefault("inference", {})["api_base"] = env_base
    if env_model := os.environ.get("BALL_INSPECTOR_MODEL"):
        config_data.setdefault("inference", {})["model"] = env_model
    if env_key := os.environ.get("OPENAI_API_KEY"):
        config_data.setdefault("inference", {})["api_key"] = env_key
    if env_timeout := os.environ.get("BALL_INSPECTOR_TIMEOUT"):
        config_data.setdefault("inference", {})["timeout_seconds"] = float(env_timeout)

    # Preprocess settings
    if env_w := os.environ.get("BALL_INSPECTOR_MAX_WIDTH"):
        config_data.setdefault("preprocess", {})["max_width"] = int(env_w)
    if env_h := os.environ.get("BALL_INSPECTOR_MAX_HEIGHT"):
        config_data.setdefault("preprocess", {})["max_height"] = int(env_h)

    # Camera settings
    if env_cam_backend := os.environ.get("BALL_INSPECTOR_CAMERA_BACKEND"):
        config_data.setdefault("camera", {})["backend"] = env_cam_backend
    if env_cam := os.environ.get("BALL_INSPECTOR_CAMERA_INDEX"):
        config_data.setdefault("camera", {})["index"] = int(env_cam)

    # Storage settings
    if env_store := os.environ.get("BALL_INSPECTOR_STORAGE_ENABLED"):
        config_data.setdefault("storage", {})["enabled"] = env_store.lower() in ("1", "true", "yes")
    if env_dir := os.environ.get("BALL_INSPECTOR_STORAGE_DIR"):
        config_data.setdefault("storage", {})["directory"] = env_dir

    # Server settings (Cloud Run uses PORT env var)
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    elif env_port := os.environ.get("BALL_INSPECTOR_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)

    # Logging settings
    if env_log := os.environ.get("BALL_INSPECTOR_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
setup_logging(settings)
