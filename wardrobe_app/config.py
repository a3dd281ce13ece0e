"""Configuration helpers for the Smart Wardrobe inventory service."""

from dataclasses import dataclass, field
from pathlib import Path
import os
from typing import Optional, Tuple

DEFAULT_PLACEHOLDER_IMAGE_URL = "https://placehold.co/400x320"
DEFAULT_ALLOWED_IMAGE_TYPES: Tuple[str, ...] = ("image/jpeg", "image/png", "image/gif")
DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class WardrobeConfig:
    """Configuration values for the wardrobe service.

    The defaults describe a fully local setup: a SQLite record store and an
    object storage directory served from ``storage_base_url``. Pointing
    ``record_store_backend`` and ``storage_backend`` at ``rest`` switches both
    boundaries to the hosted record store and bucket described by
    ``supabase_url`` / ``supabase_key``.
    """

    record_store_backend: str = "sqlite"
    database_path: str = "data/wardrobe.db"
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    storage_backend: str = "local"
    storage_bucket: str = "wardrobe-images"
    storage_dir: str = "data/uploads"
    storage_base_url: str = "http://localhost:8080/uploads"
    require_image_on_create: bool = False
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    allowed_image_types: Tuple[str, ...] = field(default=DEFAULT_ALLOWED_IMAGE_TYPES)
    placeholder_image_url: str = DEFAULT_PLACEHOLDER_IMAGE_URL
    default_category: str = "casual"
    notification_limit: int = 1
    assistant_url: Optional[str] = None
    request_timeout_seconds: float = 10.0
    environment: str | None = None

    @classmethod
    def from_env(cls) -> "WardrobeConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default and is merged with environment variables so that the record
        store key can be injected by the runtime environment.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("WARDROBE_CONFIG_DIR", "config/environments"))
        yaml_config: dict = {}

        if config_path:
            path = Path(config_path)
        elif env_name:
            path = config_dir / f"{env_name}.yaml"
        else:
            path = None

        if path and path.exists():
            yaml_config = cls._load_yaml_config(path)

        def get_value(key: str, default: Optional[str] = None) -> Optional[str]:
            env_key = key.upper()
            return os.getenv(env_key, yaml_config.get(key, default))

        allowed_types = get_value("allowed_image_types")
        max_upload_bytes = get_value("max_upload_bytes")
        notification_limit = get_value("notification_limit")
        timeout = get_value("request_timeout_seconds")

        return cls(
            record_store_backend=str(get_value("record_store_backend", "sqlite")).lower(),
            database_path=str(get_value("database_path", "data/wardrobe.db")),
            supabase_url=get_value("supabase_url"),
            supabase_key=get_value("supabase_key"),
            storage_backend=str(get_value("storage_backend", "local")).lower(),
            storage_bucket=str(get_value("storage_bucket", "wardrobe-images")),
            storage_dir=str(get_value("storage_dir", "data/uploads")),
            storage_base_url=str(get_value("storage_base_url", "http://localhost:8080/uploads")),
            require_image_on_create=cls._parse_bool(get_value("require_image_on_create"), False),
            max_upload_bytes=int(max_upload_bytes) if max_upload_bytes else DEFAULT_MAX_UPLOAD_BYTES,
            allowed_image_types=cls._parse_list(allowed_types) or DEFAULT_ALLOWED_IMAGE_TYPES,
            placeholder_image_url=str(
                get_value("placeholder_image_url", DEFAULT_PLACEHOLDER_IMAGE_URL)
            ),
            default_category=str(get_value("default_category", "casual")),
            notification_limit=int(notification_limit) if notification_limit else 1,
            assistant_url=get_value("assistant_url"),
            request_timeout_seconds=float(timeout) if timeout else 10.0,
            environment=env_name,
        )

    @staticmethod
    def _parse_bool(raw: Optional[str], default: bool) -> bool:
        if raw is None or raw == "":
            return default
        return str(raw).strip().lower() in _TRUE_VALUES

    @staticmethod
    def _parse_list(raw: Optional[str]) -> Tuple[str, ...]:
        if not raw:
            return ()
        return tuple(part.strip().lower() for part in raw.split(",") if part.strip())

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse a minimal YAML/INI-style config without external dependencies."""

        config: dict[str, str] = {}
        for line in path.read_text().splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = raw_value.strip()
            if (value.startswith("\"") and value.endswith("\"")) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]
            config[key.strip()] = value
        return config
