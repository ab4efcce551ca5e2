"""
Configuration loader for HARKA admin services.
Loads configuration from YAML files and environment variables.
"""

from typing import Dict, Any, List, Optional
from pathlib import Path
import yaml
import os
from pydantic import BaseModel, ConfigDict, Field
import logging

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class SearchConfig(BaseModel):
    """Admin search index configuration."""

    # Seed the demo users/courses/discussions collections at startup
    seed_fixtures: bool = True


class BackupConfig(BaseModel):
    """Backup/restore configuration."""

    backend: str = Field(default="memory", pattern=r"^(memory|supabase)$")
    max_age_days: int = Field(default=30, ge=1)
    expected_entities: List[str] = Field(
        default_factory=lambda: ["users", "courses", "discussions", "activities"]
    )


class ApiClientConfig(BaseModel):
    """Outbound admin API client configuration."""

    base_url: str = "http://localhost:8001/api"
    timeout: float = Field(default=30.0, gt=0)

    # Retry
    max_attempts: int = Field(default=3, ge=1, le=10)
    initial_delay: float = Field(default=1.0, ge=0)
    max_delay: float = Field(default=30.0, ge=0)
    backoff_multiplier: float = Field(default=2.0, ge=1)

    # Circuit breaker
    failure_threshold: int = Field(default=5, ge=1)
    reset_timeout: float = Field(default=60.0, ge=0)


class SupabaseConfig(BaseModel):
    """Supabase connection settings."""

    url: str = ""
    key: str = ""


class HarkaConfig(BaseModel):
    """Main HARKA admin configuration."""

    model_config = ConfigDict(extra="allow")

    # Environment
    environment: str = "development"
    debug: bool = False

    # Logging
    log_level: str = "INFO"

    # Admin API token (empty = open access, development only)
    admin_token: str = ""

    search: SearchConfig = Field(default_factory=SearchConfig)
    backup: BackupConfig = Field(default_factory=BackupConfig)
    api_client: ApiClientConfig = Field(default_factory=ApiClientConfig)
    supabase: SupabaseConfig = Field(default_factory=SupabaseConfig)


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base (sections are merged, not replaced)."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigLoader:
    """Load and manage HARKA configuration."""

    def __init__(self, config_dir: str = "config"):
        """
        Initialize config loader.

        Args:
            config_dir: Directory containing config files
        """
        self.config_dir = Path(config_dir)
        self.config: Optional[HarkaConfig] = None
        self.load()

    def load(self) -> HarkaConfig:
        """Load configuration from YAML and environment variables."""
        load_dotenv()

        env = os.getenv("HARKA_ENV", "development")
        config_file = self.config_dir / f"{env}.yaml"

        # Default config first, then environment-specific overrides
        data = self._load_yaml(self.config_dir / "default.yaml")

        if config_file.exists():
            data = _merge(data, self._load_yaml(config_file))
        else:
            logger.warning(f"Config file not found: {config_file}, using defaults")

        data = _merge(data, self._load_from_env())
        data["environment"] = env

        self.config = HarkaConfig(**data)

        logger.info(f"Configuration loaded (environment: {self.config.environment})")

        return self.config

    def _load_yaml(self, path: Path) -> Dict[str, Any]:
        """Load YAML config file."""
        if not path.exists():
            return {}

        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f)
                return data or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load YAML config {path}: {e}")
            return {}

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        if env := os.getenv("HARKA_ENV"):
            config["environment"] = env
        if log_level := os.getenv("HARKA_LOG_LEVEL"):
            config["log_level"] = log_level.upper()
        if admin_token := os.getenv("HARKA_ADMIN_TOKEN"):
            config["admin_token"] = admin_token

        # API client
        api_client = {}
        if api_url := os.getenv("HARKA_API_URL"):
            api_client["base_url"] = api_url
        if api_timeout := os.getenv("HARKA_API_TIMEOUT"):
            api_client["timeout"] = float(api_timeout)
        if api_client:
            config["api_client"] = api_client

        # Backup
        if backend := os.getenv("HARKA_BACKUP_BACKEND"):
            config["backup"] = {"backend": backend}

        # Supabase
        supabase = {}
        if supabase_url := os.getenv("SUPABASE_URL"):
            supabase["url"] = supabase_url
        if supabase_key := os.getenv("SUPABASE_KEY") or os.getenv("SUPABASE_ANON_KEY"):
            supabase["key"] = supabase_key
        if supabase:
            config["supabase"] = supabase

        return config

    def get(self) -> HarkaConfig:
        """Get current configuration."""
        if not self.config:
            self.load()
        return self.config

    def reload(self) -> HarkaConfig:
        """Reload configuration (useful for development)."""
        logger.info("Reloading configuration...")
        return self.load()


_global_config_loader: Optional[ConfigLoader] = None


def get_config() -> HarkaConfig:
    """Get the global HARKA configuration."""
    global _global_config_loader
    if _global_config_loader is None:
        _global_config_loader = ConfigLoader()
    return _global_config_loader.get()


def initialize_config(config_dir: str = "config") -> HarkaConfig:
    """Initialize the global configuration loader."""
    global _global_config_loader
    _global_config_loader = ConfigLoader(config_dir)
    return _global_config_loader.get()
