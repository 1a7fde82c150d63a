"""
Configuration loader for the catalogue service
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class ApiConfig(BaseModel):
    """Upstream catalogue endpoint"""

    base_url: str = ""
    products_path: str = "/products-test.json"
    timeout_seconds: float = Field(default=20.0, gt=0.0, le=300.0)


class IntegrationsConfig(BaseModel):
    """Mock vs real client selection"""

    mode: Literal["mock", "real"] = "mock"
    local_catalogue_path: Optional[str] = None


class CatalogConfig(BaseModel):
    api: ApiConfig = Field(default_factory=ApiConfig)
    integrations: IntegrationsConfig = Field(default_factory=IntegrationsConfig)


_ENV_OVERRIDES = {
    "CATALOG_API_URL": ("api", "base_url"),
    "CATALOG_PRODUCTS_PATH": ("api", "products_path"),
    "CATALOG_TIMEOUT_SECONDS": ("api", "timeout_seconds"),
    "INTEGRATIONS_MODE": ("integrations", "mode"),
}


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    for env_name, (section, key) in _ENV_OVERRIDES.items():
        value = os.getenv(env_name, "").strip()
        if not value:
            continue
        if env_name == "INTEGRATIONS_MODE":
            value = "real" if value.lower() in {"real", "live"} else "mock"
        data.setdefault(section, {})[key] = value
    return data


def load_catalog_config(config_path: Optional[Path] = None) -> CatalogConfig:
    """
    Load and validate catalogue configuration from YAML, then apply env overrides

    Args:
        config_path: Path to config file. Defaults to config/catalog_config.yml

    Returns:
        Validated CatalogConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValidationError: If config doesn't match schema
    """
    if config_path is None:
        config_path = Path(__file__).parent.parent.parent / "config" / "catalog_config.yml"

    if not config_path.exists():
        raise FileNotFoundError(f"Catalog config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    data = _apply_env_overrides(data)

    try:
        cfg = CatalogConfig(**data)
        logger.info("Successfully loaded catalog config from %s", config_path)
        return cfg
    except ValidationError as e:
        logger.error("Catalog config validation failed: %s", e)
        raise
