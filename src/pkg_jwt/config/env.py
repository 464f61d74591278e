from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict

from .settings import JWTSettings


def _load_config_file(path: str) -> Dict[str, Any]:
    try:
        data = json.loads(Path(path).expanduser().read_text(encoding="utf-8"))
    except OSError as exc:
        raise RuntimeError(f"Cannot read JWT config file {path}: {exc}") from exc
    except ValueError as exc:
        raise RuntimeError(f"JWT config file {path} is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise RuntimeError(f"JWT config file {path} must contain a JSON object")
    return data


def settings_from_env() -> JWTSettings:
    """
    Build JWTSettings from the environment:

      APP_KEY          process-wide secret, used by generators without an algorithm
      APP_NAME         used by app_name_* claims
      APP_URL          used by app_url_as_issuer
      JWT_CONFIG_FILE  JSON file with a "generators" object (and optional
                       app_key / app_name / app_url fallbacks)
    """
    config_file = os.getenv("JWT_CONFIG_FILE")
    app_key = os.getenv("APP_KEY")

    if not any([config_file, app_key]):
        raise RuntimeError("Missing JWT settings: APP_KEY or JWT_CONFIG_FILE")

    data: Dict[str, Any] = _load_config_file(config_file) if config_file else {}

    try:
        settings = JWTSettings.from_mapping(data)
    except (TypeError, ValueError) as exc:
        raise RuntimeError(f"Invalid JWT configuration: {exc}") from exc

    settings.app_key = app_key or settings.app_key
    settings.app_name = os.getenv("APP_NAME") or settings.app_name
    settings.app_url = os.getenv("APP_URL") or settings.app_url
    return settings
