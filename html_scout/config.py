# === FILE: html_scout/config.py ===
"""
Loading and validation of HtmlScout scan settings.

Settings are described with Pydantic and read from YAML or JSON files.
Everything here has a default, so a scan can run without any file.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Literal, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError


class ScanSettings(BaseModel):
    """Settings shared by every fetch of one scan run."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    pool_cap: int = Field(16, ge=1, description="Upper bound for concurrent sub-path fetches.")
    wait_ceiling: float = Field(
        60.0, gt=0, description="Seconds to wait for a fan-out batch before abandoning it."
    )
    default_timeout: float = Field(
        30.0, ge=0, description="Per-request timeout (seconds) when none is given."
    )
    http_version: Literal["1.0", "1.1", "2"] = Field(
        "1.1", description='HTTP protocol version; "2" selects the HTTP/2-capable httpx transport.'
    )
    follow_redirects: bool = Field(False, description="Follow 3xx responses.")
    markup_parser: Literal["html.parser", "lxml"] = Field(
        "html.parser", description="BeautifulSoup tree builder."
    )


_DEFAULT_CFG = Path("html_scout.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> ScanSettings:
    """
    Read YAML or JSON and return validated ScanSettings.

    With *path* None the ``html_scout.yaml`` of the working directory is
    used when present, otherwise the built-in defaults.
    An explicit path that does not exist raises FileNotFoundError.
    """
    if path is None:
        if not _DEFAULT_CFG.is_file():
            return ScanSettings()
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported settings format: {suffix}")

    try:
        return ScanSettings(**data)
    except ValidationError:
        raise


__all__ = ["ScanSettings", "load_config"]
