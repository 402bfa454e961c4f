"""Configuration helpers for docmerge runs.

Settings are assembled from, in increasing priority: built-in defaults plus
the packaged alias tables, an optional YAML settings file, ``DOCMERGE_*``
environment variables (a ``.env`` file is honoured) and explicit overrides
coming from the command line.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from docmerge.core.errors import ConfigurationError


CONFIG_DIR = Path(__file__).resolve().parent
DEFAULT_ALIASES_PATH = CONFIG_DIR / "aliases.yaml"
DEFAULT_CONFIG_NAME = "docmerge.yaml"

ENV_PREFIX = "DOCMERGE_"
_ENV_FIELDS = (
    "template_path",
    "roster_path",
    "codebook_path",
    "output_dir",
    "log_dir",
    "roster_sheet",
    "codebook_sheet",
    "date_format",
    "filename_suffix",
)


class AliasTable(BaseModel):
    """Accepted header names per logical column plus the required subset."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    columns: Dict[str, List[str]] = Field(default_factory=dict)
    required: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _required_are_declared(self) -> "AliasTable":
        unknown = [name for name in self.required if name not in self.columns]
        if unknown:
            raise ValueError(f"required columns without aliases: {', '.join(unknown)}")
        return self

    def extended(self, extra: Mapping[str, List[str]]) -> "AliasTable":
        """Return a copy with ``extra`` aliases appended per logical column."""

        columns = {name: list(aliases) for name, aliases in self.columns.items()}
        for name, aliases in extra.items():
            bucket = columns.setdefault(str(name), [])
            for alias in aliases or []:
                if str(alias) not in bucket:
                    bucket.append(str(alias))
        return AliasTable(columns=columns, required=list(self.required))


class Settings(BaseModel):
    """Resolved settings for a single generation run."""

    model_config = ConfigDict(extra="forbid")

    base_dir: Path
    template_path: Path = Path("Template.docx")
    roster_path: Path = Path("Ulaz.xlsx")
    codebook_path: Path = Path("Sifarnik.xlsx")
    output_dir: Path = Path("out")
    log_dir: Path = Path("logs")
    roster_sheet: Optional[str] = "Podaci"
    codebook_sheet: Optional[str] = "RM"
    date_format: str = "%d.%m.%Y."
    filename_suffix: str = " - generisano.docx"
    roster_aliases: AliasTable
    codebook_aliases: AliasTable

    @field_validator("roster_sheet", "codebook_sheet", mode="before")
    @classmethod
    def _blank_sheet_means_first(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("filename_suffix")
    @classmethod
    def _suffix_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("filename_suffix must not be empty")
        return value

    def resolve(self, path: Path) -> Path:
        """Resolve ``path`` against ``base_dir`` unless it is absolute."""

        return path if path.is_absolute() else self.base_dir / path

    @property
    def template_file(self) -> Path:
        return self.resolve(self.template_path)

    @property
    def roster_file(self) -> Path:
        return self.resolve(self.roster_path)

    @property
    def codebook_file(self) -> Path:
        return self.resolve(self.codebook_path)

    @property
    def output_path(self) -> Path:
        return self.resolve(self.output_dir)

    @property
    def log_path(self) -> Path:
        return self.resolve(self.log_dir)


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file must contain a mapping: {path}")
    return data


def _env_values() -> Dict[str, str]:
    values: Dict[str, str] = {}
    for name in _ENV_FIELDS:
        raw = os.getenv(f"{ENV_PREFIX}{name.upper()}")
        if raw is not None:
            values[name] = raw
    return values


def _alias_table(defaults: Mapping[str, Any], key: str, extra: Mapping[str, Any]) -> AliasTable:
    base = AliasTable.model_validate(defaults.get(key) or {})
    additions = extra.get(key) or {}
    if not isinstance(additions, Mapping):
        raise ConfigurationError(f"aliases.{key} must be a mapping of column -> alias list")
    return base.extended(additions)


def load_settings(
    config_path: str | Path | None = None,
    *,
    base_dir: str | Path | None = None,
    **overrides: Any,
) -> Settings:
    """Build :class:`Settings` for a run.

    Args:
        config_path: Optional YAML settings file. When omitted,
            ``<base_dir>/docmerge.yaml`` is used if it exists.
        base_dir: Directory that relative paths resolve against. Defaults to
            ``DOCMERGE_ROOT`` and then the current working directory.
        **overrides: Field values that win over file and environment values;
            ``None`` values are ignored.

    Raises:
        ConfigurationError: When a file is missing/invalid or validation fails.
    """

    load_dotenv(override=False)
    root = Path(base_dir or os.getenv(f"{ENV_PREFIX}ROOT") or Path.cwd())

    if config_path is not None:
        payload = _load_yaml(Path(config_path))
    else:
        default_path = root / DEFAULT_CONFIG_NAME
        payload = _load_yaml(default_path) if default_path.exists() else {}

    extra_aliases = payload.pop("aliases", None) or {}
    if not isinstance(extra_aliases, Mapping):
        raise ConfigurationError("aliases must be a mapping with roster/codebook keys")
    packaged = _load_yaml(DEFAULT_ALIASES_PATH)

    data: Dict[str, Any] = {"base_dir": root}
    data.update(payload)
    data.update(_env_values())
    data.update({key: value for key, value in overrides.items() if value is not None})

    try:
        data["roster_aliases"] = _alias_table(packaged, "roster", extra_aliases)
        data["codebook_aliases"] = _alias_table(packaged, "codebook", extra_aliases)
        return Settings.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings: {exc}") from exc


__all__ = [
    "AliasTable",
    "Settings",
    "load_settings",
    "DEFAULT_ALIASES_PATH",
    "DEFAULT_CONFIG_NAME",
]
