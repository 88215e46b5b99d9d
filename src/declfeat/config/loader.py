"""Load DeclFeatConfig from kwargs, DECLFEAT__* env vars and .declfeat.yaml.

Precedence, first wins:
1. Keyword overrides passed to load_config()
2. Environment variables (DECLFEAT__SECTION__KEY)
3. The YAML file: an explicit ``config_file``, else ``<root>/.declfeat.yaml``
4. Model defaults
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from declfeat.config.models import (
    DeclFeatConfig,
    ExpansionConfig,
    LoggingConfig,
    ResolutionConfig,
)
from declfeat.core.errors import ConfigError
from declfeat.core.logging import get_logger

CONFIG_FILENAME = ".declfeat.yaml"

log = get_logger("config")


def _load_yaml(path: Path) -> dict[str, Any]:
    """Top-level mapping of ``path``; a missing or empty file yields {}."""
    if not path.exists():
        return {}
    try:
        with path.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError.parse_error(str(path), str(e)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError.parse_error(str(path), "top level must be a mapping")
    return data


class _YamlSource(PydanticBaseSettingsSource):
    """Serves the sections of an already parsed YAML document."""

    def __init__(self, settings_cls: type[BaseSettings], sections: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._sections = sections

    def get_field_value(
        self,
        field: Any,  # noqa: ARG002
        field_name: str,
    ) -> tuple[Any, str, bool]:
        section = self._sections.get(field_name)
        return section, field_name, section is not None

    def __call__(self) -> dict[str, Any]:
        return {
            name: section
            for name in self.settings_cls.model_fields
            if (section := self._sections.get(name)) is not None
        }


def _make_settings_class(sections: dict[str, Any]) -> type[BaseSettings]:
    """Settings class bound to one YAML document, so concurrent loads never share state."""

    class DeclFeatSettings(BaseSettings):
        model_config = SettingsConfigDict(
            env_prefix="DECLFEAT__",
            env_nested_delimiter="__",
            case_sensitive=False,
        )

        logging: LoggingConfig = LoggingConfig()
        expansion: ExpansionConfig = ExpansionConfig()
        resolution: ResolutionConfig = ResolutionConfig()

        @classmethod
        def settings_customise_sources(
            cls,
            settings_cls: type[BaseSettings],
            init_settings: PydanticBaseSettingsSource,
            env_settings: PydanticBaseSettingsSource,
            dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
            file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        ) -> tuple[PydanticBaseSettingsSource, ...]:
            return (init_settings, env_settings, _YamlSource(settings_cls, sections))

    return DeclFeatSettings


def load_config(
    root: Path | None = None, *, config_file: Path | None = None, **kwargs: Any
) -> DeclFeatConfig:
    """Build the effective configuration.

    Args:
        root: Directory searched for .declfeat.yaml (default: cwd).
        config_file: Explicit YAML file; unlike the searched file it must exist.
        **kwargs: Section overrides, e.g. ``expansion={"compact_default_args": True}``.

    Raises:
        ConfigError: On a missing explicit file, invalid YAML or invalid values.
    """
    if config_file is not None:
        if not config_file.is_file():
            raise ConfigError.file_not_found(str(config_file))
        path = config_file
    else:
        path = (root or Path.cwd()) / CONFIG_FILENAME
    sections = _load_yaml(path)

    unknown = sorted(set(sections) - set(DeclFeatConfig.model_fields))
    if unknown:
        log.warning("config_unknown_sections", path=str(path), sections=unknown)

    settings_cls = _make_settings_class(sections)
    try:
        settings = settings_cls(**kwargs)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(loc) for loc in err["loc"])
        raise ConfigError.invalid_value(field, err.get("input"), err["msg"]) from e
    return DeclFeatConfig.model_validate(settings.model_dump())
