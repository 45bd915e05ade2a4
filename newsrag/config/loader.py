"""YAML publication registry loader.

# ─── CONFIGURATION SOURCES ────────────────────────────────────────────
#
#   config/config.yaml  - publication registry checked into the repo
#   .env / environment  - everything else, read by Settings
#
# The YAML file only describes where each publication's stories come from:
#
#   publications:
#     faker:
#       type: faker
#     yle:
#       type: rss
#       feed_url: https://feeds.yle.fi/uutiset/v1/majorHeadlines/YLE_UUTISET.rss
#
# The synthetic ``faker`` publication is always registered.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from newsrag.utils.errors import ConfigurationError

FAKER_PUBLICATION = "faker"


class PublicationConfig(BaseModel):
    """How to reach the content source of one publication."""

    model_config = ConfigDict(frozen=True)

    type: Literal["faker", "rss"]
    feed_url: str | None = None

    @model_validator(mode="after")
    def _rss_needs_feed(self) -> "PublicationConfig":
        if self.type == "rss" and not self.feed_url:
            raise ValueError("rss publications require a feed_url")
        return self


def load_config(path: str = "config/config.yaml") -> dict[str, Any]:
    """Read the YAML configuration file at *path*.

    A missing file yields an empty config, which still registers the
    faker publication through :func:`publication_configs`.

    Raises:
        ConfigurationError: If the file does not hold a mapping.
    """
    config_path = Path(path)
    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        yaml_config = yaml.safe_load(f) or {}

    if not isinstance(yaml_config, dict):
        raise ConfigurationError(f"{path} must contain a mapping at the top level")
    return yaml_config


def publication_configs(config: dict[str, Any]) -> dict[str, PublicationConfig]:
    """Validate the ``publications`` section and add the built-in faker source."""
    raw = config.get("publications") or {}
    if not isinstance(raw, dict):
        raise ConfigurationError("'publications' must be a mapping of name -> settings")

    publications: dict[str, PublicationConfig] = {}
    for name, entry in raw.items():
        try:
            publications[str(name)] = PublicationConfig.model_validate(entry or {})
        except ValidationError as exc:
            raise ConfigurationError(f"invalid publication {name!r}: {exc}") from exc

    publications.setdefault(FAKER_PUBLICATION, PublicationConfig(type="faker"))
    return publications
