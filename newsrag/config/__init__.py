"""Configuration module - exports Settings and the YAML config loader."""

from newsrag.config.loader import PublicationConfig, load_config, publication_configs
from newsrag.config.settings import Settings

__all__ = ["PublicationConfig", "Settings", "load_config", "publication_configs"]
