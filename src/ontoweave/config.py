"""
Configuration for OntoWeave.

Provides:
- TranslationConfig: naming defaults for graph-to-triples translation
- QueryConfig: default execution budget for the query engine
- OntoWeaveConfig: the combined configuration, loadable from YAML or the
  environment
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ontoweave.terms import DEFAULT_BASE_IRI, DEFAULT_PREFIX

logger = logging.getLogger(__name__)


class ConfigValidationError(Exception):
    """Raised when configuration values are out of range or malformed."""
    pass


@dataclass
class TranslationConfig:
    """Defaults applied when translating an editor graph to triples."""
    base_iri: str = DEFAULT_BASE_IRI
    default_prefix: str = DEFAULT_PREFIX
    language: str = "en"
    include_inferred: bool = False
    namespaces: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_iri": self.base_iri,
            "default_prefix": self.default_prefix,
            "language": self.language,
            "include_inferred": self.include_inferred,
            "namespaces": dict(self.namespaces),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TranslationConfig":
        return cls(
            base_iri=data.get("base_iri", DEFAULT_BASE_IRI),
            default_prefix=data.get("default_prefix", DEFAULT_PREFIX),
            language=data.get("language", "en"),
            include_inferred=bool(data.get("include_inferred", False)),
            namespaces=dict(data.get("namespaces") or {}),
        )


@dataclass
class QueryConfig:
    """Execution budget for graph-pattern queries. None means unlimited."""
    timeout_seconds: Optional[float] = None
    max_solutions: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timeout_seconds": self.timeout_seconds,
            "max_solutions": self.max_solutions,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QueryConfig":
        return cls(
            timeout_seconds=data.get("timeout_seconds"),
            max_solutions=data.get("max_solutions"),
        )


@dataclass
class OntoWeaveConfig:
    """Complete configuration."""
    translation: TranslationConfig = field(default_factory=TranslationConfig)
    query: QueryConfig = field(default_factory=QueryConfig)

    def validate(self) -> None:
        """
        Check value ranges.

        Raises:
            ConfigValidationError: On the first invalid value
        """
        if not self.translation.default_prefix.replace("_", "").replace("-", "").isalnum():
            raise ConfigValidationError(
                f"default_prefix must be a plain name, got {self.translation.default_prefix!r}"
            )
        if not self.translation.base_iri:
            raise ConfigValidationError("base_iri must not be empty")
        if self.query.timeout_seconds is not None and self.query.timeout_seconds <= 0:
            raise ConfigValidationError("timeout_seconds must be positive")
        if self.query.max_solutions is not None and self.query.max_solutions < 1:
            raise ConfigValidationError("max_solutions must be at least 1")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "translation": self.translation.to_dict(),
            "query": self.query.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OntoWeaveConfig":
        config = cls(
            translation=TranslationConfig.from_dict(data.get("translation") or {}),
            query=QueryConfig.from_dict(data.get("query") or {}),
        )
        config.validate()
        return config

    @classmethod
    def from_env(cls) -> "OntoWeaveConfig":
        """
        Build a configuration from environment variables.

        Reads ONTOWEAVE_BASE_IRI, ONTOWEAVE_DEFAULT_PREFIX and
        ONTOWEAVE_QUERY_TIMEOUT (seconds).
        """
        translation = TranslationConfig(
            base_iri=os.getenv("ONTOWEAVE_BASE_IRI", DEFAULT_BASE_IRI),
            default_prefix=os.getenv("ONTOWEAVE_DEFAULT_PREFIX", DEFAULT_PREFIX),
        )
        timeout = os.getenv("ONTOWEAVE_QUERY_TIMEOUT")
        try:
            query = QueryConfig(timeout_seconds=float(timeout) if timeout else None)
        except ValueError:
            raise ConfigValidationError(f"ONTOWEAVE_QUERY_TIMEOUT is not a number: {timeout!r}")
        config = cls(translation=translation, query=query)
        config.validate()
        return config


def load_config(path: Path | str) -> OntoWeaveConfig:
    """
    Load configuration from a YAML file.

    Args:
        path: YAML file with optional "translation" and "query" sections

    Returns:
        Validated configuration
    """
    path = Path(path)
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ConfigValidationError(f"Expected a mapping at the top of {path}")
    config = OntoWeaveConfig.from_dict(data)
    logger.info(f"Loaded configuration from {path}")
    return config


def save_config(config: OntoWeaveConfig, path: Path | str) -> None:
    """Write configuration to a YAML file."""
    path = Path(path)
    path.write_text(
        yaml.dump(config.to_dict(), default_flow_style=False, sort_keys=False),
        encoding="utf-8",
    )
