"""Configuration classes for I5 batch validation.

This module provides configuration objects for the validating parser and the
batch runner, enabling control over parser features, concurrency and report
output.
"""

import json
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


class CompressionKind(Enum):
    """Compression wrappers an input file may be delivered in."""

    NONE = "none"
    BZIP2 = "bzip2"
    GZIP = "gzip"
    XZ = "xz"

    @classmethod
    def from_name(cls, name: str) -> "CompressionKind":
        """Look up a compression kind by its command-line name.

        Raises:
            ValueError: If the name is not one of none, bzip2, gzip, xz
        """
        for kind in cls:
            if kind.value == name:
                return kind
        valid = ", ".join(kind.value for kind in cls)
        raise ValueError(f"compression must be one of {valid}, got {name!r}")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ParserConfig:
    """Feature set of the DTD-validating parser.

    Thread-safe due to frozen dataclass implementation; one instance is shared
    by every worker of a batch.
    """

    dtd_validation: bool = True
    load_dtd: bool = True          # internal and external subset, parameter entities
    resolve_entities: bool = True  # external general entities, expanded in the tree
    attribute_defaults: bool = True
    xinclude: bool = True
    no_network: bool = False
    huge_tree: bool = True

    # Bytes pushed into the parser per step in SAX mode
    chunk_size: int = 64 * 1024

    def __post_init__(self) -> None:
        """Validate parser configuration."""
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        if self.dtd_validation and not self.load_dtd:
            raise ValueError("dtd_validation requires load_dtd")

    def parser_options(self) -> Dict[str, Any]:
        """Keyword arguments for ``lxml.etree.XMLParser``."""
        return {
            "dtd_validation": self.dtd_validation,
            "load_dtd": self.load_dtd,
            "resolve_entities": self.resolve_entities,
            "attribute_defaults": self.attribute_defaults,
            "no_network": self.no_network,
            "huge_tree": self.huge_tree,
        }


@dataclass
class RunnerConfig:
    """Configuration of one batch validation run."""

    input_files: List[Path] = field(default_factory=list)
    parallel: bool = False
    use_dom: bool = False
    keep_record: bool = False
    report_path: Path = Path("i5validation.json")
    compression: CompressionKind = CompressionKind.NONE
    max_workers: Optional[int] = None
    parser: ParserConfig = field(default_factory=ParserConfig)

    def __post_init__(self) -> None:
        """Validate runner configuration."""
        try:
            self.input_files = [Path(path) for path in self.input_files]
            self.report_path = Path(self.report_path)
            if isinstance(self.compression, str):
                self.compression = CompressionKind.from_name(self.compression)
            if isinstance(self.parser, dict):
                self.parser = ParserConfig(**self.parser)
            if self.max_workers is not None and self.max_workers <= 0:
                raise ValueError("max_workers must be > 0 or None")
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e

    def override(self, **kwargs: Any) -> "RunnerConfig":
        """Create a new configuration with the given fields replaced.

        ``None`` values are ignored so that unset command-line options leave the
        configured value in place.
        """
        changes = {key: value for key, value in kwargs.items() if value is not None}
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a JSON-compatible dictionary."""
        return {
            "input_files": [str(path) for path in self.input_files],
            "parallel": self.parallel,
            "use_dom": self.use_dom,
            "keep_record": self.keep_record,
            "report_path": str(self.report_path),
            "compression": self.compression.value,
            "max_workers": self.max_workers,
            "parser": {f.name: getattr(self.parser, f.name) for f in fields(self.parser)},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunnerConfig":
        """Create configuration from a dictionary.

        Raises:
            ConfigValidationError: On unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration keys: {', '.join(unknown)}",
                field_name=unknown[0],
                suggestions=sorted(known),
            )
        return cls(**data)

    @classmethod
    def from_file(cls, config_path: Path) -> "RunnerConfig":
        """Load configuration from a JSON file.

        Raises:
            ConfigError: If the file cannot be read or parsed
        """
        try:
            with Path(config_path).open(encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigError(f"Could not load config file {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {config_path} must contain a JSON object")
        return cls.from_dict(data)
