"""Configuration loading for symdoc (.symdoc.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .errors import SymdocError
from .models import Language

CONFIG_FILENAME = ".symdoc.yml"

TEST_CALLBACK_POLICIES = ("include", "suppress")
OUTPUT_FORMATS = ("json", "yaml")

DEFAULT_TEST_FUNCTIONS = (
    "describe",
    "context",
    "suite",
    "it",
    "test",
    "specify",
    "before",
    "beforeEach",
    "after",
    "afterEach",
    "beforeAll",
    "afterAll",
)


class ConfigError(SymdocError):
    """Raised when the configuration file cannot be parsed or holds invalid values."""


@dataclass
class ExtractorConfig:
    """Extraction policy knobs."""

    test_callbacks: str = "include"
    test_functions: List[str] = field(default_factory=lambda: list(DEFAULT_TEST_FUNCTIONS))
    max_workers: Optional[int] = None

    @property
    def suppress_test_callbacks(self) -> bool:
        return self.test_callbacks == "suppress"

    def is_test_callee(self, callee: Optional[str]) -> bool:
        """Return True when ``callee`` (e.g. ``it.only``) names a test-framework call."""
        if not callee:
            return False
        return callee.split(".", 1)[0] in self.test_functions


@dataclass
class OutputConfig:
    """Serialization settings for extracted results."""

    format: str = "json"
    indent: int = 2


@dataclass
class SymdocConfig:
    """Represents the settings defined in .symdoc.yml."""

    root: Path
    extractor: ExtractorConfig = field(default_factory=ExtractorConfig)
    languages: Dict[str, Language] = field(default_factory=dict)
    exclude_paths: List[str] = field(default_factory=list)
    output: OutputConfig = field(default_factory=OutputConfig)


def load_config(config_path: Path) -> SymdocConfig:
    """Load configuration from disk; a missing file yields defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return SymdocConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    extractor = ExtractorConfig()
    extractor_data = _as_dict(data.get("extractor"))
    if extractor_data:
        policy = _as_str(extractor_data.get("test_callbacks"))
        if policy is not None:
            policy = policy.strip().lower()
            if policy not in TEST_CALLBACK_POLICIES:
                allowed = ", ".join(TEST_CALLBACK_POLICIES)
                raise ConfigError(f"extractor.test_callbacks must be one of {allowed}, got '{policy}'")
            extractor.test_callbacks = policy
        if "test_functions" in extractor_data:
            extractor.test_functions = _as_str_list(extractor_data.get("test_functions"))
        if extractor_data.get("max_workers") is not None:
            workers = _as_int(extractor_data.get("max_workers"))
            if workers is None or workers < 1:
                raise ConfigError("extractor.max_workers must be a positive integer")
            extractor.max_workers = workers

    languages: Dict[str, Language] = {}
    for suffix, tag in _as_dict(data.get("languages")).items():
        key = str(suffix).lower()
        if not key.startswith("."):
            key = f".{key}"
        try:
            languages[key] = Language(str(tag).lower())
        except ValueError:
            raise ConfigError(f"Unknown language '{tag}' for suffix '{suffix}'") from None

    output = OutputConfig()
    output_data = _as_dict(data.get("output"))
    if output_data:
        fmt = _as_str(output_data.get("format"))
        if fmt is not None:
            fmt = fmt.strip().lower()
            if fmt not in OUTPUT_FORMATS:
                raise ConfigError(f"output.format must be one of {', '.join(OUTPUT_FORMATS)}, got '{fmt}'")
            output.format = fmt
        if output_data.get("indent") is not None:
            indent = _as_int(output_data.get("indent"))
            if indent is None or indent < 0:
                raise ConfigError("output.indent must be a non-negative integer")
            output.indent = indent

    return SymdocConfig(
        root=root,
        extractor=extractor,
        languages=languages,
        exclude_paths=_as_str_list(data.get("exclude_paths")),
        output=output,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_TEST_FUNCTIONS",
    "ExtractorConfig",
    "OutputConfig",
    "SymdocConfig",
    "load_config",
]
