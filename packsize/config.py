"""Configuration loading for packsize (.packsize.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

CONFIG_FILENAME = ".packsize.yml"

DEFAULT_TIME_BUDGET_MS = 3000
DEFAULT_SEED = 1861946374
DEFAULT_CACHE_CAPACITY = 1 << 30
DEFAULT_IGNORE_FILES = (".packsizeignore",)

SUPPORTED_CODECS = ("xz", "zstd")
SUPPORTED_CHECKSUMS = ("none", "crc32", "crc64", "sha256")

# Maximum-effort level per codec and the worker threads it can actually use.
CODEC_DEFAULTS: Dict[str, Dict[str, int]] = {
    "xz": {"preset": 9, "workers": 1},
    "zstd": {"preset": 22, "workers": 8},
}


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed or is invalid."""


@dataclass
class CompressorSettings:
    """Compression transform options used for every sampling round."""

    codec: str = "xz"
    preset: int = CODEC_DEFAULTS["xz"]["preset"]
    extreme: bool = False
    workers: int = CODEC_DEFAULTS["xz"]["workers"]
    checksum: str = "none"
    queue_depth: int = 16

    def use_codec(self, codec: str) -> None:
        """Switch to ``codec``, resetting preset and workers to its defaults."""
        self.codec = codec
        defaults = CODEC_DEFAULTS.get(codec)
        if defaults is not None:
            self.preset = defaults["preset"]
            self.workers = defaults["workers"]

    def validate(self) -> None:
        if self.codec not in SUPPORTED_CODECS:
            raise ConfigError(
                f"Unsupported codec {self.codec!r}; expected one of {', '.join(SUPPORTED_CODECS)}"
            )
        if self.checksum not in SUPPORTED_CHECKSUMS:
            raise ConfigError(
                f"Unsupported checksum {self.checksum!r}; expected one of {', '.join(SUPPORTED_CHECKSUMS)}"
            )
        if self.codec == "xz" and not 0 <= self.preset <= 9:
            raise ConfigError("xz preset must be between 0 and 9")
        if self.codec == "zstd" and not 1 <= self.preset <= 22:
            raise ConfigError("zstd level must be between 1 and 22")
        if self.workers < 1:
            raise ConfigError("workers must be at least 1")
        if self.queue_depth < 1:
            raise ConfigError("queue_depth must be at least 1")


@dataclass
class PackSizeConfig:
    """Represents the settings defined in .packsize.yml."""

    root: Path
    time_budget_ms: int = DEFAULT_TIME_BUDGET_MS
    seed: int = DEFAULT_SEED
    max_rounds: Optional[int] = None
    separator: bytes = b""
    cache_capacity: int = DEFAULT_CACHE_CAPACITY
    ignore_files: List[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_FILES))
    use_git: bool = False
    exclude_paths: List[str] = field(default_factory=list)
    compressor: CompressorSettings = field(default_factory=CompressorSettings)

    def validate(self) -> None:
        if self.time_budget_ms < 0:
            raise ConfigError("time_budget_ms must not be negative")
        if self.max_rounds is not None and self.max_rounds < 1:
            raise ConfigError("max_rounds must be at least 1 when set")
        if self.cache_capacity < 0:
            raise ConfigError("cache_capacity must not be negative")
        self.compressor.validate()


def load_config(config_path: Path) -> PackSizeConfig:
    """Load configuration from disk, returning defaults when no file exists."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return PackSizeConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = PackSizeConfig(root=root)

    budget = _as_int(data.get("time_budget_ms"))
    if budget is not None:
        config.time_budget_ms = budget
    seed = _as_int(data.get("seed"))
    if seed is not None:
        config.seed = seed
    config.max_rounds = _as_int(data.get("max_rounds"))
    separator = _as_str(data.get("separator"))
    if separator is not None:
        config.separator = separator.encode("utf-8")
    capacity = _as_int(data.get("cache_capacity"))
    if capacity is not None:
        config.cache_capacity = capacity
    if "ignore_files" in data:
        config.ignore_files = _as_str_list(data.get("ignore_files"))
    use_git = _as_bool(data.get("use_git"))
    if use_git is not None:
        config.use_git = use_git
    config.exclude_paths = _as_str_list(data.get("exclude_paths"))

    compressor_data = _as_dict(data.get("compressor"))
    if compressor_data:
        settings = config.compressor
        codec = _as_str(compressor_data.get("codec"))
        if codec is not None:
            settings.use_codec(codec.lower())
        preset = _as_int(compressor_data.get("preset"))
        if preset is not None:
            settings.preset = preset
        extreme = _as_bool(compressor_data.get("extreme"))
        if extreme is not None:
            settings.extreme = extreme
        workers = _as_int(compressor_data.get("workers"))
        if workers is not None:
            settings.workers = workers
        checksum = _as_str(compressor_data.get("checksum"))
        if checksum is not None:
            settings.checksum = checksum.lower()
        depth = _as_int(compressor_data.get("queue_depth"))
        if depth is not None:
            settings.queue_depth = depth

    config.validate()
    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_str_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


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


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None
