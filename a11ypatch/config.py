from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
try:
    import tomllib
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib

from a11ypatch.patcher import DEFAULT_EXTENSIONS, DEFAULT_SKIP_DIRS

DEFAULT_CONFIG_NAME = "a11ypatch.toml"


@dataclass(slots=True)
class PatchConfig:
    extensions: list[str] = field(default_factory=lambda: DEFAULT_EXTENSIONS.copy())
    skip_dirs: list[str] = field(default_factory=lambda: DEFAULT_SKIP_DIRS.copy())
    max_file_size_kb: int = 1024
    preview_chars: int = 120


@dataclass(slots=True)
class ReportConfig:
    directory: str = "reports"


@dataclass(slots=True)
class Config:
    patch: PatchConfig = field(default_factory=PatchConfig)
    report: ReportConfig = field(default_factory=ReportConfig)


def load_config(path: str | None) -> Config:
    if path is None:
        default = Path(DEFAULT_CONFIG_NAME)
        if not default.exists():
            return Config()
        path = str(default)

    cfg_path = Path(path)
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")

    with cfg_path.open("rb") as fh:
        payload = tomllib.load(fh)

    patch = payload.get("patch", {})
    report = payload.get("report", {})

    config = Config()
    config.patch.extensions = [str(ext) for ext in patch.get("extensions", config.patch.extensions)]
    config.patch.skip_dirs = [str(name) for name in patch.get("skip_dirs", config.patch.skip_dirs)]
    config.patch.max_file_size_kb = int(patch.get("max_file_size_kb", config.patch.max_file_size_kb))
    config.patch.preview_chars = int(patch.get("preview_chars", config.patch.preview_chars))
    config.report.directory = str(report.get("dir", config.report.directory))
    return config


def validate_config(config: Config) -> list[str]:
    errors: list[str] = []
    if not config.patch.extensions:
        errors.append("patch.extensions must be non-empty")
    if config.patch.max_file_size_kb < 0:
        errors.append("patch.max_file_size_kb must be >= 0")
    if config.patch.preview_chars < 0:
        errors.append("patch.preview_chars must be >= 0")
    return errors
