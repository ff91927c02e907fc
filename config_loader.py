"""Configuration loader for the visual-novel slide compiler."""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

try:
    import yaml  # type: ignore
except ModuleNotFoundError as exc:  # pragma: no cover - import guard
    raise RuntimeError(
        "PyYAML is required. Please install it with `pip install pyyaml`."
    ) from exc


DEFAULT_ENTRY_LABEL = "start"
DEFAULT_IMAGE_EXTENSIONS: Tuple[str, ...] = (".png", ".jpg", ".jpeg")


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    # A section with every key commented out loads as None
    value = raw.get(name)
    return value if isinstance(value, dict) else {}


@dataclass
class AppConfig:
    """Wrapper around raw configuration with resolved paths."""

    raw: Dict[str, Any]
    config_path: Optional[Path]
    project_root: Path
    output_dir: Path
    log_file: Path
    image_dir: Path

    def _section(self, name: str) -> Dict[str, Any]:
        return _section(self.raw, name)

    @property
    def logging_level(self) -> str:
        level = (
            self._section("logging").get("level")
            or self._section("logging").get("LEVEL")
            or "INFO"
        )
        return str(level).upper()

    @property
    def entry_label(self) -> str:
        label = self._section("traversal").get("entry_label")
        if isinstance(label, str) and label.strip():
            return label.strip()
        return DEFAULT_ENTRY_LABEL

    @property
    def allow_entry_fallback(self) -> bool:
        return bool(self._section("traversal").get("allow_entry_fallback", False))

    @property
    def image_extensions(self) -> Tuple[str, ...]:
        raw_exts = self._section("assets").get("extensions")
        if not isinstance(raw_exts, (list, tuple)) or not raw_exts:
            return DEFAULT_IMAGE_EXTENSIONS
        normalized = []
        for ext in raw_exts:
            text = str(ext).strip()
            if not text:
                continue
            normalized.append(text if text.startswith(".") else f".{text}")
        return tuple(normalized) or DEFAULT_IMAGE_EXTENSIONS

    @property
    def beamer_theme(self) -> str:
        return str(self._section("render").get("theme") or "default")

    @property
    def deck_title(self) -> Optional[str]:
        title = self._section("render").get("title")
        return str(title).strip() if title else None

    @property
    def deck_author(self) -> Optional[str]:
        author = self._section("render").get("author")
        return str(author).strip() if author else None

    def to_debug_dict(self) -> Dict[str, Any]:
        return {
            "output_dir": str(self.output_dir),
            "log_file": str(self.log_file),
            "image_dir": str(self.image_dir),
            "entry_label": self.entry_label,
            "allow_entry_fallback": self.allow_entry_fallback,
        }

    def dumps(self) -> str:
        """Return a JSON string for diagnostics."""
        return json.dumps(self.to_debug_dict(), ensure_ascii=False, indent=2)


def _build_config(raw: Dict[str, Any], *, root: Path, config_path: Optional[Path]) -> AppConfig:
    output_dir = (root / _section(raw, "output").get("directory", "output")).resolve()
    log_file_name = _section(raw, "logging").get("file", "logs/run.log")
    log_file = (root / log_file_name).resolve()
    image_dir = (root / _section(raw, "assets").get("image_dir", "images")).resolve()

    return AppConfig(
        raw=raw,
        config_path=config_path,
        project_root=root,
        output_dir=output_dir,
        log_file=log_file,
        image_dir=image_dir,
    )


def default_config(project_root: Path | None = None) -> AppConfig:
    """Configuration used when no YAML file is given."""
    root = (project_root or Path.cwd()).resolve()
    return _build_config({}, root=root, config_path=None)


def load_config(path: Path | str, project_root: Path | None = None) -> AppConfig:
    """Load YAML config and resolve key directories."""
    config_path = Path(path).expanduser().resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config root must be a mapping: {config_path}")

    root = project_root.resolve() if project_root else config_path.parent
    return _build_config(raw, root=root, config_path=config_path)
