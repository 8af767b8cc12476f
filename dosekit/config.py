from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
import os

from .core.models import DecomposeConfig
from .core.utils import truthy


DEFAULT_ALLOWED_EXTENSIONS: tuple[str, ...] = (".pdf", ".svg", ".docx", ".md")


@dataclass(frozen=True)
class Settings:
    # Heuristics (PDF units unless noted)
    indent_width: float
    left_margin: float
    gap_ratio: float
    max_heading_chars: int
    max_heading_words: int
    split_list_items: bool

    # Upload guard (enforced by the caller layer, not the decomposers)
    max_upload_bytes: int
    allowed_extensions: tuple[str, ...]

    # JSONL event log
    log_enabled: bool
    log_dir: Path
    log_by_doc: bool

    def decompose_config(self) -> DecomposeConfig:
        return DecomposeConfig(
            indent_width=self.indent_width,
            left_margin=self.left_margin,
            gap_ratio=self.gap_ratio,
            max_heading_chars=self.max_heading_chars,
            max_heading_words=self.max_heading_words,
            split_list_items=self.split_list_items,
        )


def _env_float(name: str, default: float, lo: float, hi: float) -> float:
    try:
        value = float(os.getenv(name, str(default)).strip())
    except Exception:
        value = default
    return max(lo, min(hi, value))


def _env_int(name: str, default: int, lo: int, hi: int) -> int:
    try:
        value = int(os.getenv(name, str(default)).strip())
    except Exception:
        value = default
    return max(lo, min(hi, value))


def _parse_extensions(raw: str) -> tuple[str, ...]:
    exts: list[str] = []
    for part in raw.split(","):
        e = part.strip().lower()
        if not e:
            continue
        if not e.startswith("."):
            e = "." + e
        if e not in exts:
            exts.append(e)
    return tuple(exts) or DEFAULT_ALLOWED_EXTENSIONS


def load_settings() -> Settings:
    # Load .env if present (dev-friendly)
    load_dotenv(override=False)

    defaults = DecomposeConfig()

    # Upload ceiling in MB; clamp to avoid accidentally accepting huge files.
    max_upload_mb = _env_float("DOSE_MAX_UPLOAD_MB", 5.0, 0.1, 200.0)

    return Settings(
        indent_width=_env_float("DOSE_INDENT_WIDTH", defaults.indent_width, 1.0, 200.0),
        left_margin=_env_float("DOSE_LEFT_MARGIN", defaults.left_margin, 0.0, 2000.0),
        gap_ratio=_env_float("DOSE_GAP_RATIO", defaults.gap_ratio, 0.0, 10.0),
        max_heading_chars=_env_int("DOSE_MAX_HEADING_CHARS", defaults.max_heading_chars, 3, 1000),
        max_heading_words=_env_int("DOSE_MAX_HEADING_WORDS", defaults.max_heading_words, 1, 200),
        split_list_items=truthy(os.getenv("DOSE_SPLIT_LIST_ITEMS", "0")),
        max_upload_bytes=int(max_upload_mb * 1024 * 1024),
        allowed_extensions=_parse_extensions(os.getenv("DOSE_ALLOWED_EXTENSIONS", ",".join(DEFAULT_ALLOWED_EXTENSIONS))),
        log_enabled=truthy(os.getenv("DOSE_LOG", "")),
        log_dir=Path(os.getenv("DOSE_LOG_DIR", "./data/logs")),
        log_by_doc=truthy(os.getenv("DOSE_LOG_BY_DOC", "1")),
    )
