from __future__ import annotations

import json
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from .utils import truthy


def _safe_slug(name: str, *, max_len: int = 80) -> str:
    """
    Create a filesystem-safe slug from a filename for per-doc logs.
    """
    out: list[str] = []
    last_us = False
    for ch in (name or "").strip():
        if ch.isalnum():
            out.append(ch)
            last_us = False
        elif not last_us:
            out.append("_")
            last_us = True
    slug = "".join(out).strip("_") or "unknown"
    return slug[:max_len]


def _utc_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class JsonlEventLogger:
    """
    Append-only JSONL log of decomposition runs.

    OFF unless DOSE_LOG is set; build it with from_env() or from_settings().
    Dose bodies are never logged (they can carry base64 images), only counts.
    """

    log_dir: Path
    by_doc: bool = True
    max_text_chars: int = 2000

    def _write_line(self, path: Path, payload: dict[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(payload, ensure_ascii=False) + "\n")

    def log(self, *, event: str, payload: dict[str, Any]) -> None:
        rec: dict[str, Any] = {"ts": _utc_iso(), "event": event, **(payload or {})}

        for k, v in list(rec.items()):
            if isinstance(v, str) and len(v) > self.max_text_chars:
                rec[k] = v[: self.max_text_chars] + "…"

        day = datetime.now(timezone.utc).strftime("%Y%m%d")
        self._write_line(self.log_dir / f"decompose_{day}.jsonl", rec)

        if self.by_doc:
            doc_name = str(rec.get("doc_name") or "").strip()
            if doc_name:
                self._write_line(self.log_dir / "by_doc" / f"{_safe_slug(doc_name)}.jsonl", rec)

    @classmethod
    def from_env(cls) -> Optional["JsonlEventLogger"]:
        if not truthy(os.getenv("DOSE_LOG", "")):
            return None
        log_dir = Path(os.getenv("DOSE_LOG_DIR", "./data/logs")).resolve()
        by_doc = truthy(os.getenv("DOSE_LOG_BY_DOC", "1"))
        return cls(log_dir=log_dir, by_doc=by_doc)

    @classmethod
    def from_settings(cls, settings) -> Optional["JsonlEventLogger"]:
        if not settings.log_enabled:
            return None
        return cls(log_dir=Path(settings.log_dir).resolve(), by_doc=settings.log_by_doc)
