"""
Caller-facing entry point that wires:
  upload guard → format adapter → decomposition → event log

Used by:
  - CLI scripts
  - any host application that stores the resulting doses
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..config import DEFAULT_ALLOWED_EXTENSIONS
from .errors import DecomposeError, PasswordProtectedError, UploadRejectedError
from .eventlog import JsonlEventLogger
from .ingestion import SUPPORTED_EXTENSIONS, decompose_bytes
from .models import DecomposeConfig, DecomposeResult
from .text_parser import parse_structured_text
from .utils import sha256_bytes


DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024


@dataclass
class DosePipeline:
    """
    Stateless apart from configuration: every call builds its own heading stack and
    block buffer, so one pipeline can serve concurrent callers.
    """

    cfg: DecomposeConfig = field(default_factory=DecomposeConfig)
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    allowed_extensions: tuple[str, ...] = DEFAULT_ALLOWED_EXTENSIONS
    logger: Optional[JsonlEventLogger] = None

    @classmethod
    def from_settings(cls, settings) -> "DosePipeline":
        return cls(
            cfg=settings.decompose_config(),
            max_upload_bytes=settings.max_upload_bytes,
            allowed_extensions=tuple(settings.allowed_extensions),
            logger=JsonlEventLogger.from_settings(settings),
        )

    def validate_upload(self, file_name: str, size: int) -> str:
        """
        Return the normalized extension, or raise UploadRejectedError.
        """
        ext = Path(file_name).suffix.lower()
        allowed = [e for e in self.allowed_extensions if e in SUPPORTED_EXTENSIONS]
        if ext not in allowed:
            raise UploadRejectedError(
                f"Unsupported file type '{ext or file_name}'. Allowed: {', '.join(allowed)}."
            )
        if size > self.max_upload_bytes:
            limit_mb = self.max_upload_bytes / (1024 * 1024)
            raise UploadRejectedError(f"File is too large ({size} bytes). The limit is {limit_mb:g} MB.")
        return ext

    def decompose_upload(self, data: bytes, file_name: str, mindmap: bool = False) -> DecomposeResult:
        ext = self.validate_upload(file_name, len(data))
        started = time.perf_counter()
        try:
            res = decompose_bytes(data, ext, mindmap=mindmap, cfg=self.cfg)
        except DecomposeError as e:
            self._log(
                "decompose_failed",
                doc_name=file_name,
                extension=ext,
                category="password_protected" if isinstance(e, PasswordProtectedError) else "unreadable",
                error=str(e),
            )
            raise

        self._log(
            "decompose",
            doc_name=file_name,
            doc_sha256=sha256_bytes(data),
            extension=ext,
            mode="mindmap" if res.outline is not None else "doses",
            page_count=res.page_count,
            dose_count=len(res.doses),
            warning_count=len(res.warnings),
            warnings=res.warnings,
            elapsed_ms=int((time.perf_counter() - started) * 1000),
        )
        return res

    def decompose_file(self, path: Path, display_name: Optional[str] = None, mindmap: bool = False) -> DecomposeResult:
        if not path.exists():
            raise FileNotFoundError(str(path))
        return self.decompose_upload(path.read_bytes(), display_name or path.name, mindmap=mindmap)

    def decompose_text(self, text: str) -> list[str]:
        """Typed-in notes or already-extracted outline text."""
        return parse_structured_text(text, split_list_items=self.cfg.split_list_items)

    def reprocess_text(self, edited_text: str) -> list[str]:
        """
        Re-split an edited dose. The host replaces the old dose with these, in order.
        """
        doses = self.decompose_text(edited_text)
        self._log("reprocess", input_chars=len(edited_text or ""), dose_count=len(doses))
        return doses

    def _log(self, event: str, **payload) -> None:
        if self.logger is None:
            return
        self.logger.log(event=event, payload=payload)
