from __future__ import annotations

import argparse
from pathlib import Path
import sys

try:
    from dosekit.config import load_settings
    from dosekit.core.errors import DecomposeError
    from dosekit.core.pipeline import DosePipeline
except ModuleNotFoundError:
    # Allows running as: `python scripts/extract_doses.py ...` without installing as a package.
    sys.path.insert(0, str(Path(__file__).resolve().parents[1]))
    from dosekit.config import load_settings  # type: ignore  # noqa: E402
    from dosekit.core.errors import DecomposeError  # type: ignore  # noqa: E402
    from dosekit.core.pipeline import DosePipeline  # type: ignore  # noqa: E402


def _shorten_images(dose: str, limit: int = 80) -> str:
    # base64 data URIs are unreadable in a terminal
    marker = "](data:"
    i = dose.find(marker)
    if i == -1 or len(dose) - i <= limit:
        return dose
    return dose[: i + limit] + "…)"


def main() -> int:
    if hasattr(sys.stdout, "reconfigure"):
        try:
            sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        except Exception:
            pass

    ap = argparse.ArgumentParser()
    ap.add_argument("path", type=str, help="PDF / SVG / DOCX / MD path")
    ap.add_argument("--mindmap", action="store_true", help="treat PDF/DOCX as an indentation outline")
    args = ap.parse_args()

    pipe = DosePipeline.from_settings(load_settings())
    try:
        res = pipe.decompose_file(Path(args.path), mindmap=args.mindmap)
    except (DecomposeError, ValueError, FileNotFoundError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print(f"file={Path(args.path).name} pages={res.page_count} doses={len(res.doses)}")
    if res.warnings:
        print("\nWARNINGS:")
        for w in res.warnings:
            print(f"- {w}")
        print()

    for i, dose in enumerate(res.doses, start=1):
        print(f"\n=== Dose {i} ===\n")
        print(_shorten_images(dose))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
