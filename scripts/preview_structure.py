from __future__ import annotations

import argparse
from pathlib import Path
import sys

try:
    from dosekit.config import load_settings
    from dosekit.core.headings import BREADCRUMB_SEPARATOR
    from dosekit.core.pipeline import DosePipeline
except ModuleNotFoundError:
    sys.path.insert(0, str(Path(__file__).resolve().parents[1]))
    from dosekit.config import load_settings  # type: ignore  # noqa: E402
    from dosekit.core.headings import BREADCRUMB_SEPARATOR  # type: ignore  # noqa: E402
    from dosekit.core.pipeline import DosePipeline  # type: ignore  # noqa: E402


def _split_breadcrumb(dose: str) -> tuple[list[str], str]:
    head, sep, body = dose.partition("\n\n")
    if not sep or "\n" in head:
        return [], dose
    return head.split(BREADCRUMB_SEPARATOR), body


def main() -> int:
    if hasattr(sys.stdout, "reconfigure"):
        try:
            sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        except Exception:
            pass

    ap = argparse.ArgumentParser()
    ap.add_argument("path", type=str, help="PDF / SVG / DOCX / MD path")
    ap.add_argument("--mindmap", action="store_true")
    args = ap.parse_args()

    pipe = DosePipeline.from_settings(load_settings())
    res = pipe.decompose_file(Path(args.path), mindmap=args.mindmap)

    print(f"doses={len(res.doses)} warnings={len(res.warnings)}")
    print()

    # Print each breadcrumb path once, indented by depth, with the doses under it.
    last_path: list[str] = []
    images = 0
    for dose in res.doses:
        path, body = _split_breadcrumb(dose)
        if path != last_path:
            for depth, title in enumerate(path):
                if depth >= len(last_path) or last_path[depth] != title:
                    print(f"{'  ' * depth}- {title}")
            last_path = path
        if body.startswith("!["):
            images += 1
            preview = "[image]"
        else:
            preview = body.replace("\n", " / ")[:70]
        print(f"{'  ' * len(path)}  · {preview}")

    if res.doses:
        biggest = max(res.doses, key=len)
        print()
        print(f"image_doses={images} largest_dose_chars={len(biggest)}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
