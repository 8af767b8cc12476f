from __future__ import annotations

import sys
from pathlib import Path


def _setup_utf8() -> None:
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[attr-defined]


def main() -> int:
    _setup_utf8()
    sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

    from dosekit.config import load_settings
    from dosekit.core.errors import DecomposeError
    from dosekit.core.pipeline import DosePipeline

    pipe = DosePipeline.from_settings(load_settings())

    # Provide documents via CLI:
    #   python scripts/smoke_suite.py notes.md deck.pdf map.svg
    paths = [Path(p) for p in sys.argv[1:]]
    if not paths:
        print("Usage: python scripts/smoke_suite.py <doc1> <doc2> ...")
        return 2

    failed = 0
    for p in paths:
        try:
            res = pipe.decompose_file(p, display_name=p.name)
        except (DecomposeError, ValueError, FileNotFoundError) as e:
            print(f"[FAIL] {p.name}: {e}")
            failed += 1
            continue

        # Output contract: strings only, no empty doses.
        bad = [d for d in res.doses if not isinstance(d, str) or not d.strip()]
        if bad:
            print(f"[FAIL] {p.name}: {len(bad)} empty/invalid doses")
            failed += 1
            continue
        if not res.doses and not res.warnings:
            print(f"[FAIL] {p.name}: no doses and no warning explaining why")
            failed += 1
            continue
        print(f"[OK] {p.name}: doses={len(res.doses)} warnings={len(res.warnings)}")

    if failed:
        print(f"SMOKE SUITE FAILED ({failed}/{len(paths)})")
        return 1
    print("SMOKE SUITE PASSED")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
