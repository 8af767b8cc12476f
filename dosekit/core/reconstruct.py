"""
Line and image reconstruction for page-based documents.

Input per page:
  - raw text runs with a baseline origin (PDF space, y grows upward)
  - a content-stream-like op sequence: save / restore / transform / paint_image

Output per page: text lines and image elements in one list, top of page first.
"""
from __future__ import annotations

import base64
import io
import re
from typing import Callable, Iterable, Optional, Sequence

from PIL import Image

from .utils import round_half_up
from .models import ImageElement, PaintOp, PositionedElement, RasterImage, TextElement, TextRun


Matrix = tuple[float, float, float, float, float, float]
ImageResolver = Callable[[object], Optional[RasterImage]]

IDENTITY: Matrix = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

_RE_BOLD_FONT = re.compile(r"bold|heavy|black", re.IGNORECASE)


class UnsupportedImageFormat(ValueError):
    def __init__(self, colorspace: str, length: int, pixels: int) -> None:
        super().__init__(f"unsupported colorspace {colorspace} ({length} bytes for {pixels} pixels)")
        self.colorspace = colorspace


def is_bold_font(font_name: Optional[str]) -> bool:
    return bool(font_name) and _RE_BOLD_FONT.search(font_name or "") is not None


def group_runs_into_lines(runs: Iterable[TextRun], joiner: str = " ") -> list[TextElement]:
    """
    Bucket runs by rounded baseline and join each bucket left-to-right.

    Buckets come out top-to-bottom (descending y). Rows with only whitespace are dropped.
    """
    buckets: dict[int, list[TextRun]] = {}
    for run in runs:
        buckets.setdefault(round_half_up(run.y), []).append(run)

    lines: list[TextElement] = []
    for y in sorted(buckets, reverse=True):
        row = sorted(buckets[y], key=lambda r: r.x)
        text = joiner.join(r.text for r in row)
        if not text.strip():
            continue
        lines.append(
            TextElement(
                text=text,
                x=row[0].x,
                y=float(y),
                height=max((r.height for r in row), default=0.0),
                font_name=row[0].font_name,
            )
        )
    return lines


def compose(m1: Sequence[float], m2: Sequence[float]) -> Matrix:
    """Standard 2x3 affine composition: apply m2 inside the coordinate system m1."""
    a1, b1, c1, d1, e1, f1 = m1
    a2, b2, c2, d2, e2, f2 = m2
    return (
        a1 * a2 + c1 * b2,
        b1 * a2 + d1 * b2,
        a1 * c2 + c1 * d2,
        b1 * c2 + d1 * d2,
        a1 * e2 + c1 * f2 + e1,
        b1 * e2 + d1 * f2 + f1,
    )


def normalize_to_rgba(img: RasterImage) -> bytes:
    """
    Expand a raw pixel buffer to RGBA by looking at its byte length.

    RGB and grayscale get an opaque alpha channel; RGBA passes through.
    """
    data = bytes(img.data)
    pixels = img.width * img.height
    if pixels > 0 and len(data) == pixels * 3:
        out = bytearray(pixels * 4)
        out[0::4] = data[0::3]
        out[1::4] = data[1::3]
        out[2::4] = data[2::3]
        out[3::4] = b"\xff" * pixels
        return bytes(out)
    if pixels > 0 and len(data) == pixels * 4:
        return data
    if pixels > 0 and len(data) == pixels:
        out = bytearray(pixels * 4)
        out[0::4] = data
        out[1::4] = data
        out[2::4] = data
        out[3::4] = b"\xff" * pixels
        return bytes(out)
    raise UnsupportedImageFormat(img.colorspace or "unknown", len(data), pixels)


def rgba_to_data_uri(rgba: bytes, width: int, height: int) -> str:
    im = Image.frombytes("RGBA", (width, height), rgba)
    buf = io.BytesIO()
    im.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def extract_image_elements(
    ops: Iterable[PaintOp],
    resolve: ImageResolver,
    page_number: int,
    warnings: list[str],
) -> list[ImageElement]:
    """
    Walk the op sequence with a transform stack and turn paint_image ops into elements.

    A bad image never aborts the page: it becomes a warning and is skipped.
    """
    stack: list[Matrix] = []
    current: Matrix = IDENTITY
    images: list[ImageElement] = []

    for op in ops:
        if op.op == "save":
            stack.append(current)
        elif op.op == "restore":
            current = stack.pop() if stack else IDENTITY
        elif op.op == "transform":
            current = compose(current, op.args)
        elif op.op == "paint_image":
            ref = op.args[0] if op.args else None
            try:
                raster = resolve(ref)
                if raster is None or not raster.data:
                    continue
                rgba = normalize_to_rgba(raster)
                data_uri = rgba_to_data_uri(rgba, raster.width, raster.height)
            except UnsupportedImageFormat as e:
                warnings.append(
                    f"Could not process an image on page {page_number}: "
                    f"the color format ({e.colorspace}) is not supported."
                )
                continue
            except Exception as e:  # noqa: BLE001
                warnings.append(
                    f"Could not process an image on page {page_number}: "
                    f"the format may be unsupported or the image is corrupt ({e})."
                )
                continue
            images.append(ImageElement(data_uri=data_uri, y=current[5], width=raster.width, height=raster.height))
    return images


def merge_page_elements(
    lines: Sequence[TextElement],
    images: Sequence[ImageElement],
) -> list[PositionedElement]:
    # sorted() is stable: on equal y, text lines stay ahead of images.
    merged: list[PositionedElement] = [*lines, *images]
    return sorted(merged, key=lambda el: -el.y)


def reconstruct_page(
    runs: Iterable[TextRun],
    ops: Iterable[PaintOp],
    resolve: ImageResolver,
    page_number: int,
    warnings: list[str],
) -> list[PositionedElement]:
    lines = group_runs_into_lines(runs)
    images = extract_image_elements(ops, resolve, page_number, warnings)
    return merge_page_elements(lines, images)
