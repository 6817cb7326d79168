"""Pillow drawing for the roulette wheel.

Angles from ``core.roulette`` are radians, clockwise, with the pointer at
the top. Pillow draws pie slices in degrees clockwise from 3 o'clock and
``Image.rotate`` turns counter-clockwise, hence the conversions below.
"""
from __future__ import annotations

import io
import math
from functools import lru_cache
from typing import List, Sequence, Tuple

from PIL import Image, ImageDraw

from core.roulette.animation import frame_angles
from core.roulette.selector import SpinOutcome, index_to_angle_range

WHEEL_SIZE = 384
FPS = 18
PAD_SECONDS = 0.8             # static lead-in (covers client start-up)
TAIL_SECONDS = 0.8            # static hold at end (prevents frame-1 flash)
GIF_COLORS = 64               # fewer colors -> smaller GIF
MAX_UPLOAD_BYTES = 8 * 1024 * 1024
POINTER_ANGLE = -90.0         # 12 o'clock in Pillow degrees
LABEL_CHARS = 14

Layout = Tuple[Tuple[str, float, float], ...]

PALETTE = [
    (33, 150, 243), (144, 202, 249), (63, 81, 181), (159, 168, 218),
    (0, 188, 212), (128, 222, 234), (3, 169, 244), (129, 212, 250),
]


def _short(label: str) -> str:
    label = (label or "").strip()
    return label if len(label) <= LABEL_CHARS else label[: LABEL_CHARS - 3] + "..."


def wheel_layout(items: Sequence[str]) -> Layout:
    """(label, start_deg, end_deg) per segment in Pillow's angle convention."""
    n = len(items)
    out = []
    for i, label in enumerate(items):
        a0, a1 = index_to_angle_range(i, n)
        out.append((_short(label), POINTER_ANGLE + math.degrees(a0), POINTER_ANGLE + math.degrees(a1)))
    return tuple(out)


@lru_cache(maxsize=16)
def _wheel_base_cached(layout: Layout, size: int) -> Image.Image:
    """Cache the wheel with labels; copy() before modifying."""
    return _draw_wheel_base(layout, size)


def _draw_wheel_base(layout: Layout, size: int = WHEEL_SIZE) -> Image.Image:
    """Return a PIL image of the wheel (no pointer), with slice labels."""
    W = H = size
    cx, cy = W // 2, H // 2
    radius = size // 2 - 12
    img = Image.new("RGBA", (W, H), (255, 255, 255, 255))
    draw = ImageDraw.Draw(img)

    if not layout:
        draw.ellipse([cx - radius, cy - radius, cx + radius, cy + radius],
                     fill=(229, 231, 235), outline=(33, 150, 243), width=2)
        text = "No restaurants"
        bbox = draw.textbbox((0, 0), text)
        draw.text((cx - (bbox[2] - bbox[0]) // 2, cy - radius // 2), text, fill=(75, 85, 99))
        return img

    for i, (label, a0, a1) in enumerate(layout):
        color = PALETTE[i % len(PALETTE)]
        if len(layout) == 1:
            draw.ellipse([cx - radius, cy - radius, cx + radius, cy + radius],
                         fill=color, outline=(33, 150, 243), width=2)
        else:
            draw.pieslice([cx - radius, cy - radius, cx + radius, cy + radius],
                          a0, a1, fill=color, outline=(33, 150, 243), width=2)

        mid = math.radians((a0 + a1) / 2)
        tx = cx + int(math.cos(mid) * (radius * 0.65))
        ty = cy + int(math.sin(mid) * (radius * 0.65))
        if not label:
            continue
        bbox = draw.textbbox((0, 0), label)
        tw, th = bbox[2] - bbox[0], bbox[3] - bbox[1]
        draw.text((tx - tw // 2, ty - th // 2), label, fill=(0, 0, 0))

    # center hub
    draw.ellipse([cx - 14, cy - 14, cx + 14, cy + 14], fill=(250, 250, 250), outline=(0, 0, 0))
    return img


def _draw_pointer_pointing_down(img: Image.Image):
    """Draw a pointer triangle at the top that POINTS DOWN into the wheel."""
    draw = ImageDraw.Draw(img)
    W, H = img.size
    cx, cy = W // 2, H // 2
    radius = min(W, H) // 2 - 12
    pointer = [
        (cx - 12, cy - radius - 10),  # left base (above rim)
        (cx + 12, cy - radius - 10),  # right base (above rim)
        (cx,      cy - radius + 18),  # apex (below rim) -> points DOWN
    ]
    draw.polygon(pointer, fill=(239, 68, 68))


def _frame(base: Image.Image, rotation: float) -> Image.Image:
    size = base.size[0]
    # Image.rotate is counter-clockwise; wheel rotation is clockwise
    frame = base.rotate(-math.degrees(rotation), resample=Image.BICUBIC, expand=False,
                        center=(size // 2, size // 2), fillcolor=(255, 255, 255))
    _draw_pointer_pointing_down(frame)
    return frame


def render_wheel_frame(items: Sequence[str], rotation: float = 0.0, size: int = WHEEL_SIZE) -> Image.Image:
    base = _wheel_base_cached(wheel_layout(items), size).copy()
    return _frame(base, rotation)


def render_wheel_png(items: Sequence[str], rotation: float = 0.0, size: int = WHEEL_SIZE) -> io.BytesIO:
    buf = io.BytesIO()
    render_wheel_frame(items, rotation, size).save(buf, format="PNG")
    buf.seek(0)
    return buf


def render_resting_png(items: Sequence[str], outcome: SpinOutcome, size: int = WHEEL_SIZE) -> io.BytesIO:
    """Settled wheel for ``outcome``; depends on the outcome only, never on history."""
    return render_wheel_png(items, outcome.resting_angle, size)


def render_spin_gif(
    items: Sequence[str],
    start: float,
    end: float,
    *,
    size: int = WHEEL_SIZE,
    duration_sec: float = 3.0,
    pad_sec: float = PAD_SECONDS,
    tail_sec: float = TAIL_SECONDS,
    fps: int = FPS,
) -> io.BytesIO:
    base = _wheel_base_cached(wheel_layout(items), size).copy()
    spin_frames = max(2, int(fps * duration_sec))
    angles: List[float] = (
        [start] * int(fps * pad_sec)
        + frame_angles(start, end, spin_frames)
        + [end] * int(fps * tail_sec)
    )

    frames: List[Image.Image] = []
    for angle in angles:
        frame = _frame(base, angle).convert("RGBA")
        frames.append(frame.convert("P", palette=Image.ADAPTIVE, colors=GIF_COLORS))

    buf = io.BytesIO()
    frames[0].save(
        buf, format="GIF", save_all=True, append_images=frames[1:],
        duration=int(1000 / fps), loop=0, disposal=2, optimize=True
    )
    buf.seek(0)
    return buf
