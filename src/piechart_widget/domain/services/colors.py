from __future__ import annotations

import numpy as np

_MAX_SHIFT = 50.0


def normalize_color(color: str) -> str:
    color = color.strip().lstrip("#")
    if len(color) != 6:
        raise ValueError(f"invalid color {color!r}")
    int(color, 16)
    return f"#{color.upper()}"


def color_variations(color: str, count: int) -> list[str]:
    """Оттенки базового цвета от тёмного к светлому, по одному на элемент."""
    base = normalize_color(color)
    if count <= 1:
        return [base]

    shifts = list(np.linspace(-_MAX_SHIFT, _MAX_SHIFT, count + 1))
    while len(shifts) > count:
        if len(shifts) % 2:
            shifts.pop(0)
        else:
            shifts.pop()

    rgb = np.array([int(base[i : i + 2], 16) for i in (1, 3, 5)], dtype=float)
    variations = []
    for shift in shifts:
        channels = np.clip(rgb + (255.0 - rgb) * shift / 100.0, 0, 255).round().astype(int)
        variations.append("#" + "".join(f"{int(channel):02X}" for channel in channels))
    return variations
