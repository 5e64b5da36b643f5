"""Color helpers for normalizing scraped brand colors."""

import re

HEX_PATTERN = re.compile(r'^#([0-9A-Fa-f]{3}|[0-9A-Fa-f]{6}|[0-9A-Fa-f]{8})$')
RGB_PATTERN = re.compile(r'rgb\((\d+),\s*(\d+),\s*(\d+)\)')


def is_valid_hex(color: str) -> bool:
    return bool(color) and bool(HEX_PATTERN.match(color))


def normalize_color(color: str, fallback: str) -> str:
    """Return a #rrggbb string for a hex or rgb() color, else the fallback.

    Three-digit hex is expanded and an alpha channel is dropped.
    """
    if not color:
        return fallback
    trimmed = color.strip()

    if is_valid_hex(trimmed):
        if len(trimmed) == 4:
            return "#" + "".join(ch * 2 for ch in trimmed[1:])
        return trimmed[:7]

    match = RGB_PATTERN.search(trimmed)
    if match:
        return "#" + "".join(f"{int(part):02x}" for part in match.groups())

    return fallback


def hex_to_rgb(color: str) -> tuple[int, int, int]:
    value = normalize_color(color, "#000000").lstrip("#")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def adjust_opacity(color: str, opacity: float) -> str:
    """Render a hex color as rgba() with the given alpha."""
    r, g, b = hex_to_rgb(color)
    return f"rgba({r}, {g}, {b}, {opacity})"
