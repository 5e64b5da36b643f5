"""Design token extraction and export.

Turns a normalized branding dict (see firecrawl.ingest.to_branding_response)
into the token structure stored on a design profile, and renders tokens as
CSS custom properties or a Tailwind theme.
"""

import math
import re
from datetime import datetime, timezone
from typing import Optional

from .colors import normalize_color

SPACING_MULTIPLIERS = [0, 0.25, 0.5, 1, 1.5, 2, 3, 4, 6, 8, 12, 16]

SHADOW_PRESETS = {
    "light": {
        "sm": "0 1px 2px rgba(0, 0, 0, 0.05)",
        "md": "0 4px 6px rgba(0, 0, 0, 0.1)",
        "lg": "0 10px 15px rgba(0, 0, 0, 0.15)",
    },
    "dark": {
        "sm": "0 1px 2px rgba(0, 0, 0, 0.4)",
        "md": "0 4px 6px rgba(0, 0, 0, 0.5)",
        "lg": "0 10px 15px rgba(0, 0, 0, 0.6)",
    },
}

DEFAULT_LINE_HEIGHTS = {"tight": "1.25", "normal": "1.5", "relaxed": "1.75"}

_LEADING_NUMBER = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)')


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _css_number(value: float) -> str:
    # 16.0 prints as "16", 8.5 stays "8.5"
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _parse_leading_float(value: str) -> Optional[float]:
    match = _LEADING_NUMBER.match(value)
    return float(match.group(0)) if match else None


def normalize_font_size(size: Optional[str], fallback: str) -> str:
    """Convert a CSS font size to px.

    px passes through, rem/em are scaled by 16, bare numbers are
    treated as px. Anything unparseable returns the fallback.
    """
    if not size:
        return fallback
    trimmed = str(size).strip().lower()

    if trimmed.endswith("px"):
        return trimmed

    number = _parse_leading_float(trimmed)
    if number is None:
        return fallback

    if trimmed.endswith("rem") or trimmed.endswith("em"):
        return f"{_round_half_up(number * 16)}px"

    return f"{_round_half_up(number)}px"


def generate_spacing_scale(base_unit: float) -> list[int]:
    return [_round_half_up(base_unit * m) for m in SPACING_MULTIPLIERS]


def generate_shadows(scheme: str) -> dict:
    return dict(SHADOW_PRESETS["dark" if scheme == "dark" else "light"])


def extract_design_tokens(branding: dict, source_url: str) -> dict:
    """Build design tokens from a normalized branding response.

    Args:
        branding: Dict with colorScheme, colors, fonts, typography, spacing
            and layout keys, any of which may be missing
        source_url: URL the branding was scraped from

    Returns:
        Token dict with colors, typography, spacing, shadows, layout,
        colorScheme, sourceUrl and extractedAt
    """
    scheme = branding.get("colorScheme") or "light"
    dark = scheme == "dark"

    source_colors = branding.get("colors") or {}
    colors = {
        "primary": normalize_color(source_colors.get("primary"), "#3b82f6"),
        "secondary": normalize_color(source_colors.get("secondary"), "#6366f1"),
        "accent": normalize_color(source_colors.get("accent"), "#f59e0b"),
        "background": normalize_color(
            source_colors.get("background"), "#1a1a1a" if dark else "#ffffff"
        ),
        "textPrimary": normalize_color(
            source_colors.get("textPrimary"), "#ffffff" if dark else "#111827"
        ),
        "textSecondary": normalize_color(
            source_colors.get("textSecondary"), "#a1a1aa" if dark else "#6b7280"
        ),
    }

    if source_colors.get("link"):
        colors["link"] = normalize_color(source_colors["link"], colors["primary"])
    if source_colors.get("success"):
        colors["success"] = normalize_color(source_colors["success"], "#10b981")
    if source_colors.get("warning"):
        colors["warning"] = normalize_color(source_colors["warning"], "#f59e0b")
    if source_colors.get("error"):
        colors["error"] = normalize_color(source_colors["error"], "#ef4444")

    typo = branding.get("typography") or {}
    families = typo.get("fontFamilies") or {}
    sizes = typo.get("fontSizes") or {}
    weights = typo.get("fontWeights") or {}
    fonts = branding.get("fonts") or []
    first_font = fonts[0].get("family") if fonts and isinstance(fonts[0], dict) else None

    typography = {
        "fontFamilies": {
            "primary": families.get("primary") or first_font or "Inter",
            "heading": families.get("heading") or first_font or "Inter",
            "code": families.get("code") or "JetBrains Mono",
        },
        "fontSizes": {
            "h1": normalize_font_size(sizes.get("h1"), "48px"),
            "h2": normalize_font_size(sizes.get("h2"), "36px"),
            "h3": normalize_font_size(sizes.get("h3"), "24px"),
            "h4": "20px",
            "body": normalize_font_size(sizes.get("body"), "16px"),
            "small": "14px",
        },
        "fontWeights": {
            "light": 300,
            "regular": weights.get("regular") or 400,
            "medium": weights.get("medium") or 500,
            "bold": weights.get("bold") or 700,
        },
        "lineHeights": typo.get("lineHeights") or dict(DEFAULT_LINE_HEIGHTS),
    }

    source_spacing = branding.get("spacing") or {}
    base_unit = source_spacing.get("baseUnit") or 8
    spacing = {
        "baseUnit": base_unit,
        "scale": generate_spacing_scale(base_unit),
        "borderRadius": source_spacing.get("borderRadius") or "8px",
    }

    layout = {
        "maxWidth": (branding.get("layout") or {}).get("maxWidth") or "1280px",
        "gridColumns": 12,
        "containerPadding": f"{_css_number(base_unit * 2)}px",
    }

    return {
        "colors": colors,
        "typography": typography,
        "spacing": spacing,
        "shadows": generate_shadows(scheme),
        "layout": layout,
        "colorScheme": scheme,
        "sourceUrl": source_url,
        "extractedAt": datetime.now(timezone.utc).isoformat(),
    }


def _kebab(key: str) -> str:
    return re.sub(r'([A-Z])', r'-\1', key).lower()


def tokens_to_css_variables(tokens: dict) -> str:
    """Render tokens as a :root block of CSS custom properties."""
    lines = [":root {"]

    for key, value in tokens["colors"].items():
        lines.append(f"  --color-{_kebab(key)}: {value};")

    families = tokens["typography"]["fontFamilies"]
    lines.append(f"  --font-primary: '{families['primary']}', sans-serif;")
    lines.append(f"  --font-heading: '{families['heading']}', sans-serif;")
    if families.get("code"):
        lines.append(f"  --font-code: '{families['code']}', monospace;")

    for key, value in tokens["typography"]["fontSizes"].items():
        if value:
            lines.append(f"  --font-size-{key}: {value};")

    for index, value in enumerate(tokens["spacing"]["scale"]):
        lines.append(f"  --space-{index}: {value}px;")
    lines.append(f"  --radius: {tokens['spacing']['borderRadius']};")

    for key, value in (tokens.get("shadows") or {}).items():
        lines.append(f"  --shadow-{key}: {value};")

    lines.append("}")
    return "\n".join(lines)


def tokens_to_tailwind_config(tokens: dict) -> dict:
    """Map tokens onto a Tailwind theme.extend dict."""
    colors = tokens["colors"]
    families = tokens["typography"]["fontFamilies"]

    return {
        "colors": {
            "primary": colors["primary"],
            "secondary": colors["secondary"],
            "accent": colors["accent"],
            "background": colors["background"],
            "foreground": colors["textPrimary"],
            "muted": colors["textSecondary"],
        },
        "fontFamily": {
            "sans": [families["primary"], "sans-serif"],
            "heading": [families["heading"], "sans-serif"],
            "mono": [families.get("code") or "monospace"],
        },
        "fontSize": tokens["typography"]["fontSizes"],
        "borderRadius": {
            "DEFAULT": tokens["spacing"]["borderRadius"],
        },
        "boxShadow": tokens.get("shadows"),
    }
