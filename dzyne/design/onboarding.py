"""Build a complete design profile from an onboarding palette and font pair."""

from ..errors import ValidationError
from .colors import adjust_opacity, is_valid_hex

REQUIRED_COLORS = ("primary", "secondary", "accent", "background", "text")

# Modular 1.333 scale: size/line-height
TYPE_SCALE = {
    "xs": "0.75rem/1.4",
    "sm": "0.875rem/1.5",
    "base": "1rem/1.6",
    "lg": "1.125rem/1.5",
    "xl": "1.333rem/1.4",
    "2xl": "1.777rem/1.3",
    "3xl": "2.369rem/1.2",
    "4xl": "3.157rem/1.15",
}

RADIUS = {"sm": "4px", "md": "6px", "lg": "8px", "xl": "12px", "full": "9999px"}


def _validate_selection(colors: dict, typography: dict) -> None:
    missing = [key for key in REQUIRED_COLORS if not colors.get(key)]
    if missing:
        raise ValidationError(f"Missing colors: {', '.join(missing)}")
    invalid = [key for key in REQUIRED_COLORS if not is_valid_hex(colors[key])]
    if invalid:
        raise ValidationError(f"Colors must be hex values: {', '.join(invalid)}")
    if not typography.get("heading") or not typography.get("body"):
        raise ValidationError("Typography needs both a heading and a body font")


def _shadows(primary: str) -> dict:
    return {
        "sm": f"0 2px 8px {adjust_opacity(primary, 0.06)}",
        "md": f"0 4px 16px {adjust_opacity(primary, 0.08)}",
        "lg": f"0 8px 32px {adjust_opacity(primary, 0.1)}",
        "xl": f"0 16px 48px {adjust_opacity(primary, 0.12)}",
    }


def _build_tokens(colors: dict, typography: dict) -> dict:
    primary, text = colors["primary"], colors["text"]
    return {
        "colors": {
            "primary": primary,
            "secondary": colors["secondary"],
            "accent": colors["accent"],
            "background": colors["background"],
            "surface": colors["background"],
            "text": {
                "primary": text,
                "secondary": adjust_opacity(text, 0.7),
                "muted": adjust_opacity(text, 0.5),
            },
            "border": adjust_opacity(primary, 0.15),
            "error": "#DC3545",
            "success": "#28A745",
        },
        "typography": {
            "fontFamily": {
                "heading": typography["heading"],
                "body": typography["body"],
                "mono": "JetBrains Mono",
            },
            "scale": dict(TYPE_SCALE),
        },
        "spacing": {"unit": "8px", "scale": [0, 1, 2, 3, 4, 5, 6, 8, 10, 12, 16, 20, 24]},
        "borders": {
            "radius": dict(RADIUS),
            "width": {"default": "1px", "thick": "2px"},
        },
        "shadows": _shadows(primary),
        "effects": {"blur": "8px", "opacity": {}},
    }


def _build_css_variables(colors: dict, typography: dict) -> str:
    primary, text = colors["primary"], colors["text"]
    shadows = _shadows(primary)
    return "\n".join([
        ":root {",
        f"  --color-primary: {primary};",
        f"  --color-secondary: {colors['secondary']};",
        f"  --color-accent: {colors['accent']};",
        f"  --color-background: {colors['background']};",
        f"  --color-text: {text};",
        f"  --color-text-secondary: {adjust_opacity(text, 0.7)};",
        f"  --color-text-muted: {adjust_opacity(text, 0.5)};",
        f"  --color-border: {adjust_opacity(primary, 0.15)};",
        f"  --color-border-strong: {adjust_opacity(primary, 0.3)};",
        f"  --font-heading: '{typography['heading']}', serif;",
        f"  --font-body: '{typography['body']}', sans-serif;",
        "  --font-mono: 'JetBrains Mono', monospace;",
        "  --radius-sm: 4px;",
        "  --radius-md: 6px;",
        "  --radius-lg: 8px;",
        f"  --shadow-sm: {shadows['sm']};",
        f"  --shadow-md: {shadows['md']};",
        f"  --shadow-lg: {shadows['lg']};",
        "}",
    ])


def _build_tailwind_config(colors: dict, typography: dict) -> dict:
    return {
        "colors": {
            "primary": colors["primary"],
            "secondary": colors["secondary"],
            "accent": colors["accent"],
            "background": colors["background"],
            "text-primary": colors["text"],
        },
        "fontFamily": {
            "heading": [typography["heading"], "serif"],
            "body": [typography["body"], "sans-serif"],
            "mono": ["JetBrains Mono", "monospace"],
        },
        "borderRadius": {key: RADIUS[key] for key in ("sm", "md", "lg", "xl")},
    }


def _build_components(colors: dict, typography: dict) -> dict:
    primary, secondary = colors["primary"], colors["secondary"]
    heading = typography["heading"]
    return {
        "button": {
            "primary": {
                "classes": f"bg-[{primary}] text-white font-semibold rounded-md px-6 py-3",
                "css": f"background: {primary}; color: white; font-weight: 600; border-radius: 6px; padding: 0.75rem 1.5rem;",
            },
            "secondary": {
                "classes": f"bg-[{secondary}] text-white font-semibold rounded-md px-6 py-3",
                "css": f"background: {secondary}; color: white; font-weight: 600; border-radius: 6px; padding: 0.75rem 1.5rem;",
            },
            "ghost": {
                "classes": f"border border-[{primary}]/20 text-[{primary}] font-medium rounded-md px-6 py-3",
                "css": f"border: 1px solid {primary}; color: {primary}; font-weight: 500; border-radius: 6px;",
            },
        },
        "card": {
            "default": {
                "classes": f"bg-white border border-[{primary}]/10 rounded-md p-6 shadow-sm",
                "css": f"background: white; border: 1px solid {adjust_opacity(primary, 0.1)}; border-radius: 6px; padding: 1.5rem;",
            },
        },
        "input": {
            "default": {
                "classes": f"bg-white border border-[{primary}]/15 rounded-md px-4 py-2.5 text-base",
                "css": f"background: white; border: 1.5px solid {adjust_opacity(primary, 0.15)}; border-radius: 6px; padding: 0.625rem 1rem;",
            },
        },
        "heading": {
            "h1": {
                "classes": "font-serif text-5xl font-bold tracking-tight",
                "css": f"font-family: '{heading}', serif; font-size: 3.157rem; font-weight: 700; letter-spacing: -0.03em;",
            },
            "h2": {
                "classes": "font-serif text-4xl font-bold tracking-tight",
                "css": f"font-family: '{heading}', serif; font-size: 2.369rem; font-weight: 700; letter-spacing: -0.03em;",
            },
            "h3": {
                "classes": "font-serif text-3xl font-bold",
                "css": f"font-family: '{heading}', serif; font-size: 1.777rem; font-weight: 700;",
            },
        },
    }


def build_profile_from_selection(colors: dict, typography: dict) -> dict:
    """Build tokens, components, Tailwind config and CSS variables.

    Args:
        colors: primary, secondary, accent, background and text as hex
        typography: heading and body font family names

    Returns:
        Dict with tokens, components, tailwind_config and css_variables,
        ready for DesignProfileRepository.save

    Raises:
        ValidationError: If a color or font is missing or malformed
    """
    _validate_selection(colors, typography)
    return {
        "tokens": _build_tokens(colors, typography),
        "components": _build_components(colors, typography),
        "tailwind_config": _build_tailwind_config(colors, typography),
        "css_variables": _build_css_variables(colors, typography),
    }
