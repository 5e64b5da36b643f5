"""Design language presets used by onboarding and typography pairing."""

from dataclasses import asdict, dataclass, field


@dataclass
class FontPairing:
    id: str
    heading: str
    body: str
    heading_class: str
    body_class: str
    reason: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ColorPalette:
    name: str
    colors: dict


@dataclass
class DesignLanguage:
    """A named design direction with curated palettes and type."""

    id: str
    label: str
    subtitle: str
    description: str
    palettes: list[ColorPalette] = field(default_factory=list)
    font_pairings: list[FontPairing] = field(default_factory=list)
    border_radius: dict = field(default_factory=dict)
    shadow_style: str = "none"
    spacing_density: str = "balanced"
    layout_preference: str = "structured"
    animation_intensity: str = "subtle"
    image_shape: str = "sharp-crop"

    def to_dict(self) -> dict:
        return asdict(self)


def _palette(name, primary, secondary, accent, background, text) -> ColorPalette:
    return ColorPalette(name, {
        "primary": primary,
        "secondary": secondary,
        "accent": accent,
        "background": background,
        "text": text,
    })


DESIGN_LANGUAGES: dict[str, DesignLanguage] = {
    "corporate": DesignLanguage(
        id="corporate",
        label="Corporate",
        subtitle="Professional & trustworthy",
        description="Clean lines, structured grids, and restrained color. Dense but organized layouts with subtle hierarchy.",
        palettes=[
            _palette("Navy Trust", "#1B365D", "#2C5F7C", "#C5A55A", "#F7F5F2", "#1A1A1A"),
            _palette("Steel Blue", "#2D4059", "#5C7A99", "#FF6B35", "#FAFAFA", "#1A1A1A"),
            _palette("Forest Authority", "#1D3C34", "#306E5E", "#D4A574", "#F5F5F0", "#1A1A1A"),
            _palette("Iron Gray", "#2E3440", "#4C566A", "#88C0D0", "#F8F9FA", "#2E3440"),
            _palette("Slate Professional", "#334155", "#64748B", "#0EA5E9", "#F8FAFC", "#0F172A"),
            _palette("Deep Teal", "#115E59", "#2DD4BF", "#F59E0B", "#F0FDFA", "#134E4A"),
        ],
        font_pairings=[
            FontPairing("inter-inter", "Inter", "Inter", "sans-serif", "sans-serif",
                        "Geometric precision reads as reliable and professional. One font family for maximum consistency."),
            FontPairing("playfair-source", "Playfair Display", "Source Sans 3", "serif", "sans-serif",
                        "The transitional serif adds gravitas to headlines while the humanist sans keeps body text approachable."),
            FontPairing("dm-serif-dm-sans", "DM Serif Display", "DM Sans", "serif", "sans-serif",
                        "Same type family ensures optical harmony. The serif display adds distinction without clashing."),
        ],
        border_radius={"sm": "4px", "md": "6px", "lg": "8px", "full": "9999px"},
        shadow_style="subtle",
        spacing_density="tight",
        layout_preference="structured",
        animation_intensity="subtle",
        image_shape="sharp-crop",
    ),
    "playful": DesignLanguage(
        id="playful",
        label="Playful",
        subtitle="Friendly & approachable",
        description="Rounded shapes, bright colors, and generous spacing. Everything feels warm, inviting, and slightly whimsical.",
        palettes=[
            _palette("Tropical", "#FF6B6B", "#4ECDC4", "#FFE66D", "#F7FFF7", "#2D3436"),
            _palette("Sunset Pop", "#FF6719", "#F2B245", "#CAC5F9", "#FDFBF7", "#1A1A1A"),
            _palette("Berry Fizz", "#E84393", "#6C5CE7", "#00CEC9", "#FFF8F0", "#2D3436"),
            _palette("Coral Reef", "#FF7979", "#7ED6DF", "#F9CA24", "#FFFDF7", "#2C3A47"),
            _palette("Lavender Dream", "#A29BFE", "#FD79A8", "#55EFC4", "#FFF8FC", "#2D3436"),
            _palette("Citrus Garden", "#FDCB6E", "#E17055", "#00B894", "#FEFFFE", "#2D3436"),
        ],
        font_pairings=[
            FontPairing("nunito-nunito", "Nunito", "Nunito", "sans-serif", "sans-serif",
                        "Rounded terminals feel warm and inviting. The soft geometry reads as friendly and non-intimidating."),
            FontPairing("fredoka-dm-sans", "Fredoka", "DM Sans", "sans-serif", "sans-serif",
                        "Fredoka's rounded display weight grabs attention with personality. DM Sans keeps body text clean and readable."),
            FontPairing("space-grotesk-inter", "Space Grotesk", "Inter", "sans-serif", "sans-serif",
                        "Space Grotesk has character without being novelty. Paired with Inter for functional body text."),
        ],
        border_radius={"sm": "8px", "md": "12px", "lg": "16px", "full": "9999px"},
        shadow_style="soft",
        spacing_density="generous",
        layout_preference="flowing",
        animation_intensity="bouncy",
        image_shape="rounded",
    ),
    "editorial": DesignLanguage(
        id="editorial",
        label="Editorial",
        subtitle="Sophisticated & considered",
        description="Strong typography hierarchy, generous whitespace, and restrained color. Content-first with intentional visual rhythm.",
        palettes=[
            _palette("Classic Ink", "#1A1A1A", "#6B6B6B", "#C5A55A", "#FDFBF7", "#1A1A1A"),
            _palette("Warm Mono", "#2C2C2C", "#8B8580", "#B85C38", "#F5F0E8", "#1A1A1A"),
            _palette("Green Leaf", "#306E5E", "#4A8E7A", "#FF6719", "#FDFBF7", "#1A1A1A"),
            _palette("Burgundy Press", "#722F37", "#A85751", "#D4A574", "#FBF8F4", "#2C1810"),
            _palette("Midnight Olive", "#3D405B", "#81B29A", "#E07A5F", "#F4F1DE", "#3D405B"),
            _palette("Charcoal Sage", "#2F3E46", "#84A98C", "#CAD2C5", "#F8FAF8", "#2F3E46"),
        ],
        font_pairings=[
            FontPairing("fraunces-source", "Fraunces", "Source Sans 3", "serif", "sans-serif",
                        "Fraunces is an old-style soft serif with optical sizing, more expressive at large sizes. Source Sans keeps body text humanist and warm."),
            FontPairing("playfair-lato", "Playfair Display", "Lato", "serif", "sans-serif",
                        "High-contrast display serif for editorial authority. Lato's warmth prevents the pairing from feeling cold."),
            FontPairing("literata-inter", "Literata", "Inter", "serif", "sans-serif",
                        "Literata was designed for long-form reading. Paired with Inter for UI elements in a content-first combination."),
        ],
        border_radius={"sm": "2px", "md": "4px", "lg": "6px", "full": "9999px"},
        shadow_style="none",
        spacing_density="generous",
        layout_preference="flowing",
        animation_intensity="subtle",
        image_shape="sharp-crop",
    ),
    "minimal": DesignLanguage(
        id="minimal",
        label="Minimal",
        subtitle="Clean & essential",
        description="Nothing extra. Maximum whitespace, near-monochrome palette, and precision typography. Let the content speak.",
        palettes=[
            _palette("Pure", "#111111", "#888888", "#0066FF", "#FFFFFF", "#111111"),
            _palette("Warm Minimal", "#1A1A1A", "#999999", "#FF4F00", "#FAFAF8", "#1A1A1A"),
            _palette("Cool Gray", "#18181B", "#71717A", "#22C55E", "#FAFAFA", "#18181B"),
            _palette("Off-White", "#0A0A0A", "#737373", "#3B82F6", "#FAFAF9", "#171717"),
            _palette("Stone", "#1C1917", "#78716C", "#DC2626", "#FAFAF9", "#1C1917"),
            _palette("Zinc", "#18181B", "#A1A1AA", "#8B5CF6", "#FAFAFA", "#09090B"),
        ],
        font_pairings=[
            FontPairing("inter-inter-m", "Inter", "Inter", "sans-serif", "sans-serif",
                        "Pure minimalism. One font, varied weights. Let the content and whitespace do the talking."),
            FontPairing("geist-geist", "Geist", "Geist", "sans-serif", "sans-serif",
                        "Designed for interfaces. Tight metrics and clear letterforms for maximum information density."),
            FontPairing("dm-sans-dm-mono", "DM Sans", "DM Mono", "sans-serif", "monospace",
                        "Sans headings for hierarchy, monospace body for a developer-craft aesthetic. Unusual but distinctive."),
        ],
        border_radius={"sm": "2px", "md": "4px", "lg": "6px", "full": "9999px"},
        shadow_style="none",
        spacing_density="balanced",
        layout_preference="structured",
        animation_intensity="none",
        image_shape="sharp-crop",
    ),
    "bold": DesignLanguage(
        id="bold",
        label="Bold",
        subtitle="Expressive & energetic",
        description="Saturated colors, strong contrast, and dynamic layouts. Large type, sharp shadows, and unapologetic personality.",
        palettes=[
            _palette("Electric", "#6C2BD9", "#FF4F00", "#00D4AA", "#0A0A0A", "#F5F5F5"),
            _palette("Neon Night", "#FF006E", "#8338EC", "#FFBE0B", "#0F0F0F", "#FFFFFF"),
            _palette("Cyber", "#00F5D4", "#7B2FF7", "#F15BB5", "#0A0A0F", "#E8E8E8"),
            _palette("Magma", "#FF4500", "#FF8C00", "#FFD700", "#0D0D0D", "#FAFAFA"),
            _palette("Aurora", "#06D6A0", "#118AB2", "#FFD166", "#073B4C", "#F0F4F8"),
            _palette("Voltage", "#E6FF00", "#FF00E6", "#00E6FF", "#0A0A0A", "#FFFFFF"),
        ],
        font_pairings=[
            FontPairing("space-grotesk-inter-b", "Space Grotesk", "Inter", "sans-serif", "sans-serif",
                        "Space Grotesk's geometric construction pops at bold weights. Inter stays invisible in body text."),
            FontPairing("clash-display-satoshi", "Clash Display", "Satoshi", "sans-serif", "sans-serif",
                        "Display font with strong personality for headlines. Satoshi provides clean, modern body text."),
            FontPairing("cabinet-grotesk-general", "Cabinet Grotesk", "General Sans", "sans-serif", "sans-serif",
                        "Two neo-grotesque families with character. Tight letter-spacing at display sizes creates impact."),
        ],
        border_radius={"sm": "4px", "md": "8px", "lg": "12px", "full": "9999px"},
        shadow_style="sharp",
        spacing_density="balanced",
        layout_preference="asymmetric",
        animation_intensity="moderate",
        image_shape="full-bleed",
    ),
    "luxury": DesignLanguage(
        id="luxury",
        label="Luxury",
        subtitle="Elevated & refined",
        description="Deep tones, gold accents, and generous spacing. Serif typography, subtle long shadows, and an elevated sense of calm.",
        palettes=[
            _palette("Gold Standard", "#2C2C2C", "#666666", "#C5A55A", "#F5F0E8", "#1A1A1A"),
            _palette("Noir", "#0A0A0A", "#3A3A3A", "#B8860B", "#1A1A1A", "#F5F0E8"),
            _palette("Emerald Lux", "#0F2620", "#306E5E", "#D4AF37", "#FDFBF7", "#0F2620"),
            _palette("Champagne", "#1A1A2E", "#16213E", "#E2B659", "#FAF7F0", "#1A1A2E"),
            _palette("Onyx Rose", "#1A1A1A", "#4A4A4A", "#D4A5A5", "#FAF5F5", "#1A1A1A"),
            _palette("Midnight Velvet", "#0D1B2A", "#1B2838", "#C9B037", "#0D1B2A", "#E0D8C8"),
        ],
        font_pairings=[
            FontPairing("cormorant-lato", "Cormorant Garamond", "Lato", "serif", "sans-serif",
                        "Cormorant is an elegant display Garamond with high contrast and refined serifs. Lato provides warm, neutral body text."),
            FontPairing("fraunces-source-l", "Fraunces", "Source Sans 3", "serif", "sans-serif",
                        "Fraunces at heavy weights feels indulgent and confident. Source Sans is the refined, readable counterpart."),
            FontPairing("playfair-raleway", "Playfair Display", "Raleway", "serif", "sans-serif",
                        "Classical display serif meets elegant thin sans-serif. A high-fashion pairing with clear hierarchy."),
        ],
        border_radius={"sm": "2px", "md": "4px", "lg": "8px", "full": "9999px"},
        shadow_style="long",
        spacing_density="generous",
        layout_preference="flowing",
        animation_intensity="subtle",
        image_shape="organic-mask",
    ),
}

DESIGN_LANGUAGE_IDS = list(DESIGN_LANGUAGES)

DEFAULT_SHADOW_COLOR = "rgba(0,0,0,0.08)"

SPACING_DENSITIES = {
    "tight": {"section": "48px", "card": "24px", "element": "12px"},
    "balanced": {"section": "64px", "card": "32px", "element": "16px"},
    "generous": {"section": "96px", "card": "40px", "element": "20px"},
}


def get_design_language(language_id: str) -> DesignLanguage:
    """Look up a preset, falling back to editorial for unknown ids."""
    return DESIGN_LANGUAGES.get(language_id) or DESIGN_LANGUAGES["editorial"]


def get_shadow_css(style: str, color: str = None) -> str:
    color = color or DEFAULT_SHADOW_COLOR
    if style == "subtle":
        return f"0 1px 3px {color}"
    if style == "soft":
        return f"0 4px 16px {color}"
    if style == "sharp":
        return f"4px 4px 0px {color}"
    if style == "long":
        return f"0 8px 30px {color}"
    return "none"


def get_spacing_scale(density: str) -> dict:
    return dict(SPACING_DENSITIES.get(density, SPACING_DENSITIES["balanced"]))
