"""Reference-site ingestion through Firecrawl."""

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Optional

from ..config import Config
from .client import FirecrawlClient

logger = logging.getLogger(__name__)


@dataclass
class IngestionResult:
    """Outcome of scraping one URL. Failures are data, not exceptions."""

    success: bool
    url: str
    branding: Optional[dict] = None
    markdown: Optional[str] = None
    html: Optional[str] = None
    screenshot: Optional[str] = None
    error: Optional[str] = None
    scraped_at: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


def normalize_url(url: str) -> str:
    url = url.strip()
    if not url.startswith(("http://", "https://")):
        return f"https://{url}"
    return url


def _value(source: dict, key: str, default):
    value = source.get(key)
    return value if value is not None else default


def _component(source: Optional[dict], *keys: str) -> Optional[dict]:
    if not source:
        return None
    return {key: _value(source, key, "") for key in keys}


def to_branding_response(profile: dict) -> dict:
    """Normalize a raw Firecrawl branding profile.

    Missing strings become "", weights default to 400/500/700, spacing
    to a 4px base unit with radius "0". Firecrawl's heading/body line
    heights map onto tight/normal.
    """
    colors = profile.get("colors") or {}
    typography = profile.get("typography") or {}
    families = typography.get("fontFamilies") or {}
    sizes = typography.get("fontSizes") or {}
    weights = typography.get("fontWeights") or {}
    spacing = profile.get("spacing") or {}

    line_heights = typography.get("lineHeights")
    if line_heights:
        line_heights = {
            "tight": str(_value(line_heights, "heading", 1.2)),
            "normal": str(_value(line_heights, "body", 1.5)),
            "relaxed": "1.75",
        }

    branding = {
        "colorScheme": _value(profile, "colorScheme", "light"),
        "logo": _value(profile, "logo", ""),
        "colors": {
            "primary": _value(colors, "primary", ""),
            "secondary": _value(colors, "secondary", ""),
            "accent": _value(colors, "accent", ""),
            "background": _value(colors, "background", ""),
            "textPrimary": _value(colors, "textPrimary", ""),
            "textSecondary": _value(colors, "textSecondary", ""),
            "link": colors.get("link"),
            "success": colors.get("success"),
            "warning": colors.get("warning"),
            "error": colors.get("error"),
        },
        "fonts": _value(profile, "fonts", []),
        "typography": {
            "fontFamilies": {
                "primary": _value(families, "primary", ""),
                "heading": _value(families, "heading", ""),
                "code": families.get("code"),
            },
            "fontSizes": {
                "h1": _value(sizes, "h1", ""),
                "h2": _value(sizes, "h2", ""),
                "h3": _value(sizes, "h3", ""),
                "body": _value(sizes, "body", ""),
            },
            "fontWeights": {
                "regular": _value(weights, "regular", 400),
                "medium": _value(weights, "medium", 500),
                "bold": _value(weights, "bold", 700),
            },
            "lineHeights": line_heights,
        },
        "spacing": {
            "baseUnit": _value(spacing, "baseUnit", 4),
            "borderRadius": _value(spacing, "borderRadius", "0"),
        },
    }

    components = profile.get("components")
    if components:
        branding["components"] = {
            "buttonPrimary": _component(
                components.get("buttonPrimary"), "background", "textColor", "borderRadius"
            ),
            "buttonSecondary": _component(
                components.get("buttonSecondary"), "background", "textColor", "borderColor", "borderRadius"
            ),
            "input": _component(
                components.get("input"), "background", "borderColor", "borderRadius"
            ),
        }

    images = profile.get("images")
    if images:
        branding["images"] = {
            "logo": _value(images, "logo", ""),
            "favicon": _value(images, "favicon", ""),
            "ogImage": _value(images, "ogImage", ""),
        }

    layout = profile.get("layout")
    if layout:
        branding["layout"] = {
            "maxWidth": (layout.get("grid") or {}).get("maxWidth"),
            "headerHeight": layout.get("headerHeight"),
            "footerHeight": layout.get("footerHeight"),
        }

    personality = profile.get("personality")
    if personality:
        branding["personality"] = {
            "tone": personality.get("tone"),
            "energy": personality.get("energy"),
            "targetAudience": personality.get("targetAudience"),
        }

    return branding


def ingest_design_from_url(
    url: str,
    include_screenshot: bool = True,
    include_markdown: bool = False,
    include_html: bool = False,
    timeout_ms: Optional[int] = None,
    client: Optional[FirecrawlClient] = None,
) -> IngestionResult:
    """Scrape a reference site and normalize its branding.

    Never raises: scrape failures come back as success=False with the
    upstream message in ``error``.
    """
    formats = ["branding"]
    if include_screenshot:
        formats.append("screenshot")
    if include_markdown:
        formats.append("markdown")
    if include_html:
        formats.append("html")

    timeout_ms = timeout_ms or Config.SCRAPE_TIMEOUT_MS
    try:
        if client is not None:
            data = client.scrape(url, formats, timeout_ms)
        else:
            with FirecrawlClient() as firecrawl:
                data = firecrawl.scrape(url, formats, timeout_ms)
    except Exception as e:
        logger.warning(f"Ingestion failed for {url}: {e}")
        return IngestionResult(
            success=False,
            url=url,
            error=str(e) or "Unknown ingestion error",
            scraped_at=datetime.now(timezone.utc).isoformat(),
        )

    branding = data.get("branding")
    return IngestionResult(
        success=True,
        url=url,
        branding=to_branding_response(branding) if branding else None,
        markdown=data.get("markdown") or None,
        html=data.get("html") or None,
        screenshot=data.get("screenshot") or None,
        scraped_at=datetime.now(timezone.utc).isoformat(),
    )
