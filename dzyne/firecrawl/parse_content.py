"""Structural content extraction from scraped HTML.

Pulls nav items, headline, description, logo and content images so a
preview can be filled with the site's real copy.
"""

import re
from dataclasses import asdict, dataclass, field
from typing import Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

TINY_IMAGE_RE = re.compile(r'1x1|spacer|pixel|blank|transparent|tracking|beacon', re.IGNORECASE)
ICON_EXTENSIONS = re.compile(r'\.(ico|svg)(\?|$)', re.IGNORECASE)

LOGO_SELECTORS = (
    'a.logo img',
    '.logo img',
    '#logo img',
    'header img[alt*="logo" i]',
    'nav img',
    'header a:first-child img',
)

MAX_NAV_ITEMS = 6
MAX_SITE_IMAGES = 12


@dataclass
class SiteContent:
    logo: str = ""
    hero_image: str = ""
    site_images: list[str] = field(default_factory=list)
    nav_items: list[str] = field(default_factory=list)
    headline: str = ""
    description: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


def _resolve_url(src: str, base_url: str) -> str:
    if not src or src.startswith("data:"):
        return src
    try:
        return urljoin(base_url, src)
    except ValueError:
        return src


def _is_content_image(src: str) -> bool:
    if not src or src.startswith("data:"):
        return False
    if TINY_IMAGE_RE.search(src) or ICON_EXTENSIONS.search(src):
        return False
    return True


def _text_of(el: Optional[Tag]) -> str:
    if el is None:
        return ""
    return re.sub(r'\s+', ' ', el.get_text()).strip()


def _meta_content(soup: BeautifulSoup, **attrs) -> str:
    meta = soup.find("meta", attrs=attrs)
    return (meta.get("content") or "").strip() if meta else ""


def _find_logo(soup: BeautifulSoup, base_url: str) -> str:
    for selector in LOGO_SELECTORS:
        img = soup.select_one(selector)
        if img and img.get("src"):
            return _resolve_url(img["src"], base_url)

    for img in soup.find_all("img"):
        markers = " ".join([
            img.get("alt") or "",
            " ".join(img.get("class") or []),
            img.get("id") or "",
        ]).lower()
        if "logo" in markers and img.get("src"):
            return _resolve_url(img["src"], base_url)

    return ""


def parse_content_from_html(html: str, base_url: str) -> SiteContent:
    """Parse nav items, headline, description, logo and images from HTML."""
    soup = BeautifulSoup(html or "", "html.parser")

    nav_items = []
    nav = soup.find("nav") or soup.find("header")
    if nav:
        for link in nav.find_all("a"):
            text = _text_of(link)
            if text and len(text) < 40 and not text.startswith("http"):
                nav_items.append(text)
            if len(nav_items) >= MAX_NAV_ITEMS:
                break

    h1 = soup.find("h1")
    headline = _text_of(h1) or _text_of(soup.find("h2"))

    description = ""
    if h1:
        paragraph = h1.find_next_sibling("p")
        description = _text_of(paragraph)
    if not description:
        description = (
            _meta_content(soup, name="description")
            or _meta_content(soup, property="og:description")
        )

    logo = _find_logo(soup, base_url)

    og_image = _meta_content(soup, property="og:image")
    hero_image = _resolve_url(og_image, base_url) if og_image else ""

    seen = set()
    site_images = []
    for img in soup.find_all("img"):
        src = img.get("src") or img.get("data-src") or ""
        if not _is_content_image(src):
            continue
        resolved = _resolve_url(src, base_url)
        if resolved == logo or resolved in seen:
            continue
        seen.add(resolved)
        site_images.append(resolved)

    if not hero_image and site_images:
        hero_image = site_images[0]

    return SiteContent(
        logo=logo,
        hero_image=hero_image,
        site_images=site_images[:MAX_SITE_IMAGES],
        nav_items=nav_items,
        headline=headline[:200],
        description=description[:500],
    )
