"""Type scales and heading/body font pairing."""

from typing import Optional

from .languages import DESIGN_LANGUAGES, FontPairing

USE_CASES = ("website", "app", "documentation", "marketing", "editorial")

# Modular scale ratio per use case
USE_CASE_RATIOS = {
    "website": 1.25,
    "app": 1.2,
    "documentation": 1.2,
    "marketing": 1.333,
    "editorial": 1.333,
}

USE_CASE_LANGUAGES = {
    "app": "minimal",
    "documentation": "minimal",
    "marketing": "bold",
    "editorial": "editorial",
}

MOOD_KEYWORDS = {
    "corporate": ("professional", "trust", "corporate", "business", "serious", "reliable"),
    "playful": ("playful", "fun", "friendly", "warm", "whimsical", "approachable"),
    "editorial": ("editorial", "classic", "sophisticated", "literary", "considered"),
    "minimal": ("minimal", "clean", "simple", "modern", "essential", "technical"),
    "bold": ("bold", "energetic", "expressive", "loud", "vibrant", "dynamic"),
    "luxury": ("luxury", "elegant", "refined", "premium", "elevated", "calm"),
}


def generate_type_scale(base_size: float = 16, ratio: float = 1.25) -> dict:
    """Modular type scale from caption up to h1."""
    def fmt(value: float) -> str:
        return f"{value:.2f}px"

    return {
        "caption": fmt(base_size / ratio / ratio),
        "small": fmt(base_size / ratio),
        "body": f"{base_size:g}px",
        "h4": fmt(base_size * ratio),
        "h3": fmt(base_size * ratio ** 2),
        "h2": fmt(base_size * ratio ** 3),
        "h1": fmt(base_size * ratio ** 4),
    }


def pairing_to_css(pairing: dict) -> str:
    lines = [":root {"]
    for key, value in pairing["cssVariables"].items():
        lines.append(f"  {key}: {value};")
    lines.append("}")
    return "\n".join(lines)


def _mood_languages(mood: Optional[str]) -> set[str]:
    if not mood:
        return set()
    words = mood.lower()
    return {
        language_id
        for language_id, keywords in MOOD_KEYWORDS.items()
        if any(keyword in words for keyword in keywords)
    }


def _catalogue() -> list[tuple[str, FontPairing]]:
    """All pairings in catalogue order, deduplicated by font pair."""
    seen = set()
    pairs = []
    for language_id, language in DESIGN_LANGUAGES.items():
        for pairing in language.font_pairings:
            key = (pairing.heading.lower(), pairing.body.lower())
            if key in seen:
                continue
            seen.add(key)
            pairs.append((language_id, pairing))
    return pairs


def _css_variables(heading: str, heading_class: str, body: str, body_class: str, scale: dict) -> dict:
    variables = {
        "--font-heading": f"'{heading}', {heading_class}",
        "--font-body": f"'{body}', {body_class}",
    }
    for key, value in scale.items():
        variables[f"--font-size-{key}"] = value
    return variables


def pair_typography(
    primary_font: Optional[str] = None,
    mood: Optional[str] = None,
    use_case: Optional[str] = None,
) -> dict:
    """Pick a heading/body pairing from the design language catalogue.

    Pairings score +3 when they contain primary_font, +2 when their
    language matches the mood and +1 when it matches the use case.
    Ties keep catalogue order, so the same inputs always give the
    same answer.
    """
    use_case = use_case if use_case in USE_CASES else "website"
    mood_languages = _mood_languages(mood)
    font = primary_font.strip().lower() if primary_font else None

    scored = []
    for position, (language_id, pairing) in enumerate(_catalogue()):
        score = 0
        if font and font in (pairing.heading.lower(), pairing.body.lower()):
            score += 3
        if language_id in mood_languages:
            score += 2
        if USE_CASE_LANGUAGES.get(use_case) == language_id:
            score += 1
        scored.append((-score, position, language_id, pairing))
    scored.sort(key=lambda item: (item[0], item[1]))

    _, _, language_id, best = scored[0]
    heading, heading_class = best.heading, best.heading_class
    body, body_class = best.body, best.body_class
    rationale = best.reason

    font_matched = font in (best.heading.lower(), best.body.lower()) if font else False
    if primary_font and not font_matched:
        heading, heading_class = primary_font.strip(), "sans-serif"
        rationale = (
            f"{heading} leads the headings. {best.body} comes from the "
            f"{DESIGN_LANGUAGES[language_id].label.lower()} catalogue as a readable body face."
        )

    ratio = USE_CASE_RATIOS[use_case]
    scale = generate_type_scale(16, ratio)
    css_variables = _css_variables(heading, heading_class, body, body_class, scale)

    alternatives = [
        {
            "heading": pairing.heading,
            "body": pairing.body,
            "language": alt_language,
            "reason": pairing.reason,
        }
        for _, _, alt_language, pairing in scored[1:4]
    ]

    pairing = {
        "heading": heading,
        "body": body,
        "headingClass": heading_class,
        "bodyClass": body_class,
        "language": language_id,
        "useCase": use_case,
        "ratio": ratio,
        "typeScale": scale,
        "cssVariables": css_variables,
        "rationale": rationale,
        "alternatives": alternatives,
    }
    pairing["css"] = pairing_to_css(pairing)
    return pairing
