"""Deterministic placeholder images used when the provider yields no image."""
from urllib.parse import quote

from webtoon_studio.models.generation import PlaceholderVariant

PLACEHOLDER_BASE_URL = "https://placehold.co/1024x1024"
LABEL_SOURCE_CHARS = 20

# variant -> (label prefix, background colour, text colour)
_VARIANTS: dict[PlaceholderVariant, tuple[str, str, str]] = {
    PlaceholderVariant.disabled: ("Webtoon: ", "18181b", "facc15"),
    PlaceholderVariant.failed: ("Fallback: ", "facc15", "18181b"),
}


def placeholder_url(scenario_text: str, variant: PlaceholderVariant) -> str:
    """Build a placeholder image URL labelled with the start of the scenario.

    Args:
        scenario_text: Raw scenario text; only the first 20 characters are used.
        variant: ``disabled`` when no provider is configured, ``failed`` when
            the provider call did not return an image.

    Returns:
        placehold.co URL with the label percent-encoded into the query string.
    """
    prefix, background, foreground = _VARIANTS[variant]
    label = quote(prefix + scenario_text[:LABEL_SOURCE_CHARS], safe="-_.!~*'()")
    return f"{PLACEHOLDER_BASE_URL}/{background}/{foreground}/png?text={label}"
