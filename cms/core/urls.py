"""
URL segment helpers.
"""
import re


def tidy_url(value: str) -> str:
    """
    Turn free text into a URL segment.

    Lower-cases, strips characters that are not word characters, whitespace
    or hyphens, and collapses whitespace/hyphen runs to a single hyphen.
    Forward slashes are kept so hierarchical segments survive.
    """
    if not value:
        return ""
    parts = []
    for part in value.lower().split("/"):
        slug = re.sub(r'[^\w\s-]', '', part)
        slug = re.sub(r'[-\s]+', '-', slug).strip('-')
        if slug:
            parts.append(slug)
    return "/".join(parts)
