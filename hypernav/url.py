"""URI helpers."""

from urllib.parse import urljoin


def resolve(base: str, relative: str) -> str:
    """Resolve a relative reference against a base URI.

    Absolute, scheme-relative, path-absolute and relative references are all
    accepted. Malformed input is resolved best-effort and never raises.
    """
    return urljoin(base, relative)
