"""Order-independent keys for unordered element pairs."""

from craft_server.domain.content_filter import ContentFilter
from craft_server.domain.errors import InvalidElementName

PAIR_SEPARATOR = "_"

content_filter = ContentFilter()


def canonicalize(name1: str, name2: str) -> str:
    """Build the canonical key of an unordered pair of element names.

    Args:
        name1 (str): First element name (any case)
        name2 (str): Second element name (any case)

    Returns:
        str: Lower-cased names sorted and joined by PAIR_SEPARATOR,
            e.g. ("Water", "Fire") -> "fire_water"
    """
    return PAIR_SEPARATOR.join(sorted((name1.lower(), name2.lower())))


def name_key(name: str) -> str:
    """Identity key of an element name (names are case-insensitive)."""
    return name.lower()


def validate_element_name(name: str) -> str:
    """Check that a name can be stored as a new element.

    Names containing the separator would make two different pairs share
    one canonical key, so they are rejected here.

    Args:
        name (str): Candidate element name

    Raises:
        InvalidElementName: Empty name, separator inside, or filtered word

    Returns:
        str: The trimmed name
    """
    name = name.strip()
    if not name:
        raise InvalidElementName("Element name must not be empty")
    if PAIR_SEPARATOR in name:
        raise InvalidElementName(
            f"Element name must not contain '{PAIR_SEPARATOR}': {name}"
        )
    if not content_filter.is_allowed(name):
        raise InvalidElementName(f"Element name is not allowed: {name}")
    return name
