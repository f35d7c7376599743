class CraftError(Exception):
    """Base class for every error raised by the combination engine."""


class UnknownElement(CraftError):
    """One or both element names do not resolve to a stored element."""

    def __init__(self, names: list[str]):
        self.names = names
        super().__init__(f"Unknown element(s): {', '.join(names)}")


class InvalidElementName(CraftError, ValueError):
    """Element name is empty, contains the pair separator or is filtered."""


class DuplicateName(CraftError):
    """An element with the same case-insensitive name already exists."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Element already exists: {name}")


class DuplicatePair(CraftError):
    """The unordered element pair already has a recipe."""

    def __init__(self, element_id_a, element_id_b):
        self.element_ids = (element_id_a, element_id_b)
        super().__init__(f"Recipe already exists for pair: {element_id_a}, {element_id_b}")


class StorageUnavailable(CraftError):
    """The store failed or timed out. Safe to retry."""
