"""Query text normalization."""

from typing import Iterable, Union


def normalize_query(text: Union[str, Iterable[str]]) -> str:
    """
    Normalize a query into the key used by every tier.

    Leading and trailing whitespace is removed and internal whitespace runs
    collapse to one space. A sequence of words (CLI arguments) is joined
    the same way.

    Raises:
        ValueError: If nothing remains after normalization.
    """
    if not isinstance(text, str):
        text = " ".join(text)
    normalized = " ".join(text.split())
    if not normalized:
        raise ValueError("query must not be empty")
    return normalized
