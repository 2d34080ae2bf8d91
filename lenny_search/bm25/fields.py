"""
Searchable fields and their relevance weights.

A match in the episode title says much more about relevance than a passing
mention somewhere in a two-hour transcript, so every field is scored
independently and multiplied by its weight:

    title (8.0) > guest (6.0) > keywords (5.0) > description (3.0) > transcript (1.0)
"""

from enum import Enum
from typing import Dict, Mapping, Optional


class Field(str, Enum):
    """Searchable document fields (indexing order)"""
    TITLE = "title"
    GUEST = "guest"
    KEYWORDS = "keywords"
    DESCRIPTION = "description"
    TRANSCRIPT = "transcript"


DEFAULT_FIELD_WEIGHTS: Dict[Field, float] = {
    Field.TITLE: 8.0,
    Field.GUEST: 6.0,
    Field.KEYWORDS: 5.0,
    Field.DESCRIPTION: 3.0,
    Field.TRANSCRIPT: 1.0,
}


def validate_field_weights(weights: Optional[Mapping] = None) -> Dict[Field, float]:
    """
    Merge custom weights over the defaults and validate them.

    Args:
        weights: Partial or complete mapping of field (enum or name) to weight.
            None returns a copy of the defaults.

    Returns:
        Complete mapping with one positive weight per field

    Raises:
        ValueError: Unknown field name or non-positive weight
    """
    merged = dict(DEFAULT_FIELD_WEIGHTS)
    for key, value in (weights or {}).items():
        try:
            field = Field(key)
        except ValueError:
            raise ValueError(
                f"Unknown field in field_weights: {key!r}. "
                f"Valid options: {', '.join(f.value for f in Field)}"
            ) from None
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ValueError(f"field_weights[{field.value}] must be a positive number, got {value!r}")
        merged[field] = float(value)
    return merged
