"""
Domain Models Package
Export all domain entities
"""

from .entities import (
    # Constants
    DEFAULT_TOKEN_SUPPLY,

    # Enums
    CurrencyMode,
    DataCategory,
    DataProvenance,

    # Entities
    NAVSnapshot,
    Position,
)

__all__ = [
    # Constants
    "DEFAULT_TOKEN_SUPPLY",

    # Enums
    "CurrencyMode",
    "DataCategory",
    "DataProvenance",

    # Entities
    "NAVSnapshot",
    "Position",
]
