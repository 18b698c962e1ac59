"""Testing utilities for microshades."""

from tests.utils.assertions import (
    ColorTableAssertions,
    PreparedTableAssertions,
)

__all__ = [
    "ColorTableAssertions",
    "PreparedTableAssertions",
]
