"""
Custom exceptions with actionable guidance.

Every failure in microshades reflects a caller-side data or configuration
mistake, so each error carries a suggestion describing how to fix the input.
"""

from __future__ import annotations

from collections.abc import Iterable


class MicroshadesError(Exception):
    """Base exception for microshades errors."""

    def __init__(self, message: str, suggestion: str | None = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(self.full_message)

    @property
    def full_message(self) -> str:
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


class InvalidInputError(MicroshadesError):
    """Raised when an input table or argument is malformed."""


class ZeroTotalSampleError(InvalidInputError):
    """Raised when one or more samples have a total abundance of zero."""

    def __init__(self, samples: list[str]):
        shown = ", ".join(str(s) for s in samples[:5])
        if len(samples) > 5:
            shown += f"... and {len(samples) - 5} more"
        super().__init__(
            message=f"Cannot compute proportions, samples with zero total abundance: {shown}",
            suggestion=(
                "Remove empty samples before preparing the table, or filter "
                "them out with a minimum read depth."
            ),
        )
        self.samples = samples


class UnknownRankError(InvalidInputError):
    """Raised when the requested aggregation rank is not part of the lineage."""

    def __init__(self, rank: str, ranks: Iterable[str]):
        ranks = list(ranks)
        super().__init__(
            message=f"Rank '{rank}' is not part of the lineage schema ({', '.join(ranks)})",
            suggestion="Choose one of the declared ranks or extend TaxonomySchema.ranks.",
        )
        self.rank = rank
        self.ranks = ranks


class PaletteExhaustionError(MicroshadesError):
    """Raised when more groups or sub-groups are requested than colors exist."""

    def __init__(self, requested: int, available: int, what: str = "groups"):
        super().__init__(
            message=f"Requested {requested} {what} but only {available} colors are available",
            suggestion=(
                f"Reduce the number of {what} to at most {available}, or extend "
                "a group with a larger palette via extend_group()."
            ),
        )
        self.requested = requested
        self.available = available


class MissingColumnError(MicroshadesError):
    """Raised when a grouping or covariate field is absent from a table."""

    def __init__(self, column: str, available: Iterable[str]):
        available = list(available)
        shown = ", ".join(available[:10])
        if len(available) > 10:
            shown += ", ..."
        super().__init__(
            message=f"Column '{column}' not found in table",
            suggestion=f"Available columns: {shown}",
        )
        self.column = column
        self.available = available
