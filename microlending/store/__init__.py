"""In-memory stores for maintaining entity relationships."""

from microlending.store.book import LoanBook

__all__ = ["LoanBook"]
