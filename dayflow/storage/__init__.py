"""Storage layer - dumb document repositories without business logic."""

from . import day_repo, document_repo, progression_repo

__all__ = ["day_repo", "document_repo", "progression_repo"]
