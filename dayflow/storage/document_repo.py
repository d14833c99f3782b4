"""
Document Repository - read / merge-write of JSON documents by (user_id, path).

AICODE-NOTE: The repository only moves data. It knows nothing about
progression, streaks or passes; those live in core/domain.
"""

import logging
from typing import Any

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tortoise.exceptions import DBConnectionError, OperationalError

from dayflow.config import config
from dayflow.database.models import Document

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (DBConnectionError, OperationalError)

store_retry = retry(
    stop=stop_after_attempt(config.STORE_RETRY_ATTEMPTS),
    wait=wait_exponential(
        multiplier=config.STORE_RETRY_WAIT_MIN,
        min=config.STORE_RETRY_WAIT_MIN,
        max=config.STORE_RETRY_WAIT_MAX,
    ),
    retry=retry_if_exception_type(RETRYABLE_ERRORS),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)


@store_retry
async def read(user_id: str, path: str) -> dict[str, Any] | None:
    """Read a document. Returns None if it does not exist."""
    document = await Document.get_or_none(user_id=user_id, path=path)
    if document is None:
        return None
    return dict(document.data or {})


@store_retry
async def write(
    user_id: str, path: str, partial: dict[str, Any], merge: bool = True
) -> dict[str, Any]:
    """
    Write a document.

    Args:
        user_id: Owner of the document
        path: Document path, e.g. "gamification/stats"
        partial: Fields to write
        merge: Top-level merge into the stored document (True) or replace it

    Returns:
        The stored document body after the write
    """
    document = await Document.get_or_none(user_id=user_id, path=path)
    if document is None:
        document = await Document.create(user_id=user_id, path=path, data=dict(partial))
        return dict(document.data)

    if merge:
        data = dict(document.data or {})
        data.update(partial)
    else:
        data = dict(partial)

    document.data = data
    await document.save(update_fields=["data", "updated_at"])
    return dict(data)


async def list_by_path(path: str) -> list[tuple[str, dict[str, Any]]]:
    """All (user_id, body) pairs stored under the given path."""
    documents = await Document.filter(path=path).order_by("id")
    return [(d.user_id, dict(d.data or {})) for d in documents]
