"""
Application-level exceptions.

Raised by the API client at the network boundary. ConsensusDataService
catches them, logs, and returns None/False so the UI never sees a raise.
Insufficient data is not an error and has no exception here.
"""

from __future__ import annotations

from typing import Any


class ConsensusError(Exception):
    """Base exception for all consensus engine errors."""


class RankingFetchError(ConsensusError):
    """Community ranking could not be fetched (transport error or non-2xx)."""

    def __init__(
        self,
        message: str,
        list_id: str | None = None,
        category_id: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.list_id = list_id
        self.category_id = category_id
        self.status_code = status_code
        self.cause = cause


class RankingSubmitError(ConsensusError):
    """A user ranking could not be submitted."""

    def __init__(
        self,
        message: str,
        list_id: str | None = None,
        user_id: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.list_id = list_id
        self.user_id = user_id
        self.cause = cause


class InvalidPayloadError(ConsensusError):
    """Response body did not match the expected wire shape."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.errors = errors or []
