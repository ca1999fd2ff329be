"""Trello REST API client.

Fetches boards and card-move actions. Responses go through the staleness
cache so repeated runs do not spend the Trello rate limit.
"""

import logging
from typing import Any, Dict, List, Optional

import requests
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ..cache.store import StalenessCache
from ..models.trello import Board
from ..utils.error_handling import ConfigurationError, TrelloAPIError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
BOARDS_CACHE_KEY = "boards"


def board_actions_cache_key(board_id: str) -> str:
    return f"board_actions_{board_id}"


def is_transient_error(exception: BaseException) -> bool:
    """Check whether a failed request is worth retrying."""
    if isinstance(exception, (requests.ConnectionError, requests.Timeout)):
        return True
    if isinstance(exception, TrelloAPIError):
        return exception.status_code in RETRYABLE_STATUS_CODES
    return False


def _moves_between_lists(action: Dict[str, Any]) -> bool:
    data = action.get("data") or {}
    return bool(data.get("listBefore") or data.get("listAfter"))


class TrelloClient:
    """Client for the Trello REST API."""

    API_URL = "https://api.trello.com/1"

    def __init__(
        self,
        api_key: Optional[str],
        token: Optional[str],
        cache: Optional[StalenessCache] = None,
        base_url: Optional[str] = None,
        timeout: float = 10.0,
        max_attempts: int = 4,
        backoff_seconds: float = 1.0,
        session: Optional[requests.Session] = None,
    ):
        """Initialize Trello client.

        Args:
            api_key: Trello API key
            token: Trello API token
            cache: Staleness cache for responses (no caching if None)
            base_url: Override API URL
            timeout: Request timeout in seconds
            max_attempts: Attempts per request for rate-limit and server errors
            backoff_seconds: Base of the exponential wait between attempts
            session: HTTP session to use
        """
        self.api_key = api_key
        self.token = token
        self.cache = cache
        self.base_url = (base_url or self.API_URL).rstrip("/")
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.backoff_seconds = backoff_seconds
        self.session = session or requests.Session()

    def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        if not self.api_key or not self.token:
            raise ConfigurationError(
                "Trello credentials missing. Set TRELLO_API_KEY and TRELLO_TOKEN."
            )

        query = {"key": self.api_key, "token": self.token}
        if params:
            query.update(params)

        response = self.session.get(f"{self.base_url}{path}", params=query, timeout=self.timeout)
        if response.status_code >= 400:
            raise TrelloAPIError(
                f"Trello API request {path} failed with status {response.status_code}: "
                f"{response.text[:200]}",
                status_code=response.status_code,
            )
        return response.json()

    def _request(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        retrying = Retrying(
            wait=wait_exponential(multiplier=self.backoff_seconds, max=30),
            stop=stop_after_attempt(self.max_attempts),
            retry=retry_if_exception(is_transient_error),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return retrying(self._get_json, path, params)

    def _cached(self, key: str, producer, force_fresh: bool) -> Any:
        if self.cache is None:
            return producer()
        return self.cache.get_or_fetch(key, producer, force_fresh=force_fresh)

    # === Producers ===

    def fetch_boards(self) -> List[Dict[str, str]]:
        """Fetch the member's boards from the API, bypassing the cache."""
        data = self._request("/members/me/boards", {"fields": "id,name"})
        return [Board.from_api(item).model_dump() for item in data]

    def fetch_board_actions(self, board_id: str) -> List[Dict[str, Any]]:
        """Fetch list-change actions for a board, bypassing the cache.

        Args:
            board_id: Trello board ID

        Returns:
            Raw ``updateCard`` actions that moved a card between lists
        """
        data = self._request(
            f"/boards/{board_id}/actions",
            {"filter": "updateCard", "limit": 1000},
        )
        return [
            action
            for action in data
            if action.get("type") == "updateCard"
            and _moves_between_lists(action)
        ]

    # === Cached accessors ===

    def get_boards(self, force_fresh: bool = False) -> List[Dict[str, str]]:
        """Get boards, served from cache when possible.

        Args:
            force_fresh: Ignore the cache and fetch from the API

        Returns:
            List of ``{"id", "name"}`` dicts
        """
        return self._cached(BOARDS_CACHE_KEY, self.fetch_boards, force_fresh)

    def get_board_actions(self, board_id: str, force_fresh: bool = False) -> List[Dict[str, Any]]:
        """Get list-change actions for a board, served from cache when possible."""
        return self._cached(
            board_actions_cache_key(board_id),
            lambda: self.fetch_board_actions(board_id),
            force_fresh,
        )
