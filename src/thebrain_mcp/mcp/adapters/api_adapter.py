"""
TheBrain API Adapter
====================
HTTP client adapter for the knowledge-graph API, with a read-through cache
for single thoughts.
"""

import threading
from typing import Any, Dict, Optional

import requests
from loguru import logger
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from thebrain_mcp import __version__
from thebrain_mcp.core.config import MCPConfig
from thebrain_mcp.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    RateLimitError,
    ThoughtBridgeAPIError,
    ThoughtNotFoundError,
)

SUCCESSFUL_DELETE_STATUSES = (200, 204)


def _is_missing(value: Optional[str]) -> bool:
    return value is None or str(value) == ""


def build_session(api_key: str, config: MCPConfig) -> requests.Session:
    """
    Build a requests session with bearer auth and transport-level retries.

    Retries cover connection and read failures on idempotent methods only;
    a response that was actually received is never retried, whatever its
    status, so the status mapping in TheBrainAPIAdapter always sees it.
    """
    retry = Retry(
        total=config.retry_attempts,
        connect=config.retry_attempts,
        read=config.retry_attempts,
        backoff_factor=config.retry_interval,
        status_forcelist=(),
        respect_retry_after_header=False,
        raise_on_status=False,
    )
    session = requests.Session()
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    session.headers.update({
        "Accept": "application/json",
        "Authorization": f"Bearer {api_key}",
        "User-Agent": f"thebrain-mcp/{__version__}",
    })
    return session


class TheBrainAPIAdapter:
    """
    Client for the thoughts endpoints of one brain.

    api_key, brain_id and base_url resolve from the explicit arguments first,
    then from ``config``. They are validated, in that order, before the HTTP
    session exists, so a successfully constructed adapter is ready to use.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        brain_id: Optional[str] = None,
        base_url: Optional[str] = None,
        config: Optional[MCPConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config or MCPConfig()
        self.api_key = api_key if api_key is not None else self.config.api_key
        self.brain_id = brain_id if brain_id is not None else self.config.brain_id
        self.base_url = base_url if base_url is not None else self.config.api_base_url

        if _is_missing(self.api_key):
            raise ConfigurationError("API key is required", config_key="api_key")
        if _is_missing(self.brain_id):
            raise ConfigurationError("Brain ID is required", config_key="brain_id")
        if _is_missing(self.base_url):
            raise ConfigurationError("Base URL is required", config_key="base_url")

        self.base_url = self.base_url.rstrip("/")
        self.timeout_seconds = self.config.timeout_seconds
        self.cache_enabled = self.config.cache_enabled

        self._cache: Dict[str, Any] = {}
        self._cache_lock = threading.Lock()
        self.session = session or build_session(self.api_key, self.config)

    # --- context management ---

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    # --- transport ---

    @property
    def thoughts_path(self) -> str:
        return f"/brains/{self.brain_id}/thoughts"

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.debug(f"{method} {url}")
        # requests.RequestException (timeouts, refused connections) propagates
        return self.session.request(
            method=method,
            url=url,
            params=params,
            json=payload,
            timeout=self.timeout_seconds,
        )

    @staticmethod
    def _decode_body(response: requests.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return response.text

    def _parse_response(self, response: requests.Response) -> Any:
        status = response.status_code
        body = self._decode_body(response)

        if 200 <= status <= 299:
            return body
        if status == 401:
            raise AuthenticationError(
                "Authentication failed", status_code=status, response_body=body
            )
        if status == 404:
            raise ThoughtNotFoundError(
                "Thought not found", status_code=status, response_body=body
            )
        if status == 429:
            raise RateLimitError(
                "Rate limit exceeded", status_code=status, response_body=body
            )
        raise ThoughtBridgeAPIError(
            f"API request failed: {status}", status_code=status, response_body=body
        )

    # --- cache ---

    def _cache_get(self, thought_id: str) -> Optional[Any]:
        if not self.cache_enabled:
            return None
        with self._cache_lock:
            return self._cache.get(thought_id)

    def _cache_put(self, thought_id: str, thought: Any) -> None:
        if not self.cache_enabled:
            return
        with self._cache_lock:
            self._cache[thought_id] = thought

    def _cache_evict(self, thought_id: str) -> None:
        with self._cache_lock:
            self._cache.pop(thought_id, None)

    def clear_cache(self) -> None:
        with self._cache_lock:
            self._cache.clear()

    def is_cached(self, thought_id: str) -> bool:
        with self._cache_lock:
            return thought_id in self._cache

    # --- thought operations ---

    def search(self, query: str, limit: int = 10) -> Any:
        logger.info(f"Searching thoughts with query: {query!r}")
        response = self._request(
            "GET", f"{self.thoughts_path}/search", params={"q": query, "limit": limit}
        )
        return self._parse_response(response)

    def get(self, thought_id: str) -> Any:
        cached = self._cache_get(thought_id)
        if cached is not None:
            logger.debug(f"Cache hit for thought {thought_id}")
            return cached

        logger.info(f"Fetching thought: {thought_id}")
        response = self._request("GET", f"{self.thoughts_path}/{thought_id}")
        thought = self._parse_response(response)
        self._cache_put(thought_id, thought)
        return thought

    def create(
        self,
        name: str,
        notes: Optional[str] = None,
        parent_id: Optional[str] = None,
        **attributes: Any,
    ) -> Any:
        logger.info(f"Creating thought: {name}")
        body = {"name": name, "notes": notes, "parentId": parent_id, **attributes}
        body = {k: v for k, v in body.items() if v is not None}

        response = self._request("POST", self.thoughts_path, payload=body)
        result = self._parse_response(response)

        # a new thought can change any listing-derived state
        self.clear_cache()
        return result

    def update(self, thought_id: str, **attributes: Any) -> Any:
        logger.info(f"Updating thought: {thought_id}")
        body = {k: v for k, v in attributes.items() if v is not None}

        response = self._request("PUT", f"{self.thoughts_path}/{thought_id}", payload=body)
        result = self._parse_response(response)

        self._cache_evict(thought_id)
        return result

    def delete(self, thought_id: str) -> bool:
        logger.info(f"Deleting thought: {thought_id}")
        response = self._request("DELETE", f"{self.thoughts_path}/{thought_id}")
        self._parse_response(response)

        deleted = response.status_code in SUCCESSFUL_DELETE_STATUSES
        if deleted:
            self._cache_evict(thought_id)
        return deleted

    def list_thoughts(self, limit: int = 50) -> Any:
        logger.info(f"Listing thoughts (limit: {limit})")
        response = self._request("GET", self.thoughts_path, params={"limit": limit})
        return self._parse_response(response)

    def get_links(self, thought_id: str) -> Any:
        logger.info(f"Getting links for thought: {thought_id}")
        response = self._request("GET", f"{self.thoughts_path}/{thought_id}/links")
        return self._parse_response(response)

    def health_check(self) -> bool:
        try:
            response = self._request("GET", "/health")
        except requests.RequestException as exc:
            logger.warning(f"Health check failed: {exc}")
            return False
        return response.status_code == 200
