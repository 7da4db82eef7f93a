"""HTTP client for the hosted diagnosis endpoints, with optional caching."""

import hashlib
import json
import os
from pathlib import Path
from typing import Any

import requests
from loguru import logger

from diagnosis_map.config import API_CACHE_PREFIX, REQUEST_TIMEOUT_SECONDS, resolve_api_base


class ApiError(RuntimeError):
    """The endpoint answered, but not with a usable JSON object."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DiagnosisApi:
    """Encapsulated diagnosis API with caching.

    The cache replays stored responses so repeated searches during development
    do not hit the LLM behind the endpoints.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        from_cache: bool = False,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self.base_url = (base_url or resolve_api_base()).rstrip("/")
        self.from_cache = from_cache
        self.timeout = timeout
        self.sess = requests.Session()

        self.api_cache_prefix: str | None = API_CACHE_PREFIX if from_cache else None

        logger.debug(
            "API ready: base {!r}, from_cache {!r}, api_cache_prefix {!r}",
            self.base_url,
            self.from_cache,
            self.api_cache_prefix,
        )

        if self.api_cache_prefix:
            Path(self.api_cache_prefix).parent.mkdir(parents=True, exist_ok=True)

    def _cache_name(self, path: str, args: dict[str, Any]) -> str | None:
        if not self.api_cache_prefix:
            return None
        name_last = path
        if args:
            params_str = json.dumps(args, sort_keys=True, separators=(",", ":"))
            if len(params_str) > 64:
                params_str = hashlib.sha1(params_str.encode("utf-8")).hexdigest()
            name_last += "--" + params_str
        return self.api_cache_prefix + name_last.replace("/", "--")

    def call(self, path: str, args: dict[str, Any]) -> dict[str, Any]:
        """POST args as JSON to an endpoint and return the JSON object.

        Raises:
            requests.RequestException: The request could not be completed.
            ApiError: Non-success status, or a body that is not a JSON object.
        """
        cache_name = self._cache_name(path, args)
        if cache_name and Path(cache_name).exists():
            return self._read_cache(cache_name)

        logger.debug("Making request: {!r} {}", path, repr(args)[:32])

        r = self.sess.post(f"{self.base_url}/{path}", json=args, timeout=self.timeout)
        if not r.ok:
            msg = f"API call failed: {path!r} -> HTTP {r.status_code}"
            raise ApiError(msg, status_code=r.status_code)
        try:
            rv = r.json()
        except ValueError as e:
            msg = f"API call returned invalid JSON: {path!r}"
            raise ApiError(msg, status_code=r.status_code) from e
        if not isinstance(rv, dict):
            msg = f"API call returned {type(rv).__name__}, expected an object: {path!r}"
            raise ApiError(msg, status_code=r.status_code)

        if cache_name:
            self._write_cache(cache_name, r.text)

        return rv

    def _read_cache(self, cache_name: str) -> dict[str, Any]:
        logger.debug("Filled from cache: {!r}", cache_name)
        try:
            with open(cache_name, encoding="utf-8") as f:
                rv = json.load(f)
        except (OSError, ValueError) as e:
            msg = f"Unreadable cache file: {cache_name!r}"
            raise ApiError(msg) from e
        if not isinstance(rv, dict):
            msg = f"Cache file holds {type(rv).__name__}, expected an object: {cache_name!r}"
            raise ApiError(msg)
        return rv

    def _write_cache(self, cache_name: str, text: str) -> None:
        # Readers never see a partially written file.
        tmp_name = f"{cache_name}.tmp-{os.getpid()}"
        with open(tmp_name, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_name, cache_name)
