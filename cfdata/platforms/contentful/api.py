"""Contentful Management API transport.

Entries, assets, uploads and asset processing go through the
``contentful_management`` SDK. The SDK has no bulk action support, so those
three endpoints are called directly over a ``requests.Session``.
"""

from __future__ import annotations

import io
import json
import random
import time
from enum import Enum
from typing import Any, Callable, Mapping, TypeVar
from urllib.parse import urlsplit

import contentful_management
import requests
from contentful_management.errors import HTTPError, RateLimitExceededError

from ...settings import AppConfig
from ...utils.logging import get_logger
from .credentials import ContentfulCredentials

LOGGER = get_logger(__name__)

_CMA_CONTENT_TYPE = "application/vnd.contentful.management.v1+json"

_R = TypeVar("_R")


class ErrorKind(str, Enum):
    """Failure categories surfaced to the command line."""

    AUTH = "auth"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION = "validation"
    RATE_LIMIT = "rate_limit"
    TRANSPORT = "transport"
    PROCESSING = "processing"
    UNKNOWN = "unknown"


def kind_for_status(status: int) -> ErrorKind:
    if status in (401, 403):
        return ErrorKind.AUTH
    if status == 404:
        return ErrorKind.NOT_FOUND
    if status == 409:
        return ErrorKind.CONFLICT
    if status in (400, 422):
        return ErrorKind.VALIDATION
    if status == 429:
        return ErrorKind.RATE_LIMIT
    if status >= 500:
        return ErrorKind.TRANSPORT
    return ErrorKind.UNKNOWN


class ContentfulApiError(RuntimeError):
    """Raised when Contentful Management API calls fail."""

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind = ErrorKind.UNKNOWN,
        status: int | None = None,
        details: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.status = status
        self.details = dict(details or {})

    def __str__(self) -> str:
        base = super().__str__()
        if self.status is not None:
            base = f"{base} (HTTP {self.status})"
        if not self.details:
            return base
        try:
            detail_repr = json.dumps(self.details, ensure_ascii=False)
        except TypeError:
            detail_repr = str(self.details)
        return f"{base} | details: {detail_repr}"


def _host(url: str) -> str:
    return urlsplit(url).netloc or url.strip("/")


def _raw(resource: Any) -> dict[str, Any]:
    return dict(resource.raw)


class ContentfulManagementClient:
    """Adapter over the Contentful SDK for one space and environment.

    ``sdk_client`` is a ``contentful_management.Client`` built with SDK-side
    rate limit retries disabled; 429 responses are retried here so that every
    attempt gets a fresh request body. The ``requests.Session`` only carries
    bulk action calls. Both are shared by calls issued from worker threads.
    """

    def __init__(
        self,
        sdk_client: Any,
        *,
        access_token: str,
        space_id: str,
        environment_id: str = "master",
        base_url: str = "https://api.contentful.com",
        timeout: float = 30.0,
        max_attempts: int = 5,
        backoff_factor: float = 1.5,
        session: requests.Session | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._space_id = space_id
        self._environment_id = environment_id
        self._entries = sdk_client.entries(space_id, environment_id)
        self._assets = sdk_client.assets(space_id, environment_id)
        self._uploads = sdk_client.uploads(space_id)
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_attempts = max(1, max_attempts)
        self._backoff_factor = backoff_factor
        self._sleep = sleep
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {access_token}",
                "Content-Type": _CMA_CONTENT_TYPE,
            }
        )

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        credentials: ContentfulCredentials,
        *,
        session: requests.Session | None = None,
    ) -> "ContentfulManagementClient":
        sdk_client = contentful_management.Client(
            credentials.access_token,
            api_url=_host(config.contentful.base_url),
            uploads_api_url=_host(config.contentful.upload_url),
            max_rate_limit_retries=0,
        )
        return cls(
            sdk_client,
            access_token=credentials.access_token,
            space_id=credentials.space_id,
            environment_id=config.contentful.environment_id,
            base_url=config.contentful.base_url,
            timeout=config.http.timeout,
            max_attempts=config.http.max_attempts,
            backoff_factor=config.http.backoff_factor,
            session=session,
        )

    @property
    def space_id(self) -> str:
        return self._space_id

    @property
    def environment_id(self) -> str:
        return self._environment_id

    # Entries

    def query_entries(self, params: Mapping[str, Any]) -> dict[str, Any]:
        return self._query("query entries", self._entries, params)

    def create_entry(self, content_type_id: str, body: Mapping[str, Any]) -> dict[str, Any]:
        attributes = {"content_type_id": content_type_id, **body}
        return _raw(self._call("create entry", lambda: self._entries.create(None, attributes)))

    def delete_entry(self, entry_id: str) -> None:
        self._call("delete entry", lambda: self._entries.delete(entry_id))

    # Assets

    def query_assets(self, params: Mapping[str, Any]) -> dict[str, Any]:
        return self._query("query assets", self._assets, params)

    def get_asset(self, asset_id: str) -> dict[str, Any]:
        return _raw(self._call("get asset", lambda: self._assets.find(asset_id)))

    def create_asset(self, body: Mapping[str, Any]) -> dict[str, Any]:
        return _raw(self._call("create asset", lambda: self._assets.create(None, dict(body))))

    def update_asset_metadata(self, asset_id: str, metadata: Mapping[str, Any]) -> dict[str, Any]:
        def update() -> Any:
            asset = self._assets.find(asset_id)
            return asset.update({"metadata": dict(metadata)})

        return _raw(self._call("update asset", update))

    def process_asset(self, asset_id: str) -> None:
        self._call("process asset", lambda: self._assets.find(asset_id).process())

    def delete_asset(self, asset_id: str) -> None:
        self._call("delete asset", lambda: self._assets.delete(asset_id))

    def create_upload(self, data: bytes) -> dict[str, Any]:
        # A new stream per attempt; a retried upload must resend every byte.
        return _raw(self._call("upload file", lambda: self._uploads.create(io.BytesIO(data))))

    # Bulk actions

    def bulk_publish(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        return self._request("POST", self._environment_url("bulk_actions", "publish"), payload)

    def bulk_unpublish(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        return self._request("POST", self._environment_url("bulk_actions", "unpublish"), payload)

    def get_bulk_action(self, action_id: str) -> dict[str, Any]:
        return self._request("GET", self._environment_url("bulk_actions", "actions", action_id))

    def _query(self, operation: str, proxy: Any, params: Mapping[str, Any]) -> dict[str, Any]:
        result = self._call(operation, lambda: proxy.all(dict(params)))
        items = [_raw(item) for item in result]
        return {"items": items, "total": getattr(result, "total", len(items))}

    def _call(self, operation: str, func: Callable[[], _R]) -> _R:
        attempt = 0
        while True:
            attempt += 1
            try:
                return func()
            except RateLimitExceededError as exc:
                if attempt >= self._max_attempts:
                    raise self._sdk_error(operation, exc) from exc
                self._wait_for_rate_limit(getattr(exc, "response", None), attempt)
            except HTTPError as exc:
                raise self._sdk_error(operation, exc) from exc
            except requests.RequestException as exc:
                raise ContentfulApiError(
                    "Could not reach Contentful",
                    kind=ErrorKind.TRANSPORT,
                    details={"operation": operation, "reason": str(exc)},
                ) from exc

    def _sdk_error(self, operation: str, exc: HTTPError) -> ContentfulApiError:
        response = getattr(exc, "response", None)
        status = getattr(exc, "status_code", None) or getattr(response, "status_code", None)
        body = self._error_body(response) if response is not None else {}
        error_sys = body.get("sys", {}) if isinstance(body.get("sys"), dict) else {}
        return ContentfulApiError(
            body.get("message") or f"Could not {operation}",
            kind=kind_for_status(status) if status else ErrorKind.UNKNOWN,
            status=status,
            details={
                "operation": operation,
                "error": error_sys.get("id"),
                "requestId": body.get("requestId"),
                "details": body.get("details"),
            },
        )

    def _environment_url(self, *parts: str) -> str:
        prefix = (
            f"{self._base_url}/spaces/{self._space_id}/environments/{self._environment_id}"
        )
        return "/".join((prefix, *parts))

    def _request(
        self, method: str, url: str, json_body: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        attempt = 0
        while True:
            attempt += 1
            try:
                response = self._session.request(
                    method,
                    url,
                    json=json_body,
                    timeout=self._timeout,
                )
            except requests.RequestException as exc:
                raise ContentfulApiError(
                    "Could not reach Contentful",
                    kind=ErrorKind.TRANSPORT,
                    details={"method": method, "url": url, "reason": str(exc)},
                ) from exc

            if response.status_code == 429 and attempt < self._max_attempts:
                self._wait_for_rate_limit(response, attempt)
                continue

            return self._parse(method, url, response)

    def _parse(self, method: str, url: str, response: requests.Response) -> dict[str, Any]:
        status = response.status_code
        if status >= 400:
            body = self._error_body(response)
            error_sys = body.get("sys", {}) if isinstance(body.get("sys"), dict) else {}
            raise ContentfulApiError(
                body.get("message") or f"{method} {url} failed",
                kind=kind_for_status(status),
                status=status,
                details={
                    "method": method,
                    "url": url,
                    "error": error_sys.get("id"),
                    "requestId": body.get("requestId"),
                    "details": body.get("details"),
                },
            )

        if status == 204 or not response.content:
            return {}

        try:
            data = response.json()
        except ValueError as exc:
            raise ContentfulApiError(
                "Could not parse Contentful response",
                status=status,
                details={"method": method, "url": url, "response": response.text[:200]},
            ) from exc
        if not isinstance(data, dict):
            raise ContentfulApiError(
                "Unexpected Contentful response shape",
                status=status,
                details={"method": method, "url": url},
            )
        return data

    def _error_body(self, response: Any) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            return {"message": (getattr(response, "text", "") or "")[:200] or None}
        return data if isinstance(data, dict) else {}

    def _wait_for_rate_limit(self, response: Any, attempt: int) -> None:
        wait_seconds = self._compute_retry_wait(response, attempt)
        LOGGER.warning(
            "Rate limited by Contentful; retrying",
            extra={
                "event": "contentful.rate_limited",
                "attempt": attempt,
                "wait_seconds": round(wait_seconds, 2),
            },
        )
        self._sleep(wait_seconds)

    def _compute_retry_wait(self, response: Any, attempt: int) -> float:
        headers = getattr(response, "headers", None) or {}
        retry_after = headers.get("X-Contentful-RateLimit-Reset") or headers.get("Retry-After")
        wait_seconds = 0.0
        if retry_after:
            try:
                wait_seconds = float(retry_after)
            except (TypeError, ValueError):
                wait_seconds = 0.0
        if wait_seconds <= 0:
            wait_seconds = self._backoff_factor * attempt
        jitter = random.uniform(0, 0.25 * wait_seconds)
        return wait_seconds + jitter


__all__ = [
    "ContentfulApiError",
    "ContentfulManagementClient",
    "ErrorKind",
    "kind_for_status",
]
