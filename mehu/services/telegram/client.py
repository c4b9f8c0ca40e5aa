# mehu/services/telegram/client.py
from __future__ import annotations

from typing import Any, List, Mapping, Optional, Sequence

import requests
from pydantic import BaseModel, ValidationError

from mehu.common.logging import get_logger
from mehu.domain.errors import ApiError, MalformedResponse, StartupError, TransportError
from mehu.services.telegram.schemas import (
    ApiResponse,
    GetUpdates,
    GetUpdatesResponse,
    Update,
    User,
)

logger = get_logger(__name__)


class BotApiClient:
    """
    Blocking HTTP client for the Bot API (``<base_url>/bot<token>/<method>``).

    Every call either returns the decoded ``result`` or raises:
      - TransportError     network/HTTP failure
      - ApiError           ``ok: false`` (subclass of TransportError)
      - MalformedResponse  body is not the JSON envelope we expect
    Nothing is retried here.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.telegram.org",
        request_timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not api_key:
            raise StartupError("API key required.")
        self._base = f"{base_url.rstrip('/')}/bot{api_key}"
        self.request_timeout = request_timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": "mehu/0.1"})

    def _url(self, method: str) -> str:
        return f"{self._base}/{method}"

    def close(self) -> None:
        self.session.close()

    # ------------------------------------------------------------------ core
    def _post(self, method: str, payload: Mapping[str, Any], *, timeout: float) -> Any:
        try:
            r = self.session.post(self._url(method), json=dict(payload), timeout=timeout)
        except requests.RequestException as e:
            raise TransportError(f"{method}: {e}") from e

        try:
            body = r.json()
        except ValueError as e:
            # Non-JSON error pages (proxies, 5xx) land here too
            if r.status_code >= 400:
                raise TransportError(f"{method}: HTTP {r.status_code}") from e
            raise MalformedResponse(f"{method}: response is not JSON") from e

        try:
            envelope = ApiResponse.model_validate(body)
        except ValidationError as e:
            raise MalformedResponse(f"{method}: unexpected response envelope: {e}") from e

        if not envelope.ok:
            raise ApiError(method, envelope.description or "", envelope.error_code or r.status_code)
        return body

    def send_request(self, method: str, payload: Mapping[str, Any] | BaseModel) -> Any:
        """POST ``payload`` to ``method`` and return the raw ``result``."""
        if isinstance(payload, BaseModel):
            payload = payload.model_dump(mode="json", exclude_none=True)
        body = self._post(method, payload, timeout=self.request_timeout)
        # ok: true without a result decodes to None; typed callers reject that
        return ApiResponse.model_validate(body).result

    # --------------------------------------------------------------- polling
    def get_updates(
        self,
        *,
        offset: Optional[int] = None,
        timeout: int = 60,
        allowed_updates: Optional[Sequence[str]] = None,
    ) -> List[Update]:
        """
        Long-poll for updates. The HTTP timeout is the hold time plus a margin
        so the server, not the socket, ends an idle poll.
        """
        req = GetUpdates(offset=offset, timeout=timeout, allowed_updates=list(allowed_updates) if allowed_updates else None)
        body = self._post("getUpdates", req.model_dump(exclude_none=True), timeout=timeout + self.request_timeout)
        try:
            return GetUpdatesResponse.model_validate(body).result
        except ValidationError as e:
            raise MalformedResponse(f"getUpdates: cannot decode updates: {e}") from e

    # ---------------------------------------------------------------- sends
    def get_me(self) -> User:
        result = self.send_request("getMe", {})
        try:
            return User.model_validate(result)
        except ValidationError as e:
            raise MalformedResponse(f"getMe: {e}") from e

