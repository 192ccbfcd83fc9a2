from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

import requests
from requests import Response

from .upstream_errors import PayloadShapeError, TransportFailure, UpstreamStatusError


class JsonHttpClient:
    """GET-only JSON client shared by the upstream clients.

    Transport problems, non-2xx statuses and undecodable bodies are mapped onto the
    ``UpstreamError`` hierarchy; nothing is retried.
    """

    def __init__(
        self,
        *,
        base_url: str,
        name: str,
        headers: Mapping[str, str] | None = None,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        if not base_url:
            msg = "base_url must be provided"
            raise ValueError(msg)

        self.base_url = base_url.rstrip("/")
        self.name = name
        self.headers = dict(headers or {})
        self.timeout = timeout
        self._session = session or requests.Session()

    def get(self, path: str, *, params: dict[str, Any] | None = None) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = self._session.request(
                "GET",
                url,
                params=params,
                timeout=self.timeout,
                headers=self.headers,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            resp = exc.response
            status_code = getattr(resp, "status_code", None)
            payload = self._error_payload(resp) if resp is not None else None
            raise UpstreamStatusError(
                f"{self.name} request failed with status {status_code}", status_code=status_code, payload=payload
            ) from exc
        except requests.RequestException as exc:
            raise TransportFailure(f"{self.name} request failed: {exc}") from exc

        try:
            payload_raw = response.json()
        except ValueError as exc:
            raise PayloadShapeError(f"{self.name} returned invalid JSON", payload=response.text) from exc

        if not isinstance(payload_raw, dict):
            raise PayloadShapeError(f"{self.name} returned unexpected payload type", payload=payload_raw)

        return payload_raw

    @staticmethod
    def _error_payload(response: Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text


def require_decimal(payload: Mapping[str, Any], field: str, *, source: str) -> Decimal:
    """Read a required JSON number field, raising ``PayloadShapeError`` instead of defaulting.

    Numeric strings are rejected: every upstream sends prices as JSON numbers.
    """
    if field not in payload:
        raise PayloadShapeError(f"{source} payload missing '{field}'", payload=dict(payload))
    value = payload[field]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PayloadShapeError(f"{source} payload field '{field}' is not a number", payload=dict(payload))
    parsed = Decimal(str(value))
    if not parsed.is_finite():
        raise PayloadShapeError(f"{source} payload field '{field}' is not finite", payload=dict(payload))
    return parsed


def optional_decimal(payload: Mapping[str, Any], field: str, *, source: str) -> Decimal | None:
    if payload.get(field) is None:
        return None
    return require_decimal(payload, field, source=source)


def require_mapping(payload: Mapping[str, Any], field: str, *, source: str) -> dict[str, Any]:
    value = payload.get(field)
    if not isinstance(value, dict):
        raise PayloadShapeError(f"{source} payload missing object '{field}'", payload=dict(payload))
    return value


__all__ = ["JsonHttpClient", "optional_decimal", "require_decimal", "require_mapping"]
