"""HTTP adapter for the guesthouse REST backend.

Every payload crossing this boundary is parsed into typed values here, so
nothing downstream sees the backend's string-encoded numbers or
JSON-encoded date arrays.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

import requests

from .fields import to_count
from .quotes import InvoiceStatus, QuoteDraft

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
CLIENT_FIELDS = (
    "first_name",
    "last_name",
    "email_address",
    "phone_number",
    "company_name",
    "company_address",
    "company_vat_number",
    "company_website",
)


class BackendError(RuntimeError):
    """Raised when the backend cannot be reached or rejects a request."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def parse_client(data: Mapping[str, Any]) -> dict:
    """Normalize a client record: integer id, trimmed text, blanks as None."""

    client: dict[str, Any] = {"client_id": to_count(data.get("client_id")) or None}
    for key in CLIENT_FIELDS:
        value = data.get(key)
        text = str(value).strip() if value is not None else ""
        client[key] = text or None
    return client


def client_payload(data: Mapping[str, Any]) -> dict:
    record = parse_client(data)
    record.pop("client_id")
    return record


def parse_quote(data: Mapping[str, Any]) -> QuoteDraft:
    try:
        return QuoteDraft.from_mapping(data)
    except ValueError as exc:
        raise BackendError(f"Malformed quote record: {exc}") from exc


class BackendClient:
    """Thin client over the ``clients`` and ``quotes`` resources."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        resource_suffix: str = "",
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.resource_suffix = resource_suffix
        self.session = session or requests.Session()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _url(self, resource: str) -> str:
        return f"{self.base_url}/{resource}{self.resource_suffix}"

    def _request(
        self,
        method: str,
        resource: str,
        *,
        record_id: int | None = None,
        params: dict | None = None,
        payload: dict | None = None,
    ) -> Any:
        query = dict(params or {})
        if record_id is not None:
            query["id"] = record_id
        url = self._url(resource)
        try:
            response = self.session.request(
                method, url, params=query or None, json=payload, timeout=self.timeout
            )
        except requests.RequestException as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            raise BackendError(f"Backend unavailable: {exc}") from exc
        if not response.ok:
            logger.error("%s %s returned HTTP %s", method, url, response.status_code)
            raise BackendError(
                f"Backend returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise BackendError("Backend returned a non-JSON response") from exc

    def _write(self, method: str, resource: str, **kwargs: Any) -> dict:
        # Write acknowledgements vary: a record, a message string or nothing.
        body = self._request(method, resource, **kwargs)
        return body if isinstance(body, dict) else {}

    def _fetch_list(self, resource: str, params: dict | None = None) -> list[dict]:
        body = self._request("GET", resource, params=params)
        if body is None:
            return []
        if not isinstance(body, list) or not all(isinstance(row, dict) for row in body):
            raise BackendError(f"Expected a list of {resource}")
        return body

    def _fetch_one(self, resource: str, record_id: int) -> dict:
        body = self._request("GET", resource, record_id=record_id)
        if isinstance(body, list):
            body = body[0] if body else None
        if not isinstance(body, dict) or not body:
            raise BackendError(f"{resource[:-1].capitalize()} not found", status_code=404)
        return body

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------
    def list_clients(self) -> list[dict]:
        return [parse_client(row) for row in self._fetch_list("clients")]

    def get_client(self, client_id: int) -> dict:
        return parse_client(self._fetch_one("clients", client_id))

    def create_client(self, client: Mapping[str, Any]) -> dict:
        return self._write("POST", "clients", payload=client_payload(client))

    def update_client(self, client_id: int, client: Mapping[str, Any]) -> dict:
        return self._write(
            "PUT", "clients", record_id=client_id, payload=client_payload(client)
        )

    def delete_client(self, client_id: int) -> None:
        self._request("DELETE", "clients", record_id=client_id)

    # ------------------------------------------------------------------
    # Quotes
    # ------------------------------------------------------------------
    def list_quotes(self, *, status: InvoiceStatus | None = None) -> list[QuoteDraft]:
        params = {"status": status.value} if status is not None else None
        quotes = []
        for row in self._fetch_list("quotes", params):
            try:
                quotes.append(parse_quote(row))
            except BackendError as exc:
                logger.warning("Skipping quote %s: %s", row.get("quote_id"), exc)
        return quotes

    def get_quote(self, quote_id: int) -> QuoteDraft:
        return parse_quote(self._fetch_one("quotes", quote_id))

    def create_quote(self, draft: QuoteDraft) -> dict:
        payload = self._quote_payload(draft)
        payload["invoice_status"] = InvoiceStatus.UNPAID.value
        return self._write("POST", "quotes", payload=payload)

    def update_quote(self, quote_id: int, draft: QuoteDraft) -> dict:
        # Status only moves through set_invoice_status.
        payload = self._quote_payload(draft)
        payload.pop("invoice_status")
        return self._write("PUT", "quotes", record_id=quote_id, payload=payload)

    def set_invoice_status(self, quote_id: int, status: InvoiceStatus) -> dict:
        return self._write(
            "PUT", "quotes", record_id=quote_id, payload={"invoice_status": status.value}
        )

    def delete_quote(self, quote_id: int) -> None:
        self._request("DELETE", "quotes", record_id=quote_id)

    @staticmethod
    def _quote_payload(draft: QuoteDraft) -> dict:
        payload = draft.to_payload()
        for key in ("quote_id", "first_name", "last_name"):
            payload.pop(key, None)
        return payload
