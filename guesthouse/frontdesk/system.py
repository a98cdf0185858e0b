"""Core orchestration logic for the guesthouse front desk."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Mapping

from .backend import BackendClient, BackendError, parse_client
from .quotes import InvoiceStatus, QuoteDraft
from .validation import ValidationError, validate_client_for_save, validate_quote_for_save

logger = logging.getLogger(__name__)

__all__ = ["BackendError", "FrontDeskSystem", "ValidationError"]


def _matches(term: str | None, *values: str | None) -> bool:
    if not term:
        return True
    needle = term.strip().lower()
    return any(needle in (value or "").lower() for value in values)


def client_matches(client: Mapping[str, Any], term: str | None) -> bool:
    full_name = f"{client.get('first_name') or ''} {client.get('last_name') or ''}"
    return _matches(term, full_name, client.get("email_address"), client.get("company_name"))


def quote_matches(quote: QuoteDraft, term: str | None) -> bool:
    full_name = f"{quote.first_name or ''} {quote.last_name or ''}"
    return _matches(term, quote.quote_number, full_name)


def _created_id(body: Mapping[str, Any], key: str) -> int | None:
    value = body.get(key, body.get("id"))
    try:
        return int(value) if value is not None else None
    except (TypeError, ValueError):
        return None


class FrontDeskSystem:
    """High level façade over the backend for front-desk behaviours."""

    def __init__(self, backend: BackendClient) -> None:
        self.backend = backend

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------
    def list_clients(self, *, search: str | None = None) -> list[dict]:
        """Return clients matching ``search``; an empty list if the backend fails."""

        try:
            clients = self.backend.list_clients()
        except BackendError:
            logger.exception("Error fetching clients")
            return []
        return [client for client in clients if client_matches(client, search)]

    def get_client(self, client_id: int) -> dict:
        return self.backend.get_client(client_id)

    def create_client(self, *, data: Mapping[str, Any]) -> dict:
        client = parse_client(data)
        validate_client_for_save(client)
        body = self.backend.create_client(client)
        client["client_id"] = _created_id(body, "client_id")
        logger.info("Created client %s (%s)", client["client_id"], client["email_address"])
        return client

    def update_client(self, *, client_id: int, data: Mapping[str, Any]) -> dict:
        client = parse_client(data)
        validate_client_for_save(client)
        self.backend.update_client(client_id, client)
        client["client_id"] = client_id
        logger.info("Updated client %s", client_id)
        return client

    def delete_client(self, *, client_id: int) -> None:
        self.backend.delete_client(client_id)
        logger.info("Deleted client %s", client_id)

    # ------------------------------------------------------------------
    # Quotes
    # ------------------------------------------------------------------
    def list_quotes(
        self, *, search: str | None = None, status: InvoiceStatus | None = None
    ) -> list[QuoteDraft]:
        """Return quotes matching ``search`` and ``status``.

        Older endpoints ignore the status filter, so it is applied again here.
        An empty list is returned if the backend fails.
        """

        try:
            quotes = self.backend.list_quotes(status=status)
        except BackendError:
            logger.exception("Error fetching quotes")
            return []
        return [
            quote
            for quote in quotes
            if (status is None or quote.invoice_status is status) and quote_matches(quote, search)
        ]

    def list_invoices(self, *, search: str | None = None) -> list[QuoteDraft]:
        return self.list_quotes(search=search, status=InvoiceStatus.INVOICED)

    def get_quote(self, quote_id: int) -> QuoteDraft:
        return self.backend.get_quote(quote_id)

    def draft_quote(self, data: Mapping[str, Any]) -> QuoteDraft:
        """Build a draft from a raw payload, for pricing or saving."""

        try:
            return QuoteDraft.from_mapping(data)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

    def create_quote(self, *, draft: QuoteDraft) -> QuoteDraft:
        """Save a new quote; new quotes always start unpaid."""

        validate_quote_for_save(draft.to_dict())
        draft = replace(draft, invoice_status=InvoiceStatus.UNPAID)
        body = self.backend.create_quote(draft)
        created = draft.with_fields(
            quote_id=_created_id(body, "quote_id"),
            quote_number=(
                str(body["quote_number"]) if body.get("quote_number") else draft.quote_number
            ),
        )
        logger.info("Created quote %s for client %s", created.quote_id, created.client_id)
        return created

    def update_quote(self, *, quote_id: int, draft: QuoteDraft) -> QuoteDraft:
        """Save edits to a quote; its invoice status stays as stored."""

        validate_quote_for_save(draft.to_dict())
        stored = self.get_quote(quote_id)
        self.backend.update_quote(quote_id, draft)
        logger.info("Updated quote %s", quote_id)
        return replace(
            draft,
            quote_id=quote_id,
            quote_number=draft.quote_number or stored.quote_number,
            invoice_status=stored.invoice_status,
        )

    def invoice_quote(self, *, quote_id: int) -> QuoteDraft:
        """Advance an unpaid quote to ``INVOICED``."""

        invoiced = self.get_quote(quote_id).mark_invoiced()
        self.backend.set_invoice_status(quote_id, InvoiceStatus.INVOICED)
        logger.info("Invoiced quote %s", quote_id)
        return invoiced

    def delete_quote(self, *, quote_id: int) -> None:
        self.backend.delete_quote(quote_id)
        logger.info("Deleted quote %s", quote_id)
