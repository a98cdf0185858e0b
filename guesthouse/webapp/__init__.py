"""Flask application exposing the front desk as a JSON API."""

from __future__ import annotations

import logging
from typing import Any

from flask import Flask, jsonify, request

from guesthouse.frontdesk.backend import DEFAULT_TIMEOUT, BackendClient
from guesthouse.frontdesk.pricing import format_money
from guesthouse.frontdesk.quotes import InvoiceStatus, QuoteDraft
from guesthouse.frontdesk.system import BackendError, FrontDeskSystem, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://www.milkandhoneybnb.com/api"


def _request_data() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def _quote_json(quote: QuoteDraft) -> dict[str, Any]:
    payload = quote.to_payload(encode_dates=False)
    payload["client_name"] = quote.client_name
    payload["total_display"] = format_money(quote.totals.total)
    return payload


def create_app(
    api_base_url: str | None = None,
    *,
    timeout: float | None = None,
    system: FrontDeskSystem | None = None,
) -> Flask:
    """Create and configure the Flask application.

    Settings default to the arguments given here and may be overridden by
    ``GUESTHOUSE_``-prefixed environment variables.
    """

    app = Flask(__name__)
    app.config.from_mapping(
        SECRET_KEY="guesthouse-secret",
        API_BASE_URL=api_base_url or DEFAULT_API_BASE_URL,
        API_TIMEOUT=timeout or DEFAULT_TIMEOUT,
        API_RESOURCE_SUFFIX=".php",
    )
    app.config.from_prefixed_env("GUESTHOUSE")

    if system is None:
        backend = BackendClient(
            app.config["API_BASE_URL"],
            timeout=float(app.config["API_TIMEOUT"]),
            resource_suffix=app.config["API_RESOURCE_SUFFIX"],
        )
        system = FrontDeskSystem(backend)
    app.extensions["frontdesk"] = system

    @app.errorhandler(ValidationError)
    def validation_failed(exc: ValidationError) -> Any:
        return jsonify(error=str(exc)), 400

    @app.errorhandler(BackendError)
    def backend_failed(exc: BackendError) -> Any:
        if exc.status_code == 404:
            return jsonify(error="Record not found"), 404
        logger.error("Backend request failed: %s", exc)
        return jsonify(error="The booking service is unavailable. Please try again."), 502

    @app.get("/health")
    def health() -> Any:
        return jsonify(status="ok")

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------
    @app.get("/clients")
    def list_clients() -> Any:
        return jsonify(system.list_clients(search=request.args.get("search")))

    @app.post("/clients")
    def create_client() -> Any:
        return jsonify(system.create_client(data=_request_data())), 201

    @app.get("/clients/<int:client_id>")
    def client_detail(client_id: int) -> Any:
        return jsonify(system.get_client(client_id))

    @app.put("/clients/<int:client_id>")
    def update_client(client_id: int) -> Any:
        return jsonify(system.update_client(client_id=client_id, data=_request_data()))

    @app.delete("/clients/<int:client_id>")
    def delete_client(client_id: int) -> Any:
        system.delete_client(client_id=client_id)
        return "", 204

    # ------------------------------------------------------------------
    # Quotes & invoices
    # ------------------------------------------------------------------
    @app.get("/quotes")
    def list_quotes() -> Any:
        status_arg = request.args.get("status")
        try:
            status = InvoiceStatus.parse(status_arg) if status_arg else None
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        quotes = system.list_quotes(search=request.args.get("search"), status=status)
        return jsonify([_quote_json(quote) for quote in quotes])

    @app.post("/quotes")
    def create_quote() -> Any:
        draft = system.draft_quote(_request_data())
        return jsonify(_quote_json(system.create_quote(draft=draft))), 201

    @app.post("/quotes/preview")
    def preview_quote() -> Any:
        return jsonify(_quote_json(system.draft_quote(_request_data())))

    @app.get("/quotes/<int:quote_id>")
    def quote_detail(quote_id: int) -> Any:
        return jsonify(_quote_json(system.get_quote(quote_id)))

    @app.put("/quotes/<int:quote_id>")
    def update_quote(quote_id: int) -> Any:
        draft = system.draft_quote(_request_data())
        return jsonify(_quote_json(system.update_quote(quote_id=quote_id, draft=draft)))

    @app.post("/quotes/<int:quote_id>/invoice")
    def invoice_quote(quote_id: int) -> Any:
        return jsonify(_quote_json(system.invoice_quote(quote_id=quote_id)))

    @app.delete("/quotes/<int:quote_id>")
    def delete_quote(quote_id: int) -> Any:
        system.delete_quote(quote_id=quote_id)
        return "", 204

    @app.get("/invoices")
    def list_invoices() -> Any:
        invoices = system.list_invoices(search=request.args.get("search"))
        return jsonify([_quote_json(quote) for quote in invoices])

    return app
