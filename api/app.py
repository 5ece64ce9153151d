"""Flask REST API exposing the profit tracker services."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS

from ledger.exceptions import PersistenceError, RecordNotFoundError, ValidationError
from ledger.logging_utils import configure_logging
from ledger.models import TransactionKind, format_amount
from ledger.services import (
    BusinessRegistry,
    ReportService,
    TransactionService,
    record_transaction,
    revise_transaction,
)
from ledger.storage import DocumentStore


def create_app(data_dir: Optional[Path] = None) -> Flask:
    app = Flask(__name__)
    configure_logging()

    env_name = os.getenv("PROFIT_TRACKER_ENV", "prod").lower()
    if env_name in {"dev", "development"}:
        CORS(app, resources={r"/*": {"origins": "*"}}, supports_credentials=True)
    else:
        allowed_origins = os.getenv("PROFIT_TRACKER_ALLOWED_ORIGINS")
        if allowed_origins:
            origins = [origin.strip() for origin in allowed_origins.split(",") if origin.strip()]
            CORS(app, resources={r"/*": {"origins": origins}}, supports_credentials=True)
        else:
            CORS(app)

    storage = DocumentStore(Path(data_dir or os.getenv("PROFIT_TRACKER_DATA_DIR", "data")))
    registry = BusinessRegistry(storage)
    services = {
        kind: TransactionService(storage, kind) for kind in TransactionKind
    }
    reports = ReportService(services[TransactionKind.CREDIT], services[TransactionKind.EXPENSE])

    def _success(payload: Any, status: int = 200):
        if status == 204:
            return ("", status)
        return jsonify(payload), status

    def _handle_error(exc: Exception, status: int, message: str):
        app.logger.error("%s: %s", message, exc)
        return jsonify({"error": message, "details": str(exc)}), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error")

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc: RecordNotFoundError):
        return _handle_error(exc, 404, "Record not found")

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        return _handle_error(exc, 500, "Persistence error")

    def _json_body() -> Dict[str, Any]:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Malformed JSON body")
        return data

    def _filters() -> Dict[str, str]:
        raw = {
            "business": request.args.get("business"),
            "start": request.args.get("start"),
            "end": request.args.get("end"),
        }
        return {k: v for k, v in raw.items() if v not in (None, "")}

    @app.get("/businesses")
    def list_businesses():
        return _success({"items": [business.to_dict() for business in registry.list()]})

    @app.post("/businesses")
    def ensure_business():
        payload = _json_body()
        name = payload.get("name")
        existed = isinstance(name, str) and registry.exists(name.strip())
        business = registry.ensure(name)
        return _success(business.to_dict(), 200 if existed else 201)

    @app.get("/businesses/<path:name>/report")
    def business_report(name: str):
        report = reports.business_report(name)
        return _success({
            "summary": report["summary"].to_dict(),
            "credits": [record.to_dict() for record in report["credits"]],
            "expenses": [record.to_dict() for record in report["expenses"]],
            "skipped": report["skipped"],
        })

    def _register_transaction_routes(kind: TransactionKind, service: TransactionService) -> None:
        collection = kind.collection

        def list_records():
            applied = _filters()
            records = service.list(**applied)
            total = service.total(**applied)
            return _success({
                "items": [record.to_dict() for record in records],
                "total": format_amount(total),
            })

        def create_record():
            transaction = record_transaction(registry, service, _json_body())
            return _success(transaction.to_dict(), 201)

        def get_record(record_id: str):
            return _success(service.get(record_id).to_dict())

        def update_record(record_id: str):
            transaction = revise_transaction(registry, service, record_id, _json_body())
            return _success(transaction.to_dict())

        def delete_record(record_id: str):
            service.delete(record_id)
            return _success({}, 204)

        app.add_url_rule(f"/{collection}", f"list_{collection}", list_records, methods=["GET"])
        app.add_url_rule(f"/{collection}", f"create_{kind.value}", create_record, methods=["POST"])
        app.add_url_rule(
            f"/{collection}/<record_id>", f"get_{kind.value}", get_record, methods=["GET"]
        )
        app.add_url_rule(
            f"/{collection}/<record_id>", f"update_{kind.value}", update_record, methods=["PUT"]
        )
        app.add_url_rule(
            f"/{collection}/<record_id>", f"delete_{kind.value}", delete_record, methods=["DELETE"]
        )

    for kind, service in services.items():
        _register_transaction_routes(kind, service)

    @app.get("/summary")
    def summary():
        return _success(reports.summary().to_dict())

    @app.get("/ranking")
    def ranking():
        return _success({"items": [entry.to_dict() for entry in reports.ranking()]})

    return app
