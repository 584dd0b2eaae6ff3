"""Flask web application exposing carlog over a JSON API."""

from typing import Optional

from flask import Flask, Response, jsonify, request

from carlog import (
    Accounts,
    CarlogError,
    DuplicateUsername,
    Garage,
    InsightProvider,
    InvalidCredentials,
    InvalidField,
    NotLoggedIn,
    RecordNotFound,
    ServiceType,
    Storage,
    VehicleNotFound,
    export_filename,
    request_insight,
)
from carlog.config import Config, configure_logging, load_config
from carlog.loader import car_to_dict, record_to_dict
from carlog.maintenance_record import is_iso_date

STATUS_CODES = {
    NotLoggedIn: 401,
    InvalidCredentials: 401,
    DuplicateUsername: 409,
    VehicleNotFound: 404,
    RecordNotFound: 404,
}


def user_json(user) -> dict:
    """Public view of a user (no password)."""
    return {"id": user.id, "name": user.name, "username": user.username}


def parse_int_field(data: dict, name: str, required: bool = True) -> Optional[int]:
    """Integer form field; raises InvalidField when it does not parse."""
    value = data.get(name)
    if value in (None, ""):
        if required:
            raise InvalidField(f"Campo obrigatório: {name}")
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidField(f"Valor inválido para {name}: {value}")


def required_text(data: dict, name: str) -> str:
    """Non-blank text field; raises InvalidField when missing or empty."""
    value = data.get(name)
    if not isinstance(value, str) or not value.strip():
        raise InvalidField(f"Campo obrigatório: {name}")
    return value


def parse_date_field(data: dict, name: str) -> str:
    """ISO calendar date (YYYY-MM-DD); raises InvalidField otherwise."""
    value = data.get(name)
    if value in (None, ""):
        raise InvalidField(f"Campo obrigatório: {name}")
    if not is_iso_date(value):
        raise InvalidField(f"Data inválida para {name}: {value}")
    return value


def parse_float_field(data: dict, name: str) -> Optional[float]:
    value = data.get(name)
    if value in (None, ""):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidField(f"Valor inválido para {name}: {value}")


def confirmed() -> bool:
    """Destructive routes need ?confirm=true."""
    return request.args.get("confirm", "").lower() == "true"


def create_app(
    config: Optional[Config] = None,
    storage: Optional[Storage] = None,
    insight_provider: Optional[InsightProvider] = None,
) -> Flask:
    config = config or load_config()
    storage = storage or config.storage()
    insight_provider = insight_provider or config.insight_provider()

    app = Flask(__name__)

    def accounts() -> Accounts:
        return Accounts(storage)

    def garage() -> Garage:
        return Garage.open(accounts())

    @app.errorhandler(CarlogError)
    def handle_carlog_error(e: CarlogError):
        return jsonify({"error": e.message}), STATUS_CODES.get(type(e), 400)

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    @app.route("/api/signup", methods=["POST"])
    def signup():
        data = request.get_json(silent=True) or {}
        user = accounts().register(
            required_text(data, "name"),
            required_text(data, "username"),
            required_text(data, "password"),
        )
        return jsonify(user_json(user)), 201

    @app.route("/api/login", methods=["POST"])
    def login():
        data = request.get_json(silent=True) or {}
        user = accounts().login(data.get("username", ""), data.get("password", ""))
        return jsonify(user_json(user))

    @app.route("/api/logout", methods=["POST"])
    def logout():
        accounts().logout()
        return "", 204

    @app.route("/api/me")
    def me():
        return jsonify(user_json(accounts().require_user()))

    @app.route("/api/password", methods=["POST"])
    def change_password():
        data = request.get_json(silent=True) or {}
        accounts().change_password(
            data.get("currentPassword", ""),
            data.get("newPassword", ""),
            data.get("confirmPassword", ""),
        )
        return "", 204

    # -------------------------------------------------------------------------
    # Vehicles
    # -------------------------------------------------------------------------

    @app.route("/api/cars", methods=["GET"])
    def list_cars():
        return jsonify([car_to_dict(c) for c in garage().cars])

    @app.route("/api/cars", methods=["POST"])
    def add_car():
        data = request.get_json(silent=True) or {}
        car = garage().add_car(
            make=required_text(data, "make"),
            model=required_text(data, "model"),
            year=parse_int_field(data, "year"),
            mileage=parse_int_field(data, "mileage"),
            plate=data.get("plate") or None,
            color=data.get("color") or None,
        )
        return jsonify(car_to_dict(car)), 201

    @app.route("/api/cars/<car_id>", methods=["DELETE"])
    def delete_car(car_id: str):
        if not confirmed():
            raise InvalidField("Confirmação necessária para excluir o veículo.")
        removed = garage().delete_car(car_id)
        return jsonify({"deletedRecords": removed})

    # -------------------------------------------------------------------------
    # Maintenance records
    # -------------------------------------------------------------------------

    def record_fields(data: dict, partial: bool) -> dict:
        fields = {}
        if "partName" in data or not partial:
            fields["part_name"] = required_text(data, "partName")
        if "type" in data or not partial:
            fields["type"] = ServiceType.parse(data.get("type"))
        if "date" in data or not partial:
            fields["date"] = parse_date_field(data, "date")
        if "mileage" in data or not partial:
            fields["mileage"] = parse_int_field(data, "mileage")
        if "cost" in data or not partial:
            fields["cost"] = parse_float_field(data, "cost") or 0
        if "notes" in data or not partial:
            fields["notes"] = data.get("notes") or None
        return fields

    @app.route("/api/cars/<car_id>/records", methods=["GET"])
    def list_records(car_id: str):
        g = garage()
        car = g.get_car(car_id)
        return jsonify([record_to_dict(r) for r in g.records_for_car(car.id)])

    @app.route("/api/cars/<car_id>/records", methods=["POST"])
    def add_record(car_id: str):
        data = request.get_json(silent=True) or {}
        record = garage().add_record(car_id, **record_fields(data, partial=False))
        return jsonify(record_to_dict(record)), 201

    @app.route("/api/records/<record_id>", methods=["PUT"])
    def edit_record(record_id: str):
        data = request.get_json(silent=True) or {}
        record = garage().edit_record(record_id, **record_fields(data, partial=True))
        return jsonify(record_to_dict(record))

    @app.route("/api/records/<record_id>", methods=["DELETE"])
    def delete_record(record_id: str):
        if not confirmed():
            raise InvalidField("Confirmação necessária para excluir o registro.")
        garage().delete_record(record_id)
        return "", 204

    # -------------------------------------------------------------------------
    # CSV
    # -------------------------------------------------------------------------

    @app.route("/api/export")
    def export():
        g = garage()
        filename = export_filename(g.user.username)
        return Response(
            g.export_csv(),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/cars/<car_id>/import", methods=["POST"])
    def import_records(car_id: str):
        upload = request.files.get("file")
        if upload is not None:
            text = upload.read().decode("utf-8", errors="replace")
        else:
            text = request.get_data().decode("utf-8", errors="replace")
        imported = garage().import_csv(text, car_id)
        return jsonify({"imported": len(imported)})

    # -------------------------------------------------------------------------
    # Dashboard and insight
    # -------------------------------------------------------------------------

    @app.route("/api/stats")
    def stats():
        g = garage()
        result = g.stats(request.args.get("year", type=int))
        return jsonify(
            {
                "year": result.year,
                "totalSpent": result.total_spent,
                "totalServices": result.total_services,
                "byMonth": result.by_month,
                "hasServiceInMonth": [
                    result.has_service_in_month[month] for month in range(12)
                ],
                "availableYears": g.available_years(),
            }
        )

    @app.route("/api/cars/<car_id>/insight", methods=["POST"])
    def insight(car_id: str):
        g = garage()
        car = g.get_car(car_id)
        text = request_insight(insight_provider, car, g.records_for_car(car.id))
        return jsonify({"insight": text})

    return app


if __name__ == "__main__":
    config = load_config()
    configure_logging(config.log_level)
    # Using 5001 to avoid conflict with macOS AirPlay Receiver on 5000
    create_app(config).run(debug=True, host="0.0.0.0", port=5001)
