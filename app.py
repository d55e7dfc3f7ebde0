from __future__ import annotations

import logging
import random
import uuid
from typing import Optional

from flask import Blueprint, Flask, current_app, jsonify, request

from config import Settings, load_settings
from errors import ParkingError, ValidationError
from parking_system import ParkingSystem
from user_directory import DemoCredentialVerifier, HashedCredentialVerifier

logger = logging.getLogger(__name__)

api = Blueprint("api", __name__, url_prefix="/api")

ENDPOINTS = (
    "GET    /api/parking/<zone>",
    "GET    /api/zones",
    "POST   /api/reservations",
    "GET    /api/reservations/<userId>",
    "DELETE /api/reservations/<reservationId>",
    "POST   /api/login",
    "POST   /api/register",
    "GET    /api/statistics",
)


# -------------------------
# Helpers
# -------------------------
def system() -> ParkingSystem:
    return current_app.extensions["parking_system"]


def json_body(*required: str) -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    missing = [k for k in required if data.get(k) in (None, "")]
    if missing:
        raise ValidationError(f"Missing field(s): {', '.join(missing)}")
    return data


def text_field(data: dict, key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


def build_system(settings: Settings) -> ParkingSystem:
    if settings.auth_mode == "hashed":
        verifier = HashedCredentialVerifier()
    else:
        verifier = DemoCredentialVerifier()

    s = ParkingSystem(verifier=verifier)
    rng = random.Random(settings.random_seed) if settings.random_seed is not None else None
    s.initialize(rng=rng)
    return s


# -------------------------
# Spots / zones
# -------------------------
@api.route("/parking/<zone>", methods=["GET"])
def list_spots(zone):
    return jsonify([s.to_dict() for s in system().list_spots(zone)])


@api.route("/zones", methods=["GET"])
def list_zones():
    return jsonify({zid.value: z.to_dict() for zid, z in system().list_zones().items()})


# -------------------------
# Reservations
# -------------------------
@api.route("/reservations", methods=["POST"])
def create_reservation():
    data = json_body("zone", "spotId")
    r = system().create_reservation(
        zone=data["zone"],
        spot_id=str(data["spotId"]),
        date=text_field(data, "date"),
        start_time=text_field(data, "startTime"),
        end_time=text_field(data, "endTime"),
        user_id=text_field(data, "userId"),
        vehicle=text_field(data, "vehicle"),
    )
    return jsonify({
        "success": True,
        "reservation": r.to_dict(),
        "message": f"Spot {r.spot_id} reserved successfully!",
    })


@api.route("/reservations/<user_id>", methods=["GET"])
def user_reservations(user_id):
    return jsonify([r.to_dict() for r in system().list_reservations(user_id)])


@api.route("/reservations/<reservation_id>", methods=["DELETE"])
def cancel_reservation(reservation_id):
    system().cancel_reservation(reservation_id)
    return jsonify({"success": True, "message": "Reservation cancelled successfully!"})


# -------------------------
# Users
# -------------------------
@api.route("/login", methods=["POST"])
def login():
    data = json_body("username", "password")
    user = system().authenticate(str(data["username"]), str(data["password"]))
    return jsonify({
        "success": True,
        "user": user.public_dict(),
        "token": f"demo-token-{uuid.uuid4().hex}",
    })


@api.route("/register", methods=["POST"])
def register():
    data = json_body("username", "kluId", "password")
    user = system().register(
        username=str(data["username"]),
        email=text_field(data, "email"),
        klu_id=str(data["kluId"]),
        password=str(data["password"]),
        user_type=data.get("userType"),
    )
    return jsonify({
        "success": True,
        "user": user.to_dict(),
        "message": "Registration successful!",
    })


# -------------------------
# Statistics
# -------------------------
@api.route("/statistics", methods=["GET"])
def statistics():
    return jsonify(system().compute_statistics().to_dict())


# -------------------------
# App factory
# -------------------------
def create_app(
    parking: Optional[ParkingSystem] = None,
    settings: Optional[Settings] = None,
) -> Flask:
    settings = settings or load_settings()

    app = Flask(__name__)
    app.config["SETTINGS"] = settings
    app.extensions["parking_system"] = parking if parking is not None else build_system(settings)
    app.register_blueprint(api)

    @app.errorhandler(ParkingError)
    def handle_parking_error(e: ParkingError):
        if e.status_code >= 500:
            logger.error("Internal error: %s", e.message)
        return jsonify({"success": False, "error": e.message}), e.status_code

    @app.route("/health", methods=["GET"])
    def health():
        return {"status": "ok"}

    return app


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    app = create_app(settings=settings)

    logger.info("Campus parking API running at http://localhost:%d", settings.port)
    for line in ENDPOINTS:
        logger.info("  %s", line)

    app.run(host=settings.host, port=settings.port, debug=settings.debug)


if __name__ == "__main__":
    main()
