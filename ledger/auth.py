# ledger/auth.py
import logging

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required

from . import sessions
from .errors import ValidationError, error_response

logger = logging.getLogger("ledger-backend")

auth_bp = Blueprint("auth", __name__)


def json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def get_engine():
    return current_app.extensions["ledger_engine"]


@auth_bp.route("/signup", methods=["POST"])
def signup():
    data = json_body()
    user_id, error = get_engine().open_account(
        name=data.get("name"),
        email=data.get("email"),
        password=data.get("password"),
        initial_balance=data.get("initialBalance"),
        dob=data.get("dob"),
        address=data.get("address"),
    )
    if error:
        return error_response(error)
    return jsonify({"message": "User created successfully", "userId": user_id}), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    data = json_body()
    email = data.get("email")
    password = data.get("password")
    if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
        return error_response(ValidationError("Please provide email and password"))

    user, error = get_engine().credentials.authenticate(email, password)
    if error:
        return error_response(error)

    token = sessions.issue(user.id, user.email)
    logger.info(f"User {user.id} logged in")
    return jsonify({
        "message": "Login successful",
        "token": token,
        "user": user.summary(),
    })


@auth_bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    claims, error = sessions.current_claims()
    if error:
        return error_response(error)

    summary, error = get_engine().account_summary(claims["user_id"])
    if error:
        return error_response(error)

    user, balance = summary
    return jsonify({"user": user.to_dict(), "currentBalance": float(balance)})
