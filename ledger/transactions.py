# ledger/transactions.py

from flask import Blueprint, jsonify
from flask_jwt_extended import jwt_required

from . import sessions
from .auth import get_engine, json_body
from .errors import error_response

bp = Blueprint("transactions", __name__)


@bp.route("/transactions", methods=["GET"])
@jwt_required()
def list_transactions():
    claims, error = sessions.current_claims()
    if error:
        return error_response(error)

    rows, error = get_engine().list_transactions(claims["user_id"])
    if error:
        return error_response(error)
    return jsonify({"transactions": [tx.to_dict() for tx in rows]})


@bp.route("/transactions", methods=["POST"])
@jwt_required()
def add_transaction():
    claims, error = sessions.current_claims()
    if error:
        return error_response(error)

    data = json_body()
    tx, error = get_engine().append_transaction(
        claims["user_id"], data.get("amount"), data.get("type"), data.get("reason")
    )
    if error:
        return error_response(error)
    return jsonify({"message": "Transaction added successfully", "transaction": tx.to_dict()}), 201
