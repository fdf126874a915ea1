# ledger/sessions.py
import logging

from flask_jwt_extended import JWTManager, create_access_token, decode_token, get_jwt
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from .config import TOKEN_LIFETIME
from .errors import InvalidToken, MissingToken, error_response

logger = logging.getLogger("ledger-backend")


def issue(user_id, email):
    """Signed bearer token with the user id as subject, plus email, iat and a 24h exp."""
    return create_access_token(
        identity=str(user_id),
        additional_claims={"email": email},
        expires_delta=TOKEN_LIFETIME,
    )


def _claims_from_payload(payload):
    try:
        user_id = int(payload["sub"])
        email = payload["email"]
    except (KeyError, TypeError, ValueError):
        return None
    return {"user_id": user_id, "email": email}


def verify(token):
    """
    Check a token's signature, shape and expiry.

    Returns (claims, None) or (None, InvalidToken). The error is the same
    whatever the cause.
    """
    if not token:
        return None, InvalidToken()
    try:
        payload = decode_token(token)
    except (PyJWTError, JWTExtendedException):
        return None, InvalidToken()

    claims = _claims_from_payload(payload)
    if claims is None:
        return None, InvalidToken()
    return claims, None


def current_claims():
    """Claims of the token on the request being served (after jwt_required)."""
    claims = _claims_from_payload(get_jwt())
    if claims is None:
        return None, InvalidToken()
    return claims, None


def init_jwt(app):
    jwt = JWTManager(app)

    @jwt.unauthorized_loader
    def missing_token(reason):
        return error_response(MissingToken())

    @jwt.invalid_token_loader
    def invalid_token(reason):
        logger.info("Rejected malformed or badly signed token")
        return error_response(InvalidToken())

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        logger.info("Rejected expired token")
        return error_response(InvalidToken())

    @jwt.token_verification_failed_loader
    def verification_failed(jwt_header, jwt_payload):
        return error_response(InvalidToken())

    return jwt
