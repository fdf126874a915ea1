from datetime import timedelta

from flask_jwt_extended import create_access_token, decode_token

from ledger import sessions
from ledger.app import create_app
from ledger.errors import InvalidToken


def test_issue_then_verify(app):
    with app.app_context():
        token = sessions.issue(7, "a@x.com")
        claims, error = sessions.verify(token)
    assert error is None
    assert claims == {"user_id": 7, "email": "a@x.com"}


def test_token_carries_iat_and_24h_expiry(app):
    with app.app_context():
        payload = decode_token(sessions.issue(7, "a@x.com"))
    assert payload["sub"] == "7"
    assert payload["exp"] - payload["iat"] == 24 * 60 * 60


def test_expired_token_rejected(app):
    with app.app_context():
        token = create_access_token(
            identity="7", additional_claims={"email": "a@x.com"}, expires_delta=timedelta(seconds=-5)
        )
        claims, error = sessions.verify(token)
    assert claims is None
    assert isinstance(error, InvalidToken)


def test_foreign_signature_rejected(app, tmp_path):
    other = create_app({
        "DB_PATH": str(tmp_path / "other.db"),
        "JWT_SECRET_KEY": "a-completely-different-secret-key-value",
    })
    with other.app_context():
        token = sessions.issue(7, "a@x.com")
    other.extensions["ledger_db"].close()

    with app.app_context():
        _, error = sessions.verify(token)
    assert isinstance(error, InvalidToken)


def test_malformed_tokens_rejected(app):
    with app.app_context():
        no_email = create_access_token(identity="7")
        bad_subject = create_access_token(identity="abc", additional_claims={"email": "a@x.com"})
        results = [sessions.verify(t) for t in ("", "not-a-token", "a.b.c", no_email, bad_subject)]
    for claims, error in results:
        assert claims is None
        assert isinstance(error, InvalidToken)


def test_every_failure_has_the_same_message(app):
    with app.app_context():
        expired = create_access_token(
            identity="7", additional_claims={"email": "a@x.com"}, expires_delta=timedelta(seconds=-5)
        )
        messages = {sessions.verify(t)[1].message for t in ("garbage", expired)}
    assert len(messages) == 1
