# ledger/app.py

import logging

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from . import auth, sessions, transactions
from .config import DEFAULT_JWT_SECRET, load_config
from .credentials import CredentialStore
from .db import EXTENSION_KEY, Database
from .engine import LedgerEngine
from .errors import InternalError, error_response

logger = logging.getLogger("ledger-backend")


# ---------------- Flask App Factory ----------------
def create_app(overrides=None):
    app = Flask(__name__)

    # Configuration
    app.config.update(load_config())
    if overrides:
        app.config.update(overrides)

    logging.basicConfig(level=app.config["LOG_LEVEL"])
    if app.config["JWT_SECRET_KEY"] == DEFAULT_JWT_SECRET:
        logger.warning("JWT_SECRET_KEY is not set, using the development key")

    sessions.init_jwt(app)

    # CORS
    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}}, supports_credentials=True)

    # Store and engine live for the whole process
    db = Database(app.config["DB_PATH"], timeout=app.config["DB_TIMEOUT"]).open()
    credentials = CredentialStore(db)
    app.extensions[EXTENSION_KEY] = db
    app.extensions["ledger_engine"] = LedgerEngine(
        db, credentials, max_amount=app.config["MAX_AMOUNT"]
    )

    # Blueprints
    app.register_blueprint(auth.auth_bp, url_prefix="/api")
    app.register_blueprint(transactions.bp, url_prefix="/api")

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.errorhandler(HTTPException)
    def http_error(e):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(Exception)
    def unexpected_error(e):
        logger.exception("Unhandled error")
        return error_response(InternalError())

    return app


def main():
    app = create_app()
    try:
        app.run(host=app.config["HOST"], port=app.config["PORT"])
    finally:
        app.extensions[EXTENSION_KEY].close()


# ---------------- Run ----------------
if __name__ == "__main__":
    main()
