from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException
from flask_jwt_extended import JWTManager
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker, scoped_session
from dotenv import load_dotenv
from datetime import datetime, timezone
from typing import Optional, Dict, Any
import logging
import os
import uuid

load_dotenv()

db_engine = None
SessionLocal = None
jwt = JWTManager()


def _envelope(body: Dict[str, Any]):
    body = dict(body)
    body['timestamp'] = datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')
    body['request_id'] = str(uuid.uuid4())
    return {'error': body}


def _error_body(status: int, code: str, title: str, detail: str, details=None):
    body = {'status': status, 'code': code, 'title': title, 'detail': detail}
    if details:
        body['details'] = details
    return _envelope(body)


def create_app(config: Optional[Dict[str, Any]] = None):
    global db_engine, SessionLocal
    app = Flask(__name__)

    app.config['JWT_SECRET_KEY'] = os.getenv('JWT_SECRET_KEY', 'dev-secret')
    app.config['DATABASE_URL'] = os.getenv('DATABASE_URL', 'sqlite:///dev.db')
    app.config['STATUS_HISTORY_LIMIT'] = os.getenv('STATUS_HISTORY_LIMIT', '10')
    app.config['BROADCAST_BACKEND'] = os.getenv('BROADCAST_BACKEND', 'log')
    app.config['LOG_LEVEL'] = os.getenv('LOG_LEVEL', 'INFO')

    if config:
        # allow tests or callers to override default config values
        app.config.update(config)

    logging.basicConfig(level=app.config['LOG_LEVEL'])

    from .config.pagination import normalize_history_limit
    app.config['STATUS_HISTORY_LIMIT'] = normalize_history_limit(app.config['STATUS_HISTORY_LIMIT'])

    # Database
    db_url = app.config['DATABASE_URL']
    if db_url.endswith(':memory:'):
        # Ensure a single shared in-memory SQLite database across all sessions
        db_engine = create_engine(
            db_url,
            echo=False,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        db_engine = create_engine(db_url, echo=False, future=True)
    SessionLocal = scoped_session(sessionmaker(bind=db_engine, expire_on_commit=False, autoflush=False))

    jwt.init_app(app)

    # Realtime broadcaster: one explicitly constructed instance per app
    from .services.broadcast import init_broadcaster
    init_broadcaster(app)

    @app.teardown_appcontext
    def _remove_session(exc=None):
        SessionLocal.remove()

    from .routes.auth import auth_bp
    from .routes.jobs import jobs_bp
    app.register_blueprint(auth_bp, url_prefix='/auth')
    app.register_blueprint(jobs_bp, url_prefix='/jobs')

    @app.route('/healthz')
    def health():
        return {'status': 'ok'}

    from .errors import ApiError

    @jwt.unauthorized_loader
    def _missing_token(reason):
        return jsonify(_error_body(401, 'UNAUTHORIZED', 'Unauthorized', 'Authentication required')), 401

    @jwt.invalid_token_loader
    def _invalid_token(reason):
        return jsonify(_error_body(401, 'UNAUTHORIZED', 'Unauthorized', reason)), 401

    @jwt.expired_token_loader
    def _expired_token(jwt_header, jwt_payload):
        return jsonify(_error_body(401, 'UNAUTHORIZED', 'Unauthorized', 'Token has expired')), 401

    # Unified error handler producing standardized JSON shape
    @app.errorhandler(Exception)
    def handle_errors(e):  # type: ignore
        if isinstance(e, ApiError):
            return _envelope(e.to_dict()), e.status
        if isinstance(e, HTTPException):
            code = e.name.upper().replace(' ', '_')
            return _error_body(e.code, code, e.name, e.description), e.code
        # Unhandled exception
        app.logger.exception('Unhandled exception')
        return _error_body(500, 'INTERNAL_ERROR', 'Internal Server Error', 'An unexpected error occurred'), 500

    from .openapi import build_openapi_spec

    @app.route('/openapi.json')
    def openapi_spec():
        return build_openapi_spec()

    @app.route('/docs')
    def docs_index():
        # Lightweight HTML referencing Redoc CDN (no local install) for quick browsing
        return (
            "<!DOCTYPE html><html><head><title>Field Jobs API</title>"
            "<link rel=\"stylesheet\" href=\"https://cdn.jsdelivr.net/npm/redoc@next/bundles/redoc.standalone.css\" />"
            "</head><body><redoc spec-url='/openapi.json'></redoc>"
            "<script src='https://cdn.jsdelivr.net/npm/redoc@next/bundles/redoc.standalone.js'></script>"
            "</body></html>"
        )

    return app


def get_db():
    return SessionLocal()


def get_broadcaster():
    from flask import current_app
    return current_app.extensions['broadcaster']
