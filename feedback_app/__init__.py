import os
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

# Load .env only for local/dev. In prod, env vars come from the platform.
if os.getenv("APP_ENV", "development") != "production":
    from dotenv import load_dotenv
    load_dotenv(".env", override=False)


from .config import get_config
from .errors import ServiceError
from .extensions import db, migrate, limiter
from .security import init_security
from .observability import init_logging, init_sentry

def create_app():
    app = Flask(__name__)

    # ---- Rate limiting storage ----
    app_env = (os.getenv("APP_ENV", "development") or "development").lower()
    use_redis = app_env in ("staging", "production")
    storage_uri = os.environ.get("REDIS_URL") if use_redis else "memory://"
    if use_redis and not storage_uri:
        # Hard fail in stage/prod so we never silently run without RL storage
        raise RuntimeError("REDIS_URL is required in staging/production for rate limiting")
    app.config["RATELIMIT_STORAGE_URI"] = storage_uri

    # Config: clean, explicit, class-based
    app.config.from_object(get_config())

    # --- Required env validation for prod-like envs (staging/production) ---
    def _require(name: str):
        val = os.getenv(name) or app.config.get(name)
        if not val:
            raise RuntimeError(f"Missing required environment variable: {name}")
        return val

    if app_env in ("staging", "production"):
        _require("SECRET_KEY")
        _require("DATABASE_URL")

    # --- Observability & Security ---
    init_logging(app)
    init_sentry(app)

    # Apply HTTPS, HSTS & CSP only in staging/production
    if app.config.get("APP_ENV", app_env).lower() in ("staging", "production"):
        init_security(app)

    # Init extensions
    db.init_app(app)
    migrate.init_app(app, db, directory="migrations")
    limiter.init_app(app)

    # Blueprints (explicit, consistent prefixes)
    from .blueprints.responses import bp as responses_bp
    from .blueprints.analytics import bp as analytics_bp, visual_bp

    app.register_blueprint(responses_bp, url_prefix="/api/v1/student-responses")
    app.register_blueprint(analytics_bp, url_prefix="/api/v1/analytics")
    app.register_blueprint(visual_bp, url_prefix="/api/v1/analytics/visual")

    # Health
    @app.get("/healthz")
    @limiter.exempt
    def healthz():
        return {"status": "ok"}, 200

    # ---- Error handlers: every failure leaves as {"status", "error", "message"} ----
    @app.errorhandler(ServiceError)
    def handle_service_error(e):
        if e.status_code >= 500:
            app.logger.error("%s on %s %s: %s", e.kind, request.method, request.path, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"status": "fail", "error": "not_found", "message": "Resource not found."}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"status": "fail", "error": "method_not_allowed", "message": "Method not allowed."}), 405

    # 429 Too Many Requests with Retry-After
    @app.errorhandler(429)
    def too_many_requests(e):
        retry_after = getattr(e, "retry_after", None)
        headers = {}
        payload = {"status": "fail", "error": "rate_limited", "message": "Too many requests."}
        if retry_after is not None:
            headers["Retry-After"] = str(int(retry_after))
            payload["retry_after"] = int(retry_after)
        return jsonify(payload), 429, headers

    @app.errorhandler(Exception)
    def server_error(e):
        if isinstance(e, HTTPException):
            return jsonify({"status": "fail" if e.code < 500 else "error", "error": "http_error", "message": e.description}), e.code
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"status": "error", "error": "internal", "message": "Internal server error."}), 500

    # CLI commands (ops-grade utilities)
    from .cli import register_cli
    register_cli(app)

    return app
