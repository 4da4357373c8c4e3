from flask import jsonify, request, current_app
from . import bp
from feedback_app.extensions import db, limiter
from feedback_app.errors import InvalidInputError
from feedback_app.services.submission import submit_responses, check_submission_status
from feedback_app.utils.validators import is_valid_token, validate_answers_payload


def _submission_limit():
    return current_app.config.get("SUBMISSION_RATE_LIMIT") or "30 per minute"


def _require_token(token: str) -> str:
    token = (token or "").strip()
    if not is_valid_token(token):
        raise InvalidInputError("Access token is required.")
    return token


@bp.post("/submit/<token>")
@limiter.limit(_submission_limit)
def submit(token):
    """Store one respondent's answers; body is {questionId: value, ...}."""
    token = _require_token(token)
    payload = request.get_json(silent=True)
    errors = validate_answers_payload(payload)
    if errors:
        return jsonify({
            "status": "fail",
            "error": InvalidInputError.kind,
            "message": errors[0],
            "errors": errors,
        }), 400

    created = submit_responses(db.session, token, payload)
    return jsonify({
        "message": "Feedback submitted successfully.",
        "count": len(created),
        "responses": [r.to_dict() for r in created],
    }), 201


@bp.get("/check-submission/<token>")
def check_submission(token):
    token = _require_token(token)
    return jsonify(check_submission_status(db.session, token)), 200
