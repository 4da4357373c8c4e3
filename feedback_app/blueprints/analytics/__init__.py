from flask import Blueprint

bp = Blueprint("analytics", __name__)
visual_bp = Blueprint("visual_analytics", __name__)

from . import routes, visual  # noqa: E402,F401
