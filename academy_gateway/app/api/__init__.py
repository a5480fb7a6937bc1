"""API blueprint registration."""
from flask import Blueprint

api_bp = Blueprint("api", __name__)

# Import endpoints to ensure they are registered with the blueprint.
from . import admin, auth, bookings, uploads  # noqa: E402,F401
from .proxy import register_routes  # noqa: E402
from .routes import ROUTES  # noqa: E402

register_routes(api_bp, ROUTES)
