from flask import Blueprint
from flask_login import login_required

maintenance_bp = Blueprint('maintenance', __name__)

# Require authentication for all routes in this blueprint
@maintenance_bp.before_request
@login_required
def require_login():
    pass

from . import routes
