from flask import Blueprint

bp = Blueprint('reports', __name__)

from smarthr.reports import routes  # noqa: E402,F401
