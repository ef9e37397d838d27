from flask import Blueprint

bp = Blueprint('api', __name__)

# Every method reaches the view so unmatched ones get the enveloped 405
RESOURCE_METHODS = ['GET', 'POST', 'PUT', 'DELETE', 'PATCH']

from smarthr.api import departments, employees, invoices, leaves, clients  # noqa: E402,F401
