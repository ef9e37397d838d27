from flask import request

from smarthr import get_gateway
from smarthr.api import bp, RESOURCE_METHODS
from smarthr.api.envelope import created, message, read_json_body, success
from smarthr.api.forms import ClientForm, validate_payload
from smarthr.errors import MethodNotAllowed
from smarthr.gateway import Embed
from smarthr.utils.helpers import split_path

CLIENT_DETAIL = ('*', Embed('invoices', ('id', 'invoice_number', 'total', 'status', 'due_date')))


@bp.route('/clients', defaults={'path': ''}, methods=RESOURCE_METHODS)
@bp.route('/clients/<path:path>', methods=RESOURCE_METHODS)
def clients(path):
    client_id, _ = split_path(path)

    if request.method == 'GET':
        if client_id:
            return success(get_gateway().select('clients', CLIENT_DETAIL, [('id', 'eq', client_id)], single=True))
        return success(get_gateway().select('clients', order='-created_at'))
    if request.method == 'POST' and not client_id:
        data = validate_payload(ClientForm, read_json_body())
        return created(get_gateway().insert('clients', data, CLIENT_DETAIL))
    if request.method == 'PUT' and client_id:
        data = validate_payload(ClientForm, read_json_body(), partial=True)
        return success(get_gateway().update('clients', client_id, data, CLIENT_DETAIL))
    if request.method == 'DELETE' and client_id:
        get_gateway().delete('clients', client_id)
        return message('Client deleted successfully')
    raise MethodNotAllowed()
