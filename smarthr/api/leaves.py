from flask import request

from smarthr import get_gateway
from smarthr.api import bp, RESOURCE_METHODS
from smarthr.api.envelope import created, message, read_json_body, success
from smarthr.api.forms import LeaveFilterForm, LeaveForm, LeaveUpdateForm, validate_payload
from smarthr.errors import MethodNotAllowed
from smarthr.gateway import Embed
from smarthr.notifications import notify_leave_decision, notify_leave_requested
from smarthr.utils.helpers import split_path, utcnow

LEAVE_EXPANSION = (
    '*',
    Embed('employees', (
        'id',
        'employee_id',
        Embed('users', ('first_name', 'last_name', 'email'), relation='user', inner=True),
    ), relation='employee', inner=True),
    Embed('leave_types', ('id', 'name'), relation='leave_type', inner=True),
    Embed('approved_by_user', ('first_name', 'last_name'), relation='approver'),
)

# query arg -> (column, operator)
LEAVE_FILTERS = {
    'employee_id': ('employee_id', 'eq'),
    'status': ('status', 'eq'),
    'from_date': ('start_date', 'gte'),
    'to_date': ('end_date', 'lte'),
}


@bp.route('/leaves', defaults={'path': ''}, methods=RESOURCE_METHODS)
@bp.route('/leaves/<path:path>', methods=RESOURCE_METHODS)
def leaves(path):
    leave_id, _ = split_path(path)

    if request.method == 'GET':
        if leave_id:
            return get_leave(leave_id)
        return list_leaves()
    if request.method == 'POST' and not leave_id:
        return create_leave()
    if request.method == 'PUT' and leave_id:
        return update_leave(leave_id)
    if request.method == 'DELETE' and leave_id:
        return delete_leave(leave_id)
    raise MethodNotAllowed()


def list_leaves():
    args = {key: value for key, value in request.args.items() if key in LEAVE_FILTERS and value}
    criteria = validate_payload(LeaveFilterForm, args, partial=True)
    filters = [(column, op, criteria[key]) for key, (column, op) in LEAVE_FILTERS.items() if key in criteria]
    return success(get_gateway().select('leaves', LEAVE_EXPANSION, filters, order='-created_at'))


def get_leave(leave_id):
    return success(get_gateway().select('leaves', LEAVE_EXPANSION, [('id', 'eq', leave_id)], single=True))


def create_leave():
    data = validate_payload(LeaveForm, read_json_body())
    leave = get_gateway().insert('leaves', data, LEAVE_EXPANSION)
    notify_leave_requested(leave)
    return created(leave)


def update_leave(leave_id):
    """
    Partial update. Supplying ``approved_by`` also stamps ``approved_at``;
    a bare ``status`` change leaves the approval stamps alone.
    """
    data = validate_payload(LeaveUpdateForm, read_json_body(), partial=True)
    if data.get('approved_by'):
        data['approved_at'] = utcnow()
    else:
        data.pop('approved_by', None)

    leave = get_gateway().update('leaves', leave_id, data, LEAVE_EXPANSION)
    if 'status' in data:
        notify_leave_decision(leave)
    return success(leave)


def delete_leave(leave_id):
    get_gateway().delete('leaves', leave_id)
    return message('Leave deleted successfully')
