from collections import Counter

from flask import request

from smarthr import get_gateway
from smarthr.api import bp, RESOURCE_METHODS
from smarthr.api.envelope import created, message, read_json_body, success
from smarthr.api.forms import DepartmentForm, validate_payload
from smarthr.errors import MethodNotAllowed
from smarthr.gateway import Embed
from smarthr.utils.helpers import split_path

DEPARTMENT_DETAIL = ('*', Embed('designations', ('id', 'name')))


@bp.route('/departments', defaults={'path': ''}, methods=RESOURCE_METHODS)
@bp.route('/departments/<path:path>', methods=RESOURCE_METHODS)
def departments(path):
    department_id, _ = split_path(path)

    if request.method == 'GET':
        if department_id:
            return get_department(department_id)
        return list_departments()
    if request.method == 'POST' and not department_id:
        return create_department()
    if request.method == 'PUT' and department_id:
        return update_department(department_id)
    if request.method == 'DELETE' and department_id:
        return delete_department(department_id)
    raise MethodNotAllowed()


def list_departments():
    gateway = get_gateway()
    rows = gateway.select('departments', order='name')
    counts = Counter(row['department_id'] for row in gateway.select('designations', ('department_id',)))
    for row in rows:
        row['designation_count'] = counts.get(row['id'], 0)
    return success(rows)


def get_department(department_id):
    return success(get_gateway().select('departments', DEPARTMENT_DETAIL, [('id', 'eq', department_id)], single=True))


def create_department():
    data = validate_payload(DepartmentForm, read_json_body())
    return created(get_gateway().insert('departments', data))


def update_department(department_id):
    data = validate_payload(DepartmentForm, read_json_body(), partial=True)
    return success(get_gateway().update('departments', department_id, data))


def delete_department(department_id):
    get_gateway().delete('departments', department_id)
    return message('Department deleted successfully')
