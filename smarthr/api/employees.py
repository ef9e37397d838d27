from flask import request

from smarthr import get_gateway
from smarthr.api import bp, RESOURCE_METHODS
from smarthr.api.envelope import created, message, read_json_body, success
from smarthr.api.forms import EmployeeForm, validate_payload
from smarthr.errors import MethodNotAllowed, ValidationError
from smarthr.gateway import Embed
from smarthr.utils.helpers import split_path

EMPLOYEE_LIST = (
    '*',
    Embed('users', ('id', 'email', 'first_name', 'last_name', 'phone', 'avatar_url', 'role'), relation='user', inner=True),
    Embed('departments', ('id', 'name'), relation='department'),
    Embed('designations', ('id', 'name'), relation='designation'),
)

EMPLOYEE_DETAIL = (
    '*',
    Embed('users', ('id', 'email', 'first_name', 'last_name', 'phone', 'address', 'avatar_url', 'role'),
          relation='user', inner=True),
    Embed('departments', ('id', 'name'), relation='department'),
    Embed('designations', ('id', 'name'), relation='designation'),
    Embed('manager', ('id', Embed('users', ('first_name', 'last_name'), relation='user', inner=True))),
)


@bp.route('/employees', defaults={'path': ''}, methods=RESOURCE_METHODS)
@bp.route('/employees/<path:path>', methods=RESOURCE_METHODS)
def employees(path):
    employee_id, _ = split_path(path)

    if request.method == 'GET':
        if employee_id:
            return get_employee(employee_id)
        return list_employees()
    if request.method == 'POST' and not employee_id:
        return create_employee()
    if request.method == 'PUT' and employee_id:
        return update_employee(employee_id)
    if request.method == 'DELETE' and employee_id:
        return delete_employee(employee_id)
    raise MethodNotAllowed()


def list_employees():
    return success(get_gateway().select('employees', EMPLOYEE_LIST, order='-created_at'))


def get_employee(employee_id):
    return success(get_gateway().select('employees', EMPLOYEE_DETAIL, [('id', 'eq', employee_id)], single=True))


def create_employee():
    data = validate_payload(EmployeeForm, read_json_body())
    return created(get_gateway().insert('employees', data, EMPLOYEE_DETAIL))


def update_employee(employee_id):
    data = validate_payload(EmployeeForm, read_json_body(), partial=True)
    if data.get('manager_id') and data['manager_id'].lower() == employee_id.lower():
        raise ValidationError([{
            'path': ['manager_id'],
            'message': 'An employee cannot be their own manager',
            'code': 'custom',
        }])
    return success(get_gateway().update('employees', employee_id, data, EMPLOYEE_DETAIL))


def delete_employee(employee_id):
    get_gateway().delete('employees', employee_id)
    return message('Employee deleted successfully')
