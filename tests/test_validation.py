from datetime import date

import pytest

from smarthr.api.forms import (
    ClientForm, DepartmentForm, EmployeeForm, InvoiceForm, LeaveForm, LeaveFilterForm, LeaveUpdateForm, validate_payload,
)
from smarthr.errors import ValidationError


@pytest.fixture(autouse=True)
def app_context(app):
    with app.app_context():
        yield


def _issues(form_class, payload, partial=False):
    with pytest.raises(ValidationError) as excinfo:
        validate_payload(form_class, payload, partial=partial)
    return excinfo.value.issues


def _paths(issues):
    return [issue['path'] for issue in issues]


LEAVE = {
    'employee_id': '6f1c2a9e-0b1d-4c7a-9a57-2f2b7d9c1e01',
    'leave_type_id': '0b7c9f3e-5a2d-4e1b-8c3f-9d8e7f6a5b4c',
    'start_date': '2024-01-10',
    'end_date': '2024-01-12',
    'days': 3,
    'reason': 'travel',
}

ITEM = {'description': 'Consulting', 'quantity': 2, 'rate': 50, 'amount': 100}

INVOICE = {
    'invoice_number': 'INV-1',
    'client_id': '6f1c2a9e-0b1d-4c7a-9a57-2f2b7d9c1e01',
    'issue_date': '2024-01-01',
    'due_date': '2024-01-31',
    'subtotal': 100,
    'total': 100,
    'items': [ITEM],
}


def test_valid_leave_is_converted():
    data = validate_payload(LeaveForm, LEAVE)
    assert data['start_date'] == date(2024, 1, 10)
    assert data['days'] == 3
    assert data['reason'] == 'travel'
    assert 'status' not in data


def test_missing_department_name():
    issues = _issues(DepartmentForm, {'description': 'no name'})
    assert issues == [{'path': ['name'], 'message': 'Name is required', 'code': 'custom'}]


def test_blank_department_name():
    issues = _issues(DepartmentForm, {'name': '   '})
    assert _paths(issues) == [['name']]


def test_every_violated_field_is_reported():
    payload = dict(LEAVE, employee_id='nope', days=0, reason='', start_date='2024-13-01')
    issues = _issues(LeaveForm, payload)
    assert sorted(_paths(issues)) == [['days'], ['employee_id'], ['reason'], ['start_date']]
    messages = {issue['path'][0]: issue['message'] for issue in issues}
    assert messages['days'] == 'Days must be a positive integer'
    assert messages['reason'] == 'Reason is required'


def test_type_mismatches():
    issues = _issues(LeaveForm, dict(LEAVE, days='3'))
    assert issues == [{'path': ['days'], 'message': 'Expected number, received string', 'code': 'invalid_type'}]

    issues = _issues(LeaveForm, dict(LEAVE, days=2.5))
    assert issues[0]['message'] == 'Expected integer, received float'

    issues = _issues(LeaveForm, dict(LEAVE, reason=42))
    assert issues[0]['message'] == 'Expected string, received number'


def test_integral_float_is_an_integer():
    assert validate_payload(LeaveForm, dict(LEAVE, days=3.0))['days'] == 3


def test_enum_membership():
    issues = _issues(LeaveForm, dict(LEAVE, status='maybe'))
    assert _paths(issues) == [['status']]
    assert issues[0]['code'] == 'custom'


def test_partial_mode_skips_absent_fields():
    assert validate_payload(LeaveForm, {'status': 'approved'}, partial=True) == {'status': 'approved'}


def test_partial_mode_still_checks_present_fields():
    issues = _issues(EmployeeForm, {'manager_id': 'not-a-uuid', 'salary': 'lots'}, partial=True)
    assert sorted(_paths(issues)) == [['manager_id'], ['salary']]


def test_required_fields_missing_on_create():
    issues = _issues(EmployeeForm, {'employee_id': 'EMP1'})
    assert sorted(_paths(issues)) == [['joining_date'], ['user_id']]


def test_null_clears_optional_field():
    assert validate_payload(EmployeeForm, {'manager_id': None}, partial=True) == {'manager_id': None}


def test_null_on_required_field():
    issues = _issues(DepartmentForm, {'name': None})
    assert issues == [{'path': ['name'], 'message': 'Required', 'code': 'invalid_type'}]


def test_nested_items_are_validated_per_entry():
    payload = dict(INVOICE, items=[ITEM, dict(ITEM, rate='ten'), {'description': 'x'}])
    issues = _issues(InvoiceForm, payload)
    paths = _paths(issues)
    assert ['items', 1, 'rate'] in paths
    assert ['items', 2, 'quantity'] in paths
    assert ['items', 2, 'amount'] in paths
    assert not any(path[:2] == ['items', 0] for path in paths)


def test_items_required_on_create_only():
    payload = {key: value for key, value in INVOICE.items() if key != 'items'}
    assert _paths(_issues(InvoiceForm, payload)) == [['items']]
    assert 'items' not in validate_payload(InvoiceForm, {'notes': 'updated'}, partial=True)


def test_items_must_be_a_list():
    issues = _issues(InvoiceForm, dict(INVOICE, items={'description': 'x'}))
    assert issues[0]['message'] == 'Expected array, received object'


def test_valid_invoice_keeps_items():
    data = validate_payload(InvoiceForm, INVOICE)
    assert data['items'] == [{'description': 'Consulting', 'quantity': 2.0, 'rate': 50.0, 'amount': 100.0}]
    assert data['total'] == 100.0


def test_payload_must_be_an_object():
    issues = _issues(DepartmentForm, ['name'])
    assert issues == [{'path': [], 'message': 'Expected object, received array', 'code': 'invalid_type'}]


def test_leave_filters():
    data = validate_payload(LeaveFilterForm, {'status': 'pending', 'from_date': '2024-01-01'}, partial=True)
    assert data == {'status': 'pending', 'from_date': date(2024, 1, 1)}
    assert _paths(_issues(LeaveFilterForm, {'to_date': 'yesterday'}, partial=True)) == [['to_date']]


@pytest.mark.parametrize('form_class, field', [
    (LeaveForm, 'status'),
    (EmployeeForm, 'status'),
    (EmployeeForm, 'employment_type'),
    (InvoiceForm, 'status'),
    (ClientForm, 'status'),
])
def test_blank_enum_value_is_rejected(form_class, field):
    issues = _issues(form_class, {field: ''}, partial=True)
    assert issues == [{'path': [field], 'message': 'Not a valid choice.', 'code': 'custom'}]


@pytest.mark.parametrize('form_class, field', [
    (EmployeeForm, 'department_id'),
    (EmployeeForm, 'manager_id'),
    (InvoiceForm, 'project_id'),
    (LeaveUpdateForm, 'approved_by'),
])
def test_blank_uuid_is_rejected(form_class, field):
    issues = _issues(form_class, {field: ''}, partial=True)
    assert issues == [{'path': [field], 'message': 'Invalid uuid', 'code': 'custom'}]


def test_uuid_must_be_hyphenated():
    bare = '6f1c2a9e0b1d4c7a9a572f2b7d9c1e01'
    assert _paths(_issues(EmployeeForm, {'manager_id': bare}, partial=True)) == [['manager_id']]
    assert _paths(_issues(EmployeeForm, {'manager_id': '{%s}' % LEAVE['employee_id']}, partial=True)) == [['manager_id']]


@pytest.mark.parametrize('form_class, field', [
    (LeaveForm, 'status'),
    (EmployeeForm, 'status'),
    (EmployeeForm, 'employment_type'),
    (InvoiceForm, 'status'),
    (ClientForm, 'status'),
])
def test_null_on_non_nullable_optional_field(form_class, field):
    issues = _issues(form_class, {field: None}, partial=True)
    assert issues == [{'path': [field], 'message': 'Expected string, received null', 'code': 'invalid_type'}]


def test_null_on_required_number_in_partial_mode():
    issues = _issues(LeaveForm, {'days': None}, partial=True)
    assert issues[0]['message'] == 'Required'


def test_nullable_fields_accept_null():
    data = validate_payload(InvoiceForm, {'project_id': None, 'notes': None, 'discount': None}, partial=True)
    assert data == {'project_id': None, 'notes': None, 'discount': None}
