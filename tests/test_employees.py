import uuid

PREFIX = '/.netlify/functions'
URL = f'{PREFIX}/employees'


def _payload(user_id, **overrides):
    payload = {
        'user_id': user_id,
        'employee_id': 'EMP-100',
        'joining_date': '2024-02-01',
        'employment_type': 'full-time',
    }
    payload.update(overrides)
    return payload


def test_create_employee_with_expansion(client, factory):
    user_id = factory.user(first_name='Ada', last_name='Lovelace', address='12 Analytical Row')
    department_id = factory.department('Research')

    response = client.post(URL, json=_payload(user_id, department_id=department_id, salary=5000))
    assert response.status_code == 201
    data = response.get_json()['data']
    assert data['employee_id'] == 'EMP-100'
    assert data['joining_date'] == '2024-02-01'
    assert data['status'] == 'active'
    assert data['salary'] == 5000
    assert data['users']['first_name'] == 'Ada'
    assert data['users']['address'] == '12 Analytical Row'
    assert data['departments'] == {'id': department_id, 'name': 'Research'}
    assert data['designations'] is None
    assert data['manager'] is None


def test_create_requires_user_and_employee_id(client):
    response = client.post(URL, json={'joining_date': '2024-02-01'})
    assert response.status_code == 400
    paths = sorted(issue['path'] for issue in response.get_json()['error'])
    assert paths == [['employee_id'], ['user_id']]


def test_create_rejects_unknown_enum(client, factory):
    response = client.post(URL, json=_payload(factory.user(), employment_type='freelance'))
    assert response.status_code == 400
    assert response.get_json()['error'][0]['path'] == ['employment_type']


def test_create_with_unknown_user_is_backend_error(client):
    response = client.post(URL, json=_payload(str(uuid.uuid4())))
    assert response.status_code == 500
    assert 'FOREIGN KEY' in response.get_json()['error']


def test_list_employees(client, factory):
    factory.employee(factory.user(first_name='Grace'))
    factory.employee()

    response = client.get(URL)
    assert response.status_code == 200
    rows = response.get_json()['data']
    assert len(rows) == 2
    for row in rows:
        assert set(row['users']) == {'id', 'email', 'first_name', 'last_name', 'phone', 'avatar_url', 'role'}
        assert 'manager' not in row


def test_detail_includes_manager_name(client, factory):
    manager_id = factory.employee(factory.user(first_name='Boss', last_name='Person'))
    employee_id = factory.employee(manager_id=manager_id)

    data = client.get(f'{URL}/{employee_id}').get_json()['data']
    assert data['manager'] == {'id': manager_id, 'users': {'first_name': 'Boss', 'last_name': 'Person'}}
    assert data['manager_id'] == manager_id


def test_partial_update_changes_only_supplied_fields(client, factory):
    employee_id = factory.employee(employee_id='EMP-7', salary=100.0)

    response = client.put(f'{URL}/{employee_id}', json={'status': 'on-leave'})
    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['status'] == 'on-leave'
    assert data['employee_id'] == 'EMP-7'
    assert data['salary'] == 100.0
    assert data['employment_type'] == 'full-time'


def test_update_can_clear_manager(client, factory):
    manager_id = factory.employee()
    employee_id = factory.employee(manager_id=manager_id)

    data = client.put(f'{URL}/{employee_id}', json={'manager_id': None}).get_json()['data']
    assert data['manager_id'] is None
    assert data['manager'] is None


def test_employee_cannot_manage_themselves(client, factory):
    employee_id = factory.employee()
    response = client.put(f'{URL}/{employee_id}', json={'manager_id': employee_id})
    assert response.status_code == 400
    assert response.get_json()['error'][0]['path'] == ['manager_id']


def test_update_missing_employee(client):
    response = client.put(f'{URL}/{uuid.uuid4()}', json={'status': 'inactive'})
    assert response.status_code == 500


def test_delete_employee(client, factory):
    employee_id = factory.employee()
    response = client.delete(f'{URL}/{employee_id}')
    assert response.get_json() == {'message': 'Employee deleted successfully'}
    assert client.get(URL).get_json()['data'] == []


def test_blank_department_is_rejected_before_the_database(client, factory):
    employee_id = factory.employee()
    response = client.put(f'{URL}/{employee_id}', json={'department_id': ''})
    assert response.status_code == 400
    assert response.get_json()['error'][0]['path'] == ['department_id']


def test_null_status_is_rejected(client, factory):
    employee_id = factory.employee()
    response = client.put(f'{URL}/{employee_id}', json={'status': None, 'employment_type': None})
    assert response.status_code == 400
    issues = response.get_json()['error']
    assert sorted(issue['path'] for issue in issues) == [['employment_type'], ['status']]
    assert {issue['code'] for issue in issues} == {'invalid_type'}

    assert client.get(f'{URL}/{employee_id}').get_json()['data']['status'] == 'active'


def test_repeated_delete(client, factory):
    employee_id = factory.employee()
    assert client.delete(f'{URL}/{employee_id}').status_code == 200
    assert client.delete(f'{URL}/{employee_id}').status_code == 500
