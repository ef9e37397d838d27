import io
import uuid

from openpyxl import load_workbook


def test_dashboard_counts(client, factory, login):
    department_id = factory.department()
    employee_id = factory.employee(department_id=department_id)
    factory.employee(status='inactive')
    factory.project()
    factory.leave(employee_id)
    factory.leave(employee_id, status='approved')
    login('admin')

    data = client.get('/reports/dashboard').get_json()['data']
    # the signed-in admin has a user row but no employee row
    assert data['total_employees'] == 2
    assert data['active_employees'] == 1
    assert data['total_departments'] == 1
    assert data['total_projects'] == 1
    assert data['pending_leaves'] == 1
    assert data['leaves_by_status'] == {'pending': 1, 'approved': 1, 'rejected': 0}


def test_employee_export(client, factory, login):
    factory.employee(factory.user(first_name='Ada', last_name='Lovelace'), employee_id='EMP-1',
                     department_id=factory.department('Research'))
    login('manager')

    response = client.get('/reports/employees.xlsx')
    assert response.status_code == 200
    assert response.headers['Content-Type'].startswith('application/vnd.openxmlformats')
    sheet = load_workbook(io.BytesIO(response.data))['Employees']
    rows = list(sheet.iter_rows(values_only=True))
    assert rows[0][:3] == ('Employee ID', 'Name', 'Email')
    assert rows[1][0] == 'EMP-1'
    assert rows[1][1] == 'Ada Lovelace'
    assert rows[1][4] == 'Research'


def test_leave_export(client, factory, login):
    employee_id = factory.employee(factory.user(first_name='Ada', last_name='Lovelace'))
    factory.leave(employee_id, days=2, status='approved')
    factory.leave(employee_id, days=5)
    login('admin')

    response = client.get('/reports/leaves.xlsx')
    workbook = load_workbook(io.BytesIO(response.data))
    assert workbook.sheetnames == ['Leaves', 'Employee Summary']
    assert len(list(workbook['Leaves'].iter_rows(values_only=True))) == 3
    summary = list(workbook['Employee Summary'].iter_rows(values_only=True))
    assert summary[1] == ('Ada Lovelace', 2)


def test_invoice_pdf(client, factory, login):
    invoice_id = factory.invoice(
        total=110.0, tax_amount=10.0, tax_rate=10.0, notes='Net 30',
        items=[{'description': 'Consulting', 'quantity': 1, 'rate': 100, 'amount': 100}],
        invoice_number='INV-77',
    )
    client.post(f'/.netlify/functions/invoices/{invoice_id}/payment', json={'amount': 50})
    login('admin')

    response = client.get(f'/reports/invoices/{invoice_id}.pdf')
    assert response.status_code == 200
    assert response.headers['Content-Type'] == 'application/pdf'
    assert 'invoice_INV-77.pdf' in response.headers['Content-Disposition']
    assert response.data.startswith(b'%PDF')


def test_missing_invoice_pdf(client, login):
    login('admin')
    assert client.get(f'/reports/invoices/{uuid.uuid4()}.pdf').status_code == 500


def test_exports_are_guarded(client):
    assert client.get('/reports/employees.xlsx').status_code == 401
