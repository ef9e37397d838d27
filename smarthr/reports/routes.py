from flask import make_response

from smarthr import get_gateway
from smarthr.api.employees import EMPLOYEE_LIST
from smarthr.api.envelope import success
from smarthr.api.invoices import INVOICE_DETAIL
from smarthr.api.leaves import LEAVE_EXPANSION
from smarthr.auth.guards import role_required
from smarthr.excel import export_employees_to_excel, export_leaves_to_excel
from smarthr.models import LEAVE_STATUSES
from smarthr.pdf import generate_invoice_pdf
from smarthr.reports import bp

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


@bp.route('/dashboard')
@role_required('admin', 'manager')
def dashboard():
    gateway = get_gateway()
    leaves_by_status = {status: gateway.count('leaves', [('status', 'eq', status)]) for status in LEAVE_STATUSES}
    return success({
        'total_employees': gateway.count('employees'),
        'active_employees': gateway.count('employees', [('status', 'eq', 'active')]),
        'total_departments': gateway.count('departments'),
        'total_projects': gateway.count('projects'),
        'pending_leaves': leaves_by_status['pending'],
        'leaves_by_status': leaves_by_status,
    })


@bp.route('/employees.xlsx')
@role_required('admin', 'manager')
def employees_export():
    employees = get_gateway().select('employees', EMPLOYEE_LIST, order='-created_at')
    output = export_employees_to_excel(employees)
    return make_response(output.getvalue(), 200, {
        'Content-Disposition': 'attachment; filename=employees.xlsx',
        'Content-Type': XLSX_MIMETYPE,
    })


@bp.route('/leaves.xlsx')
@role_required('admin', 'manager')
def leaves_export():
    leaves = get_gateway().select('leaves', LEAVE_EXPANSION, order='-created_at')
    output = export_leaves_to_excel(leaves)
    return make_response(output.getvalue(), 200, {
        'Content-Disposition': 'attachment; filename=leaves.xlsx',
        'Content-Type': XLSX_MIMETYPE,
    })


@bp.route('/invoices/<uuid:invoice_id>.pdf')
@role_required('admin', 'manager')
def invoice_pdf(invoice_id):
    invoice = get_gateway().select('invoices', INVOICE_DETAIL, [('id', 'eq', str(invoice_id))], single=True)
    return make_response(generate_invoice_pdf(invoice), 200, {
        'Content-Disposition': f"attachment; filename=invoice_{invoice['invoice_number']}.pdf",
        'Content-Type': 'application/pdf',
    })
