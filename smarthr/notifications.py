import logging
from functools import wraps

from flask import current_app, render_template

from smarthr import get_gateway, get_mailer
from smarthr.gateway import Embed
from smarthr.utils.helpers import full_name

logger = logging.getLogger(__name__)


def best_effort(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except Exception:
            logger.exception('Notification %s failed', f.__name__)
            return False
    return decorated_function


def _deliver(to, subject, template, **context):
    if not to:
        logger.info('No recipient for %r, skipping', subject)
        return False
    html = render_template(f'email/{template}.html', **context)
    ok, error = get_mailer().send_email(to, subject, html)
    if not ok:
        logger.warning('Could not send %r to %s: %s', subject, to, error)
    return ok


def _app_url(path):
    return current_app.config['APP_URL'].rstrip('/') + path


@best_effort
def notify_leave_requested(leave):
    gateway = get_gateway()
    employee = gateway.select('employees', ('id', 'manager_id'), [('id', 'eq', leave['employee_id'])], single=True)
    if not employee['manager_id']:
        return False
    manager = gateway.select(
        'employees',
        ('id', Embed('users', ('email', 'first_name', 'last_name'), relation='user', inner=True)),
        [('id', 'eq', employee['manager_id'])],
        single=True,
    )
    return _deliver(
        manager['users']['email'],
        'New Leave Request',
        'leave_request',
        employee_name=full_name(leave['employees']['users']),
        leave_type=leave['leave_types']['name'],
        start_date=leave['start_date'],
        end_date=leave['end_date'],
        reason=leave['reason'],
    )


@best_effort
def notify_leave_decision(leave):
    if leave['status'] not in ('approved', 'rejected'):
        return False
    approved = leave['status'] == 'approved'
    user = leave['employees']['users']
    return _deliver(
        user['email'],
        f"Leave Request {'Approved' if approved else 'Rejected'}",
        'leave_decision',
        employee_name=full_name(user),
        leave_type=leave['leave_types']['name'],
        start_date=leave['start_date'],
        end_date=leave['end_date'],
        approved=approved,
        status='Approved' if approved else 'Rejected',
        accent='#10B981' if approved else '#EF4444',
    )


@best_effort
def notify_invoice_sent(invoice):
    if invoice['status'] != 'sent':
        return False
    client = invoice['clients']
    return _deliver(
        client['email'],
        f"Invoice {invoice['invoice_number']} from SmartHR",
        'invoice',
        client_name=full_name(client),
        invoice_number=invoice['invoice_number'],
        amount=float(invoice['total']),
        due_date=invoice['due_date'],
        invoice_url=_app_url(f"/invoices/{invoice['id']}"),
    )


@best_effort
def send_welcome(user, temporary_password=None):
    return _deliver(
        user['email'],
        'Welcome to SmartHR!',
        'welcome',
        first_name=user['first_name'],
        email=user['email'],
        temporary_password=temporary_password,
        login_url=_app_url('/login'),
    )


@best_effort
def send_password_reset(user, token):
    return _deliver(
        user['email'],
        'Reset your SmartHR password',
        'password_reset',
        first_name=user['first_name'],
        reset_url=_app_url(f'/reset-password?token={token}'),
        expires_minutes=current_app.config['RESET_TOKEN_MAX_AGE'] // 60,
    )
