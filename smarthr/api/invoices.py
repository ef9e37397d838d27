import logging

from flask import request

from smarthr import get_gateway
from smarthr.api import bp, RESOURCE_METHODS
from smarthr.api.envelope import created, message, read_json_body, success
from smarthr.api.forms import InvoiceForm, PaymentForm, validate_payload
from smarthr.errors import MethodNotAllowed, UpstreamError
from smarthr.gateway import Embed
from smarthr.notifications import notify_invoice_sent
from smarthr.utils.helpers import generate_transaction_id, is_uuid, split_path, today

logger = logging.getLogger(__name__)

CLIENT_COLUMNS = ('id', 'client_id', 'company_name', 'first_name', 'last_name', 'email')

INVOICE_LIST = (
    '*',
    Embed('clients', CLIENT_COLUMNS, relation='client', inner=True),
    Embed('projects', ('id', 'name'), relation='project'),
    Embed('invoice_items', relation='items'),
)

INVOICE_DETAIL = (
    '*',
    Embed('clients', CLIENT_COLUMNS + ('address',), relation='client', inner=True),
    Embed('projects', ('id', 'name'), relation='project'),
    Embed('invoice_items', relation='items'),
    Embed('payments'),
)


@bp.route('/invoices', defaults={'path': ''}, methods=RESOURCE_METHODS)
@bp.route('/invoices/<path:path>', methods=RESOURCE_METHODS)
def invoices(path):
    invoice_id, segments = split_path(path)

    if request.method == 'POST' and 'payment' in segments[-2:]:
        return record_payment(next((s for s in segments if is_uuid(s)), None))
    if request.method == 'GET':
        if invoice_id:
            return get_invoice(invoice_id)
        return list_invoices()
    if request.method == 'POST' and not invoice_id:
        return create_invoice()
    if request.method == 'PUT' and invoice_id:
        return update_invoice(invoice_id)
    if request.method == 'DELETE' and invoice_id:
        return delete_invoice(invoice_id)
    raise MethodNotAllowed()


def list_invoices():
    return success(get_gateway().select('invoices', INVOICE_LIST, order='-created_at'))


def get_invoice(invoice_id):
    return success(_select_invoice(invoice_id))


def _select_invoice(invoice_id):
    return get_gateway().select('invoices', INVOICE_DETAIL, [('id', 'eq', invoice_id)], single=True)


def create_invoice():
    gateway = get_gateway()
    data = validate_payload(InvoiceForm, read_json_body())
    items = data.pop('items')

    invoice = gateway.insert('invoices', data, ('id',))
    try:
        gateway.insert_many('invoice_items', [dict(item, invoice_id=invoice['id']) for item in items])
    except UpstreamError:
        logger.error('Partial write: invoice %s saved without its items', invoice['id'])
        raise

    invoice = _select_invoice(invoice['id'])
    notify_invoice_sent(invoice)
    return created(invoice)


def update_invoice(invoice_id):
    gateway = get_gateway()
    data = validate_payload(InvoiceForm, read_json_body(), partial=True)
    items = data.pop('items', None)

    gateway.update('invoices', invoice_id, data, ('id',))
    if items is not None:
        # Full replacement of the item set
        gateway.delete_where('invoice_items', [('invoice_id', 'eq', invoice_id)])
        try:
            gateway.insert_many('invoice_items', [dict(item, invoice_id=invoice_id) for item in items])
        except UpstreamError:
            logger.error('Partial write: items of invoice %s deleted but not replaced', invoice_id)
            raise

    invoice = _select_invoice(invoice_id)
    if data.get('status') == 'sent':
        notify_invoice_sent(invoice)
    return success(invoice)


def delete_invoice(invoice_id):
    gateway = get_gateway()
    gateway.delete_where('invoice_items', [('invoice_id', 'eq', invoice_id)])
    gateway.delete('invoices', invoice_id)
    return message('Invoice deleted successfully')


def record_payment(path_invoice_id=None):
    """
    Record a payment and mark the invoice paid once the sum of all its
    payments reaches the invoice total.
    """
    gateway = get_gateway()
    body = read_json_body()
    if isinstance(body, dict) and not body.get('invoice_id') and path_invoice_id:
        body = dict(body, invoice_id=path_invoice_id)
    data = validate_payload(PaymentForm, body)

    invoice = gateway.select('invoices', ('id', 'total', 'status'), [('id', 'eq', data['invoice_id'])], single=True)

    payment = gateway.insert('payments', {
        'invoice_id': invoice['id'],
        'amount': data['amount'],
        'payment_date': today(),
        'payment_method': data.get('payment_method_id') or 'manual',
        'transaction_id': data.get('transaction_id') or generate_transaction_id(),
        'created_by': data.get('created_by'),
    })

    try:
        # Recomputed from every payment row, never kept as a running total
        amounts = gateway.select('payments', ('amount',), [('invoice_id', 'eq', invoice['id'])])
        paid = sum(float(row['amount']) for row in amounts)
        if paid >= float(invoice['total']) and invoice['status'] != 'paid':
            gateway.update('invoices', invoice['id'], {'status': 'paid'}, ('id',))
            logger.info('Invoice %s fully paid (%.2f of %.2f)', invoice['id'], paid, invoice['total'])
    except UpstreamError:
        logger.error('Partial write: payment %s saved but invoice %s status not recomputed',
                     payment['id'], invoice['id'])
        raise

    return created(payment)
