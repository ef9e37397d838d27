from datetime import datetime

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from smarthr.utils.helpers import full_name

NEXT_LINE = {'new_x': XPos.LMARGIN, 'new_y': YPos.NEXT}


class InvoicePDF(FPDF):
    def footer(self):
        self.set_y(-15)
        self.set_fill_color(79, 70, 229)
        self.rect(10, self.get_y(), 190, 1.5, 'F')
        self.set_y(-12)
        self.set_font('Helvetica', 'I', 8)
        self.cell(0, 5, text=f'Page {self.page_no()}', align='C')


def _latin1(value):
    # Core fonts only cover latin-1
    return str(value).encode('latin-1', 'replace').decode('latin-1')


def generate_invoice_pdf(invoice):
    pdf = InvoicePDF(orientation='P', unit='mm', format='A4')
    pdf.set_auto_page_break(auto=True, margin=20)
    pdf.add_page()

    pdf.set_font('Helvetica', 'B', 16)
    pdf.cell(0, 10, text='SmartHR', align='C', **NEXT_LINE)
    pdf.set_font('Helvetica', 'B', 12)
    pdf.cell(0, 8, text=_latin1(f"Invoice {invoice['invoice_number']}"), align='C', **NEXT_LINE)
    pdf.ln(4)

    client = invoice.get('clients') or {}
    pdf.set_fill_color(245, 245, 245)
    pdf.set_font('Helvetica', 'B', 10)
    pdf.cell(95, 7, text=' BILL TO', border=1, fill=True)
    pdf.cell(95, 7, text=' DETAILS', border=1, fill=True, **NEXT_LINE)
    pdf.set_font('Helvetica', '', 9)
    left = [client.get('company_name') or '-', full_name(client) or '-', client.get('email') or '-',
            client.get('address') or '-']
    right = [f"Issue Date: {invoice['issue_date']}", f"Due Date: {invoice['due_date']}",
             f"Status: {invoice['status'].capitalize()}",
             f"Project: {(invoice.get('projects') or {}).get('name') or '-'}"]
    for left_text, right_text in zip(left, right):
        pdf.cell(95, 6, text=_latin1(f' {left_text}'), border='LR')
        pdf.cell(95, 6, text=_latin1(f' {right_text}'), border='R', **NEXT_LINE)
    pdf.cell(190, 0, text='', border='T', **NEXT_LINE)
    pdf.ln(6)

    # Items: Description (100), Qty (25), Rate (30), Amount (35)
    col_desc, col_qty, col_rate, col_amt = 100, 25, 30, 35
    pdf.set_fill_color(240, 240, 240)
    pdf.set_font('Helvetica', 'B', 10)
    pdf.cell(col_desc, 9, text='Description', border=1, fill=True, align='C')
    pdf.cell(col_qty, 9, text='Qty', border=1, fill=True, align='C')
    pdf.cell(col_rate, 9, text='Rate', border=1, fill=True, align='C')
    pdf.cell(col_amt, 9, text='Amount', border=1, fill=True, align='C', **NEXT_LINE)

    pdf.set_font('Helvetica', '', 9)
    for item in invoice.get('invoice_items') or []:
        desc = item['description'] if len(item['description']) < 55 else item['description'][:52] + '...'
        pdf.cell(col_desc, 8, text=_latin1(desc), border=1)
        pdf.cell(col_qty, 8, text=f"{item['quantity']:g}", border=1, align='C')
        pdf.cell(col_rate, 8, text=f"{item['rate']:,.2f}", border=1, align='R')
        pdf.cell(col_amt, 8, text=f"{item['amount']:,.2f}", border=1, align='R', **NEXT_LINE)

    label_w = col_desc + col_qty + col_rate
    totals = [('Subtotal', invoice['subtotal'])]
    if invoice.get('tax_amount'):
        rate = f" ({invoice['tax_rate']:g}%)" if invoice.get('tax_rate') else ''
        totals.append((f'Tax{rate}', invoice['tax_amount']))
    if invoice.get('discount'):
        totals.append(('Discount', -invoice['discount']))
    pdf.set_font('Helvetica', '', 9)
    for label, amount in totals:
        pdf.cell(label_w, 7, text=label, border=1, align='R')
        pdf.cell(col_amt, 7, text=f'{amount:,.2f}', border=1, align='R', **NEXT_LINE)
    pdf.set_font('Helvetica', 'B', 10)
    pdf.set_fill_color(245, 245, 245)
    pdf.cell(label_w, 9, text='TOTAL', border=1, fill=True, align='R')
    pdf.cell(col_amt, 9, text=f"{invoice['total']:,.2f}", border=1, fill=True, align='R', **NEXT_LINE)

    payments = invoice.get('payments') or []
    if payments:
        pdf.ln(6)
        pdf.set_font('Helvetica', 'B', 10)
        pdf.cell(0, 7, text=' PAYMENTS', border=1, fill=True, **NEXT_LINE)
        pdf.set_font('Helvetica', '', 9)
        paid = 0.0
        for payment in payments:
            paid += float(payment['amount'])
            pdf.cell(40, 7, text=str(payment['payment_date']), border=1, align='C')
            pdf.cell(50, 7, text=_latin1(payment['payment_method']), border=1, align='C')
            pdf.cell(65, 7, text=_latin1(payment['transaction_id'] or '-'), border=1, align='C')
            pdf.cell(35, 7, text=f"{payment['amount']:,.2f}", border=1, align='R', **NEXT_LINE)
        pdf.set_font('Helvetica', 'B', 9)
        pdf.cell(155, 7, text='Balance Due', border=1, align='R')
        pdf.cell(35, 7, text=f"{max(invoice['total'] - paid, 0):,.2f}", border=1, align='R', **NEXT_LINE)

    if invoice.get('notes'):
        pdf.ln(6)
        pdf.set_font('Helvetica', 'I', 9)
        pdf.multi_cell(0, 5, text=_latin1(invoice['notes']), **NEXT_LINE)

    pdf.ln(8)
    pdf.set_font('Helvetica', 'I', 8)
    pdf.cell(0, 5, text=f"Generated on {datetime.now().strftime('%d %b %Y %H:%M')}", align='R', **NEXT_LINE)

    return bytes(pdf.output())
