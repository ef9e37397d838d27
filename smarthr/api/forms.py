from flask_wtf import FlaskForm
from werkzeug.datastructures import MultiDict
from wtforms import BooleanField, DateField, DecimalField, FloatField, IntegerField, SelectField, StringField
from wtforms.validators import DataRequired, Email, InputRequired, NumberRange, Optional, Regexp

from smarthr import errors
from smarthr.models import CLIENT_STATUSES, EMPLOYEE_STATUSES, EMPLOYMENT_TYPES, INVOICE_STATUSES, LEAVE_STATUSES
from smarthr.utils.helpers import UUID_PATTERN

DATE_FORMAT = '%Y-%m-%d'


def uuid_field(label, required=False):
    validators = [InputRequired()] if required else []
    return StringField(label, validators=validators + [Regexp(UUID_PATTERN, message='Invalid uuid')])


class PayloadForm(FlaskForm):
    class Meta:
        csrf = False

    # name -> form class for fields holding a list of objects
    nested_lists = {}
    # optional fields that also accept an explicit null
    nullable = frozenset()


# --- Resource schemas ---

class DepartmentForm(PayloadForm):
    name = StringField('Name', validators=[DataRequired(message='Name is required')])
    description = StringField('Description', validators=[Optional()])

    nullable = frozenset({'description'})


class EmployeeForm(PayloadForm):
    user_id = uuid_field('User', required=True)
    employee_id = StringField('Employee ID', validators=[InputRequired()])
    department_id = uuid_field('Department')
    designation_id = uuid_field('Designation')
    joining_date = DateField('Joining Date', format=DATE_FORMAT, validators=[InputRequired()])
    employment_type = SelectField('Employment Type', choices=EMPLOYMENT_TYPES)
    status = SelectField('Status', choices=EMPLOYEE_STATUSES)
    manager_id = uuid_field('Manager')
    salary = FloatField('Salary', validators=[Optional()])

    nullable = frozenset({'department_id', 'designation_id', 'manager_id', 'salary'})


class InvoiceItemForm(PayloadForm):
    description = StringField('Description', validators=[InputRequired()])
    quantity = FloatField('Quantity', validators=[InputRequired()])
    rate = FloatField('Rate', validators=[InputRequired()])
    amount = FloatField('Amount', validators=[InputRequired()])


class InvoiceForm(PayloadForm):
    invoice_number = StringField('Invoice Number', validators=[InputRequired()])
    client_id = uuid_field('Client', required=True)
    project_id = uuid_field('Project')
    issue_date = DateField('Issue Date', format=DATE_FORMAT, validators=[InputRequired()])
    due_date = DateField('Due Date', format=DATE_FORMAT, validators=[InputRequired()])
    subtotal = FloatField('Subtotal', validators=[InputRequired()])
    tax_rate = FloatField('Tax Rate', validators=[Optional()])
    tax_amount = FloatField('Tax Amount', validators=[Optional()])
    discount = FloatField('Discount', validators=[Optional()])
    total = FloatField('Total', validators=[InputRequired()])
    status = SelectField('Status', choices=INVOICE_STATUSES)
    notes = StringField('Notes', validators=[Optional()])

    nested_lists = {'items': InvoiceItemForm}
    nullable = frozenset({'project_id', 'tax_rate', 'tax_amount', 'discount', 'notes'})


class PaymentForm(PayloadForm):
    invoice_id = uuid_field('Invoice', required=True)
    amount = FloatField('Amount', validators=[InputRequired()])
    payment_method_id = StringField('Payment Method', validators=[Optional()])
    transaction_id = StringField('Transaction ID', validators=[Optional()])
    created_by = uuid_field('Created By')

    nullable = frozenset({'payment_method_id', 'transaction_id', 'created_by'})


class LeaveForm(PayloadForm):
    employee_id = uuid_field('Employee', required=True)
    leave_type_id = uuid_field('Leave Type', required=True)
    start_date = DateField('From Date', format=DATE_FORMAT, validators=[InputRequired()])
    end_date = DateField('To Date', format=DATE_FORMAT, validators=[InputRequired()])
    days = IntegerField('Days', validators=[InputRequired(), NumberRange(min=1, message='Days must be a positive integer')])
    reason = StringField('Reason', validators=[DataRequired(message='Reason is required')])
    status = SelectField('Status', choices=LEAVE_STATUSES)


class LeaveUpdateForm(LeaveForm):
    approved_by = uuid_field('Approved By')

    nullable = frozenset({'approved_by'})


class LeaveFilterForm(PayloadForm):
    employee_id = uuid_field('Employee')
    status = SelectField('Status', choices=LEAVE_STATUSES)
    from_date = DateField('From Date', format=DATE_FORMAT)
    to_date = DateField('To Date', format=DATE_FORMAT)


class ClientForm(PayloadForm):
    client_id = StringField('Client ID', validators=[InputRequired()])
    company_name = StringField('Company Name', validators=[DataRequired()])
    first_name = StringField('First Name', validators=[DataRequired()])
    last_name = StringField('Last Name', validators=[DataRequired()])
    email = StringField('Email', validators=[DataRequired(), Email()])
    phone = StringField('Phone', validators=[Optional()])
    address = StringField('Address', validators=[Optional()])
    status = SelectField('Status', choices=CLIENT_STATUSES)

    nullable = frozenset({'phone', 'address'})


# --- Validation ---

def validate_payload(form_class, payload, partial=False):
    """
    Validate ``payload`` against ``form_class`` and return the supplied
    fields converted to Python types, or raise ``ValidationError`` listing
    every issue. In partial mode absent fields are skipped.
    """
    cleaned, issues = _validate(form_class, payload, partial, [])
    if issues:
        raise errors.ValidationError(issues)
    return cleaned


def _validate(form_class, payload, partial, path):
    if not isinstance(payload, dict):
        return None, [_issue(path, f'Expected object, received {_json_type(payload)}', 'invalid_type')]

    form = form_class(formdata=_to_formdata(payload))
    issues = []
    cleared = []
    for name in list(form._fields):
        field = form[name]
        if name not in payload:
            if partial or not field.flags.required:
                del form[name]
            continue
        problem = _type_problem(field, payload[name], name in form_class.nullable)
        if problem:
            issues.append(_issue(path + [name], problem, 'invalid_type'))
            del form[name]
        elif payload[name] is None:
            cleared.append(name)
            del form[name]

    form.validate()
    for name, messages in form.errors.items():
        for message in messages:
            issues.append(_issue(path + [name], message, 'custom'))

    cleaned = {name: field.data for name, field in form._fields.items()}
    cleaned.update(dict.fromkeys(cleared))

    for name, entry_form in form_class.nested_lists.items():
        if name not in payload:
            if not partial:
                issues.append(_issue(path + [name], 'Required', 'invalid_type'))
            continue
        entries = payload[name]
        if not isinstance(entries, list):
            issues.append(_issue(path + [name], f'Expected array, received {_json_type(entries)}', 'invalid_type'))
            continue
        cleaned[name] = []
        for index, entry in enumerate(entries):
            entry_data, entry_issues = _validate(entry_form, entry, False, path + [name, index])
            issues.extend(entry_issues)
            cleaned[name].append(entry_data)

    return cleaned, issues


def _to_formdata(payload):
    formdata = MultiDict()
    for key, value in payload.items():
        if value is None or isinstance(value, (dict, list)):
            continue
        if isinstance(value, bool):
            formdata.add(key, 'y' if value else '')
        elif isinstance(value, float) and value.is_integer():
            formdata.add(key, str(int(value)))
        else:
            formdata.add(key, str(value))
    return formdata


def _type_problem(field, value, nullable):
    expected = _expected_type(field)
    if value is None:
        if field.flags.required:
            return 'Required'
        return None if nullable else f'Expected {expected}, received null'
    received = _json_type(value)
    if received != expected:
        return f'Expected {expected}, received {received}'
    if isinstance(field, IntegerField) and isinstance(value, float) and not value.is_integer():
        return 'Expected integer, received float'
    return None


def _expected_type(field):
    if isinstance(field, (IntegerField, FloatField, DecimalField)):
        return 'number'
    if isinstance(field, BooleanField):
        return 'boolean'
    return 'string'


def _json_type(value):
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, (int, float)):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, list):
        return 'array'
    return 'object'


def _issue(path, message, code):
    return {'path': list(path), 'message': message, 'code': code}
