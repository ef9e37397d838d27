import sqlite3
import uuid

from flask_login import UserMixin
from sqlalchemy import event
from sqlalchemy.engine import Engine
from werkzeug.security import generate_password_hash, check_password_hash

from . import db, login_manager
from smarthr.utils.helpers import utcnow

USER_ROLES = ['admin', 'employee', 'manager']
EMPLOYMENT_TYPES = ['full-time', 'part-time', 'contract', 'intern']
EMPLOYEE_STATUSES = ['active', 'inactive', 'on-leave']
CLIENT_STATUSES = ['active', 'inactive']
INVOICE_STATUSES = ['draft', 'sent', 'paid', 'overdue', 'cancelled']
LEAVE_STATUSES = ['pending', 'approved', 'rejected']


def new_id():
    return str(uuid.uuid4())


@event.listens_for(Engine, 'connect')
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores FOREIGN KEY clauses unless asked per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute('PRAGMA foreign_keys=ON')
        cursor.close()


class User(UserMixin, db.Model):
    __tablename__ = 'users'
    serialize_exclude = ('password_hash', 'reset_token', 'reset_token_expires_at')

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    email = db.Column(db.String(120), index=True, unique=True, nullable=False)
    role = db.Column(db.String(20), nullable=False, default='employee')
    first_name = db.Column(db.String(64), nullable=False)
    last_name = db.Column(db.String(64), nullable=False)
    phone = db.Column(db.String(20))
    address = db.Column(db.String(200))
    avatar_url = db.Column(db.String(255))

    password_hash = db.Column(db.String(256))
    reset_token = db.Column(db.String(64), index=True)
    reset_token_expires_at = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    employee = db.relationship('Employee', back_populates='user', uselist=False)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def __repr__(self):
        return f'<User {self.email}>'


@login_manager.user_loader
def load_user(id):
    return db.session.get(User, id)


class Department(db.Model):
    __tablename__ = 'departments'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(100), unique=True, nullable=False)
    description = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    designations = db.relationship('Designation', back_populates='department')

    def __repr__(self):
        return f'<Department {self.name}>'


class Designation(db.Model):
    __tablename__ = 'designations'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(100), nullable=False)
    department_id = db.Column(db.String(36), db.ForeignKey('departments.id'), nullable=False)
    description = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    department = db.relationship('Department', back_populates='designations')

    def __repr__(self):
        return f'<Designation {self.name}>'


class Employee(db.Model):
    __tablename__ = 'employees'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'), unique=True, nullable=False)
    employee_id = db.Column(db.String(64), unique=True, nullable=False)
    department_id = db.Column(db.String(36), db.ForeignKey('departments.id'))
    designation_id = db.Column(db.String(36), db.ForeignKey('designations.id'))
    joining_date = db.Column(db.Date, nullable=False)
    employment_type = db.Column(db.String(20), nullable=False, default='full-time')
    status = db.Column(db.String(20), nullable=False, default='active')
    manager_id = db.Column(db.String(36), db.ForeignKey('employees.id'))
    salary = db.Column(db.Float)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    user = db.relationship('User', back_populates='employee')
    department = db.relationship('Department')
    designation = db.relationship('Designation')
    manager = db.relationship('Employee', remote_side=[id], backref='subordinates')
    leaves = db.relationship('Leave', back_populates='employee')

    def __repr__(self):
        return f'<Employee {self.employee_id}>'


class Client(db.Model):
    __tablename__ = 'clients'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    client_id = db.Column(db.String(64), unique=True, nullable=False)
    company_name = db.Column(db.String(150), nullable=False)
    first_name = db.Column(db.String(64), nullable=False)
    last_name = db.Column(db.String(64), nullable=False)
    email = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(20))
    address = db.Column(db.String(200))
    status = db.Column(db.String(20), nullable=False, default='active')
    avatar_url = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    invoices = db.relationship('Invoice', back_populates='client')

    def __repr__(self):
        return f'<Client {self.company_name}>'


class Project(db.Model):
    __tablename__ = 'projects'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(150), nullable=False)
    client_id = db.Column(db.String(36), db.ForeignKey('clients.id'))
    description = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f'<Project {self.name}>'


class Invoice(db.Model):
    __tablename__ = 'invoices'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    invoice_number = db.Column(db.String(100), unique=True, nullable=False)
    client_id = db.Column(db.String(36), db.ForeignKey('clients.id'), nullable=False)
    project_id = db.Column(db.String(36), db.ForeignKey('projects.id'))
    issue_date = db.Column(db.Date, nullable=False)
    due_date = db.Column(db.Date, nullable=False)
    subtotal = db.Column(db.Float, nullable=False)
    tax_rate = db.Column(db.Float)
    tax_amount = db.Column(db.Float)
    discount = db.Column(db.Float)
    # Caller-supplied; total = subtotal + tax_amount - discount is not enforced
    total = db.Column(db.Float, nullable=False)
    status = db.Column(db.String(20), nullable=False, default='draft')
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    client = db.relationship('Client', back_populates='invoices')
    project = db.relationship('Project')
    items = db.relationship('InvoiceItem', back_populates='invoice', order_by='InvoiceItem.created_at')
    payments = db.relationship('Payment', back_populates='invoice', order_by='Payment.created_at')

    def __repr__(self):
        return f'<Invoice {self.invoice_number}>'


class InvoiceItem(db.Model):
    __tablename__ = 'invoice_items'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    invoice_id = db.Column(db.String(36), db.ForeignKey('invoices.id'), nullable=False)
    description = db.Column(db.String(255), nullable=False)
    quantity = db.Column(db.Float, nullable=False)
    rate = db.Column(db.Float, nullable=False)
    amount = db.Column(db.Float, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)

    invoice = db.relationship('Invoice', back_populates='items')

    def __repr__(self):
        return f'<InvoiceItem {self.description}>'


class Payment(db.Model):
    __tablename__ = 'payments'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    invoice_id = db.Column(db.String(36), db.ForeignKey('invoices.id'), nullable=False)
    amount = db.Column(db.Float, nullable=False)
    payment_date = db.Column(db.Date, nullable=False)
    payment_method = db.Column(db.String(64), nullable=False, default='manual')
    transaction_id = db.Column(db.String(100))
    created_by = db.Column(db.String(36), db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=utcnow)

    invoice = db.relationship('Invoice', back_populates='payments')

    def __repr__(self):
        return f'<Payment {self.transaction_id} - {self.amount}>'


class LeaveType(db.Model):
    __tablename__ = 'leave_types'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    name = db.Column(db.String(50), unique=True, nullable=False)
    description = db.Column(db.String(200))
    created_at = db.Column(db.DateTime, default=utcnow)

    def __repr__(self):
        return f'<LeaveType {self.name}>'


class Leave(db.Model):
    __tablename__ = 'leaves'

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    employee_id = db.Column(db.String(36), db.ForeignKey('employees.id'), nullable=False)
    leave_type_id = db.Column(db.String(36), db.ForeignKey('leave_types.id'), nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    days = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(20), nullable=False, default='pending')
    # approved_at is only ever stamped together with approved_by
    approved_by = db.Column(db.String(36), db.ForeignKey('users.id'))
    approved_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    employee = db.relationship('Employee', back_populates='leaves')
    leave_type = db.relationship('LeaveType')
    approver = db.relationship('User')

    def __repr__(self):
        return f'<Leave {self.employee_id} from {self.start_date} to {self.end_date}>'


TABLES = {
    'users': User,
    'departments': Department,
    'designations': Designation,
    'employees': Employee,
    'clients': Client,
    'projects': Project,
    'invoices': Invoice,
    'invoice_items': InvoiceItem,
    'payments': Payment,
    'leave_types': LeaveType,
    'leaves': Leave,
}
