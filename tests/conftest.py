import itertools
from datetime import date

import pytest

from config import TestConfig
from smarthr import create_app, db
from smarthr.models import (
    Client, Department, Designation, Employee, Invoice, InvoiceItem, Leave, LeaveType, Project, User,
)

PREFIX = '/.netlify/functions'

_sequence = itertools.count(1)


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def gateway(app):
    with app.app_context():
        yield app.extensions['smarthr.gateway']


@pytest.fixture
def outbox(app):
    return app.extensions['smarthr.mailer'].outbox


@pytest.fixture
def factory(app):
    return Factory(app)


@pytest.fixture
def login(client, factory):
    """Sign a fresh user with the given role in through the test client."""
    def _login(role='admin'):
        user_id = factory.user(role=role, email=f'{role}{next(_sequence)}@example.com', password='secret123')
        with client.application.app_context():
            email = db.session.get(User, user_id).email
        response = client.post('/auth/sign-in', json={'email': email, 'password': 'secret123'})
        assert response.status_code == 200
        return user_id
    return _login


class Factory:
    """Creates rows straight through the ORM and hands back their ids."""

    def __init__(self, app):
        self.app = app

    def _add(self, obj):
        with self.app.app_context():
            db.session.add(obj)
            db.session.commit()
            return obj.id

    def user(self, role='employee', password=None, **kwargs):
        n = next(_sequence)
        kwargs.setdefault('email', f'user{n}@example.com')
        kwargs.setdefault('first_name', f'First{n}')
        kwargs.setdefault('last_name', f'Last{n}')
        user = User(role=role, **kwargs)
        if password:
            user.set_password(password)
        return self._add(user)

    def department(self, name=None, **kwargs):
        return self._add(Department(name=name or f'Department {next(_sequence)}', **kwargs))

    def designation(self, department_id, name=None):
        return self._add(Designation(name=name or f'Designation {next(_sequence)}', department_id=department_id))

    def employee(self, user_id=None, **kwargs):
        kwargs.setdefault('employee_id', f'EMP{next(_sequence):04d}')
        kwargs.setdefault('joining_date', date(2023, 1, 2))
        return self._add(Employee(user_id=user_id or self.user(), **kwargs))

    def client(self, **kwargs):
        n = next(_sequence)
        kwargs.setdefault('client_id', f'CL{n:04d}')
        kwargs.setdefault('company_name', f'Acme {n}')
        kwargs.setdefault('first_name', 'Wile')
        kwargs.setdefault('last_name', 'Coyote')
        kwargs.setdefault('email', f'client{n}@example.com')
        return self._add(Client(**kwargs))

    def project(self, client_id=None, name=None):
        return self._add(Project(name=name or f'Project {next(_sequence)}', client_id=client_id))

    def invoice(self, client_id=None, total=100.0, status='draft', items=(), **kwargs):
        kwargs.setdefault('invoice_number', f'INV-{next(_sequence):04d}')
        kwargs.setdefault('issue_date', date(2024, 1, 1))
        kwargs.setdefault('due_date', date(2024, 1, 31))
        invoice_id = self._add(Invoice(
            client_id=client_id or self.client(), subtotal=total, total=total, status=status, **kwargs,
        ))
        for item in items:
            self._add(InvoiceItem(invoice_id=invoice_id, **item))
        return invoice_id

    def leave_type(self, name=None):
        return self._add(LeaveType(name=name or f'Leave Type {next(_sequence)}'))

    def leave(self, employee_id=None, leave_type_id=None, **kwargs):
        kwargs.setdefault('start_date', date(2024, 1, 10))
        kwargs.setdefault('end_date', date(2024, 1, 12))
        kwargs.setdefault('days', 3)
        kwargs.setdefault('reason', 'travel')
        return self._add(Leave(
            employee_id=employee_id or self.employee(),
            leave_type_id=leave_type_id or self.leave_type(),
            **kwargs,
        ))
