import os

import click

from smarthr import db

DEFAULT_LEAVE_TYPES = [
    ('Casual', 'Casual leave'),
    ('Sick', 'Sick leave'),
    ('Vacation', 'Planned vacation'),
]


def register_commands(app):

    @app.cli.command('init-db')
    def init_db():
        """Create all tables."""
        if app.config['SQLALCHEMY_DATABASE_URI'].startswith('sqlite:///'):
            os.makedirs(app.instance_path, exist_ok=True)
        db.create_all()
        click.echo('Database tables created.')

    @app.cli.command('seed-leave-types')
    def seed_leave_types():
        """Insert the default leave types that are missing."""
        from smarthr.models import LeaveType

        added = 0
        for name, description in DEFAULT_LEAVE_TYPES:
            if LeaveType.query.filter_by(name=name).first() is None:
                db.session.add(LeaveType(name=name, description=description))
                added += 1
        db.session.commit()
        click.echo(f'Added {added} leave type(s).')
