import logging
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import delete as sql_delete, func, select as sql_select, update as sql_update
from sqlalchemy.exc import SQLAlchemyError

from smarthr.errors import NotFound, UpstreamError

logger = logging.getLogger(__name__)

_OPERATORS = {
    'eq': lambda column, value: column == value,
    'neq': lambda column, value: column != value,
    'gte': lambda column, value: column >= value,
    'lte': lambda column, value: column <= value,
}

# Marks a row dropped because an inner embed found nothing
_MISSING = object()


class Embed:
    """
    A related entity to expand into each row, under ``name``.

    ``relation`` is the model attribute to follow (defaults to ``name``).
    With ``inner=True`` rows without the related entity are dropped, the
    same way an inner join would drop them.
    """

    def __init__(self, name, columns=('*',), relation=None, inner=False):
        self.name = name
        self.columns = tuple(columns)
        self.relation = relation or name
        self.inner = inner

    def __repr__(self):
        return f'<Embed {self.name}{"!inner" if self.inner else ""}>'


def to_json_value(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


def serialize(obj, columns=('*',)):
    row = {}
    for column in columns:
        if isinstance(column, Embed):
            value = _serialize_embed(obj, column)
            if value is _MISSING:
                return _MISSING
            row[column.name] = value
        elif column == '*':
            excluded = getattr(obj, 'serialize_exclude', ())
            for table_column in obj.__table__.columns:
                if table_column.key in excluded:
                    continue
                row[table_column.key] = to_json_value(getattr(obj, table_column.key))
        else:
            row[column] = to_json_value(getattr(obj, column))
    return row


def _serialize_embed(obj, embed):
    related = getattr(obj, embed.relation)
    if isinstance(related, list):
        rows = [serialize(item, embed.columns) for item in related]
        rows = [row for row in rows if row is not _MISSING]
        if embed.inner and not rows:
            return _MISSING
        return rows
    if related is None:
        return _MISSING if embed.inner else None
    row = serialize(related, embed.columns)
    if row is _MISSING:
        return _MISSING if embed.inner else None
    return row


class PersistenceGateway:

    def __init__(self, session, models):
        self.session = session
        self.models = dict(models)

    def _model(self, table):
        try:
            return self.models[table]
        except KeyError:
            raise UpstreamError(f'relation "{table}" does not exist')

    def _where(self, model, filters):
        clauses = []
        for column, op, value in filters:
            clauses.append(_OPERATORS[op](getattr(model, column), value))
        return clauses

    def _fail(self, exc):
        self.session.rollback()
        message = str(getattr(exc, 'orig', None) or exc)
        logger.debug('Backend error: %s', message)
        return UpstreamError(message)

    def select(self, table, columns=('*',), filters=(), order=None, single=False):
        model = self._model(table)
        statement = sql_select(model).where(*self._where(model, filters))
        if order:
            descending = order.startswith('-')
            column = getattr(model, order.lstrip('-'))
            statement = statement.order_by(column.desc() if descending else column.asc())
        try:
            objects = self.session.execute(statement).scalars().all()
            rows = [serialize(obj, columns) for obj in objects]
        except SQLAlchemyError as e:
            raise self._fail(e)
        rows = [row for row in rows if row is not _MISSING]
        if single:
            if len(rows) != 1:
                raise NotFound()
            return rows[0]
        return rows

    def count(self, table, filters=()):
        model = self._model(table)
        statement = sql_select(func.count()).select_from(model).where(*self._where(model, filters))
        try:
            return self.session.execute(statement).scalar_one()
        except SQLAlchemyError as e:
            raise self._fail(e)

    def insert(self, table, row, columns=('*',)):
        model = self._model(table)
        obj = model(**row)
        try:
            self.session.add(obj)
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._fail(e)
        return self.select(table, columns, [('id', 'eq', obj.id)], single=True)

    def insert_many(self, table, rows):
        if not rows:
            return []
        model = self._model(table)
        objects = [model(**row) for row in rows]
        try:
            self.session.add_all(objects)
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._fail(e)
        return [serialize(obj) for obj in objects]

    def update(self, table, id, patch, columns=('*',)):
        model = self._model(table)
        if patch:
            statement = sql_update(model).where(model.id == id).values(**patch)
            try:
                result = self.session.execute(statement)
                self.session.commit()
            except SQLAlchemyError as e:
                raise self._fail(e)
            if result.rowcount == 0:
                raise NotFound()
            # Statement-level updates bypass the identity map
            self.session.expire_all()
        return self.select(table, columns, [('id', 'eq', id)], single=True)

    def delete(self, table, id):
        deleted = self.delete_where(table, [('id', 'eq', id)])
        if deleted == 0:
            raise NotFound()

    def delete_where(self, table, filters):
        model = self._model(table)
        statement = sql_delete(model).where(*self._where(model, filters))
        try:
            result = self.session.execute(statement)
            self.session.commit()
        except SQLAlchemyError as e:
            raise self._fail(e)
        self.session.expire_all()
        return result.rowcount
