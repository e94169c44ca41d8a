"""
Parameterized SQL statement builder

Turns ordered ``(column, value)`` pairs into SET / WHERE / INSERT clauses
with named bind parameters ``:p1``, ``:p2``, ... Values never end up in the
SQL text. A value of ``None`` means the field was not supplied and is left
out; ``CLEAR`` means the field was supplied and must be written as NULL.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import text
from sqlalchemy.sql.elements import TextClause

Fields = Iterable[Tuple[str, Any]]


class _Clear:
    """Marker for an explicit NULL assignment"""

    def __repr__(self):
        return "CLEAR"


CLEAR = _Clear()


def quote(identifier: str) -> str:
    return '"%s"' % identifier.replace('"', '""')


def param_name(index: int) -> str:
    return f"p{index}"


@dataclass
class Assignments:
    """Ordered ``"column" = :pN`` fragments and their bound values"""

    columns: List[str] = field(default_factory=list)
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def fragments(self) -> List[str]:
        return [f"{quote(column)} = :{name}" for column, name in zip(self.columns, self.params)]

    @property
    def is_empty(self) -> bool:
        return not self.columns

    @property
    def next_index(self) -> int:
        return len(self.params) + 1


@dataclass
class Statement:
    sql: str
    params: Dict[str, Any]

    def text(self) -> TextClause:
        return text(self.sql)


def build_assignments(fields: Fields, start: int = 1, skip_absent: bool = True) -> Assignments:
    """Build ``"column" = :pN`` fragments for the present fields.

    Numbering starts at ``start`` so it can continue after parameters that
    are already bound elsewhere in the statement.
    """
    assignments = Assignments()
    index = start
    for column, value in fields:
        if value is None:
            if skip_absent:
                continue
            raise ValueError(f"missing value for {column}")
        if value is CLEAR:
            value = None
        assignments.columns.append(column)
        assignments.params[param_name(index)] = value
        index += 1
    return assignments


def build_update(table: str, fields: Fields, where: Fields, touch: Sequence[str] = ()) -> Optional[Statement]:
    """Build an UPDATE for the present fields, scoped by ``where``.

    The WHERE values are bound first (``:p1`` ...). ``touch`` columns are set
    to CURRENT_TIMESTAMP. Returns ``None`` when no field is present so the
    caller can skip the write.
    """
    conditions = build_assignments(where, skip_absent=False)
    assignments = build_assignments(fields, start=conditions.next_index)
    if assignments.is_empty:
        return None

    set_clause = assignments.fragments + [f"{quote(column)} = CURRENT_TIMESTAMP" for column in touch]
    sql = "UPDATE {table} SET {assignments} WHERE {conditions}".format(
        table=quote(table),
        assignments=", ".join(set_clause),
        conditions=" AND ".join(conditions.fragments),
    )
    return Statement(sql, {**conditions.params, **assignments.params})


def build_delete(table: str, where: Fields, returning: Sequence[str] = ()) -> Statement:
    conditions = build_assignments(where, skip_absent=False)
    sql = "DELETE FROM {table} WHERE {conditions}".format(
        table=quote(table),
        conditions=" AND ".join(conditions.fragments),
    )
    if returning:
        sql += " RETURNING " + ", ".join(quote(column) for column in returning)
    return Statement(sql, conditions.params)


def build_insert(table: str, required: Fields, optional: Fields = (), touch: Sequence[str] = ()) -> Statement:
    """Build an INSERT.

    Every ``required`` column is always part of the column list, ``optional``
    columns only when their value is present.
    """
    columns: List[str] = []
    placeholders: List[str] = []
    params: Dict[str, Any] = {}

    def add(column, value):
        name = param_name(len(params) + 1)
        columns.append(quote(column))
        placeholders.append(f":{name}")
        params[name] = None if value is CLEAR else value

    for column, value in required:
        add(column, value)
    for column, value in optional:
        if value is not None:
            add(column, value)
    for column in touch:
        columns.append(quote(column))
        placeholders.append("CURRENT_TIMESTAMP")

    sql = "INSERT INTO {table} ({columns}) VALUES ({values})".format(
        table=quote(table),
        columns=", ".join(columns),
        values=", ".join(placeholders),
    )
    return Statement(sql, params)
