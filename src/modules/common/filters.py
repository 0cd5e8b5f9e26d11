"""Translate client-supplied filter objects into SQLAlchemy predicates.

Clients describe a filter as JSON: a field maps either to a literal
(equality) or to an object of ``operator -> operand`` pairs, and the
top-level ``and``/``or`` keys combine nested filters::

    {"course": "Physics", "age": {"gte": 21, "lt": 30}}
    {"or": [{"status": "completed"}, {"email": {"exists": false}}]}

Only the operators in ``OPERATORS`` and the fields a :class:`FilterBuilder`
was created with are accepted, and every operand is coerced to the column's
Python type before it reaches a statement. A leading ``$`` on operator and
logical keys is ignored, so Mongo-style ``{"$gte": 21}`` also works.
"""

from typing import Any, Callable, Dict, Iterable, List, Mapping

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel
from sqlalchemy import and_, or_
from sqlalchemy.orm import InstrumentedAttribute
from sqlalchemy.sql.elements import ColumnElement

from .constants import MAX_SQL_INTEGER, MIN_SQL_INTEGER
from .exceptions import InvalidFilterError

OperatorBuilder = Callable[[InstrumentedAttribute, Any], ColumnElement[bool]]

MAX_FILTER_DEPTH = 4


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user text is matched literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def fits_integer_column(value: int) -> bool:
    """True when ``value`` can be bound to a 64-bit integer column."""
    return MIN_SQL_INTEGER <= value <= MAX_SQL_INTEGER


OPERATORS: Dict[str, OperatorBuilder] = {
    "eq": lambda column, value: column == value,
    "ne": lambda column, value: column != value,
    "gt": lambda column, value: column > value,
    "gte": lambda column, value: column >= value,
    "lt": lambda column, value: column < value,
    "lte": lambda column, value: column <= value,
    "in": lambda column, values: column.in_(values),
    "nin": lambda column, values: column.not_in(values),
    "exists": lambda column, present: column.is_not(None) if present else column.is_(None),
    "contains": lambda column, text: column.ilike(f"%{escape_like(text)}%", escape="\\"),
}

LOGICAL_OPERATORS = {"and": and_, "or": or_}

_ORDERING_OPERATORS = {"gt", "gte", "lt", "lte"}

_adapters: Dict[type, TypeAdapter] = {}


def _adapter_for(python_type: type) -> TypeAdapter:
    adapter = _adapters.get(python_type)
    if adapter is None:
        adapter = _adapters[python_type] = TypeAdapter(python_type)
    return adapter


class FilterBuilder:
    """Builds a single WHERE predicate for ``model`` from a filter object.

    Args:
        model: Mapped class the filter applies to
        fields: Attribute names clients may filter on; each is also
            accepted in its camelCase spelling
    """

    def __init__(self, model: type, fields: Iterable[str]) -> None:
        self.model = model
        self._columns: Dict[str, InstrumentedAttribute] = {}
        for name in fields:
            column = getattr(model, name)
            self._columns[name] = column
            self._columns[to_camel(name)] = column

    @property
    def fields(self) -> List[str]:
        return sorted(self._columns)

    def build(self, criteria: Mapping[str, Any]) -> ColumnElement[bool]:
        """Return the conjunction of every clause in ``criteria``.

        Raises:
            InvalidFilterError: for an empty filter, an unknown field or
                operator, or an operand of the wrong type
        """
        if not isinstance(criteria, Mapping) or not criteria:
            raise InvalidFilterError("Filter must be a non-empty object")
        return and_(*self._clauses(criteria, depth=0))

    def _clauses(self, criteria: Mapping[str, Any], depth: int) -> List[ColumnElement[bool]]:
        if depth > MAX_FILTER_DEPTH:
            raise InvalidFilterError(f"Filters may be nested at most {MAX_FILTER_DEPTH} levels deep")

        clauses: List[ColumnElement[bool]] = []
        for key, value in criteria.items():
            logical = LOGICAL_OPERATORS.get(key.lstrip("$"))
            if logical is not None:
                clauses.append(logical(*self._nested(key, value, depth)))
                continue

            column = self._columns.get(key)
            if column is None:
                raise InvalidFilterError(f"Unknown filter field '{key}'")

            if isinstance(value, Mapping):
                if not value:
                    raise InvalidFilterError(f"Empty operator object for field '{key}'")
                for operator, operand in value.items():
                    clauses.append(self._predicate(key, column, operator.lstrip("$"), operand))
            else:
                clauses.append(self._predicate(key, column, "eq", value))

        return clauses

    def _nested(self, key: str, value: Any, depth: int) -> List[ColumnElement[bool]]:
        if not isinstance(value, list) or not value:
            raise InvalidFilterError(f"'{key}' expects a non-empty list of filters")

        parts = []
        for item in value:
            if not isinstance(item, Mapping) or not item:
                raise InvalidFilterError(f"Every entry of '{key}' must be a non-empty object")
            parts.append(and_(*self._clauses(item, depth + 1)))
        return parts

    def _predicate(self, field: str, column: InstrumentedAttribute, operator: str, operand: Any) -> ColumnElement[bool]:
        builder = OPERATORS.get(operator)
        if builder is None:
            raise InvalidFilterError(f"Unsupported operator '{operator}' for field '{field}'")

        python_type = column.expression.type.python_type

        if operator == "exists":
            if not isinstance(operand, bool):
                raise InvalidFilterError(f"'exists' on '{field}' expects true or false")
            return builder(column, operand)

        if operator in ("in", "nin"):
            if not isinstance(operand, list) or not operand:
                raise InvalidFilterError(f"'{operator}' on '{field}' expects a non-empty list")
            return builder(column, [self._coerce(field, python_type, item) for item in operand])

        if operator == "contains":
            if python_type is not str or not isinstance(operand, str):
                raise InvalidFilterError(f"'contains' on '{field}' expects text")
            return builder(column, operand)

        if operand is None:
            if operator == "eq":
                return column.is_(None)
            if operator == "ne":
                return column.is_not(None)
            raise InvalidFilterError(f"'{operator}' on '{field}' does not accept null")

        if operator in _ORDERING_OPERATORS and python_type is bool:
            raise InvalidFilterError(f"'{operator}' is not defined for boolean field '{field}'")

        return builder(column, self._coerce(field, python_type, operand))

    @staticmethod
    def _coerce(field: str, python_type: type, operand: Any) -> Any:
        if isinstance(operand, (Mapping, list)):
            raise InvalidFilterError(f"Invalid value for '{field}': expected a single {python_type.__name__}")
        try:
            value = _adapter_for(python_type).validate_python(operand)
        except PydanticValidationError:
            raise InvalidFilterError(f"Invalid value for '{field}': expected {python_type.__name__}") from None

        if python_type is int and not fits_integer_column(value):
            raise InvalidFilterError(f"Invalid value for '{field}': integer out of range")
        return value
