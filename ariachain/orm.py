"""Field and table definitions for the object-relational mapping layer."""

from __future__ import annotations

from enum import Enum
from typing import Iterator


class ORMFieldType(Enum):
    """Kinds of column a table field can describe."""

    AUTO_FIELD = 0
    BINARY_FIELD = 1
    BOOLEAN_FIELD = 2
    INTEGER_FIELD = 3
    POSITIVE_INTEGER_FIELD = 4
    CHAR_FIELD = 5
    TEXT_FIELD = 6
    DATE_TIME_FIELD = 7
    FLOAT_FIELD = 8
    DECIMAL_FIELD = 9
    FOREIGN_KEY = 10
    ONE_TO_ONE_FIELD = 11
    MANY_TO_MANY_FIELD = 12


class NumFilter(Enum):
    """Comparison applied by a numeric query filter."""

    ALL = 0x0000
    EQU = 0x0001
    GT = 0x0010
    LT = 0x0020


class StrFilter(Enum):
    """Comparison applied by a string query filter."""

    EQU = 0x0001
    CONTAINS = 0x0002
    START_WITH = 0x0100
    END_WITH = 0x0200


class ORMField:
    """A column of a table: its type, name and constraints."""

    def __init__(self, field_type: ORMFieldType, column_name: str) -> None:
        self._field_type = field_type
        self._column_name = column_name
        self.primary = False
        self.unique = False
        self.nullable = False
        self.index = False

    @property
    def field_type(self) -> ORMFieldType:
        return self._field_type

    @property
    def column_name(self) -> str:
        return self._column_name

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._column_name!r})"


class CharField(ORMField):
    """A character column with a maximum length."""

    def __init__(self, column_name: str, max_length: int, nullable: bool = False) -> None:
        super().__init__(ORMFieldType.CHAR_FIELD, column_name)
        self._max_length = max_length
        self.nullable = nullable

    @property
    def max_length(self) -> int:
        return self._max_length


class IntField(ORMField):
    """An integer column."""

    def __init__(self, column_name: str, nullable: bool = False) -> None:
        super().__init__(ORMFieldType.INTEGER_FIELD, column_name)
        self.nullable = nullable


class ORMTable:
    """A named table made of an ordered list of fields."""

    def __init__(self, table_name: str) -> None:
        self._table_name = table_name
        self._fields: list[ORMField] = []
        self.table_setting: object | None = None

    @property
    def table_name(self) -> str:
        return self._table_name

    def add_field(self, field: ORMField) -> bool:
        """Append a field to the table."""
        self._fields.append(field)
        return True

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[ORMField]:
        return iter(self._fields)

    def get_field(self, index: int) -> ORMField | None:
        """Return the field at ``index``, or None when it is out of range."""
        if 0 <= index < len(self._fields):
            return self._fields[index]
        return None