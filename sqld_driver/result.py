from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union, overload
import collections.abc

Value = Union[str, float, int, bytes, None]

class ResultMeta:
    """Execution metadata of a single statement.

    A `duration` of zero means the server did not measure the statement.
    """

    __slots__ = ("_duration", "_legacy_shape")

    _duration: float
    _legacy_shape: bool

    def __init__(self, duration: float = 0, legacy_shape: bool = False) -> None:
        if not duration >= 0:
            raise ValueError(f"Duration must be a non-negative number, got {duration!r}")
        self._duration = duration
        self._legacy_shape = legacy_shape

    @property
    def duration(self) -> float:
        """Elapsed execution time reported by the server."""
        return self._duration

    @property
    def legacy_shape(self) -> bool:
        """True if the server answered with a single object instead of one result per statement."""
        return self._legacy_shape

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ResultMeta):
            return NotImplemented
        return self._duration == other._duration and self._legacy_shape == other._legacy_shape

    def __repr__(self) -> str:
        return f"ResultMeta(duration={self._duration!r}, legacy_shape={self._legacy_shape!r})"

class ResultSet:
    """Result of an SQL statement.

    The result is composed of columns and rows. Every row is represented as a `Row` object and the length of
    every row is equal to the number of columns. A statement that the server rejected has `success` set to
    False, no rows and a message in `error`.
    """

    _columns: Tuple[str, ...]
    _rows: List["Row"]
    _success: bool
    _meta: ResultMeta
    _error: Optional[str]

    def __init__(
        self, columns: Tuple[str, ...], rows: List["Row"], *,
        success: bool = True,
        meta: Optional[ResultMeta] = None,
        error: Optional[str] = None,
    ) -> None:
        if not success:
            if rows:
                raise ValueError("A failed result set cannot contain rows")
            if not error:
                raise ValueError("A failed result set must carry an error message")
        self._columns = columns
        self._rows = rows
        self._success = success
        self._meta = meta if meta is not None else ResultMeta()
        self._error = error

    @classmethod
    def failure(cls, error: str, meta: Optional[ResultMeta] = None) -> "ResultSet":
        """Build the result of a statement that failed on the server."""
        return cls((), [], success=False, meta=meta, error=error)

    @property
    def columns(self) -> Tuple[str, ...]:
        """The column names in the result set."""
        return self._columns

    @property
    def rows(self) -> List["Row"]:
        """List of all rows in the result set."""
        return self._rows

    @property
    def success(self) -> bool:
        """Whether this statement executed without error."""
        return self._success

    @property
    def meta(self) -> ResultMeta:
        return self._meta

    @property
    def error(self) -> Optional[str]:
        """The error reported for this statement, or None if it succeeded."""
        return self._error

    def __iter__(self) -> Iterator["Row"]:
        return self._rows.__iter__()

    def __len__(self) -> int:
        return len(self._rows)

    def __repr__(self) -> str:
        if not self._success:
            return f"ResultSet(success=False, error={self._error!r}, meta={self._meta!r})"
        return f"ResultSet(columns={self._columns!r}, rows={self._rows!r}, meta={self._meta!r})"

class Row(collections.abc.Mapping):
    """A row returned by an SQL statement.

    The row is a mapping from column name to value. Values can also be accessed by position or with a
    slice, in column order. When a column name repeats, the name refers to its first occurrence and only
    positional access reaches the later values.
    """

    _column_idxs: Dict[str, int]
    _values: Tuple[Value, ...]

    def __init__(self, column_idxs: Dict[str, int], values: Tuple[Value, ...]) -> None:
        self._column_idxs = column_idxs
        self._values = values

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Value]) -> "Row":
        column_idxs = {name: idx for (idx, name) in enumerate(mapping)}
        return cls(column_idxs, tuple(mapping.values()))

    @overload
    def __getitem__(self, key: Union[int, str]) -> Value:
        pass

    @overload
    def __getitem__(self, key: slice) -> Tuple[Value, ...]:
        pass

    def __getitem__(self, key: Union[int, str, slice]) -> Union[Value, Tuple[Value, ...]]:
        """Access a value by name, index or slice."""
        tuple_key: Union[int, slice]
        if isinstance(key, str):
            tuple_key = self._column_idxs[key]
        else:
            tuple_key = key
        return self._values[tuple_key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._column_idxs)

    def __len__(self) -> int:
        return len(self._column_idxs)

    def __contains__(self, key: object) -> bool:
        return key in self._column_idxs

    def get(self, key: Any, default: Any = None) -> Any:
        """Look up a value by column name, returning `default` if there is no such column."""
        if key in self._column_idxs:
            return self._values[self._column_idxs[key]]
        return default

    def __repr__(self) -> str:
        return repr(dict(self.items()))

    def astuple(self) -> Tuple[Value, ...]:
        """The row values in column order."""
        return self._values
