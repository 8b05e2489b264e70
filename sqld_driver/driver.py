from abc import ABC, abstractmethod
from typing import Any, List, Sequence, TYPE_CHECKING

from .errors import InvalidArgument

if TYPE_CHECKING:
    from .result import ResultSet

Statement = str

class Driver(ABC):
    """A transport that executes a batch of SQL statements as one transaction.

    `transaction()` returns one `ResultSet` per statement, in the same order. A statement rejected by the
    server shows up as a result with `success` set to False; errors that prevent the whole batch from being
    transported or interpreted are raised as `DriverError`.
    """

    @abstractmethod
    async def transaction(self, statements: Sequence[Statement]) -> List["ResultSet"]:
        raise NotImplementedError()

    async def close(self) -> None:
        pass

    async def __aenter__(self) -> "Driver":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

def check_statements(statements: Sequence[Statement]) -> List[Statement]:
    """Validate a statement batch and return it as a new list."""
    if isinstance(statements, (str, bytes)):
        raise InvalidArgument("Expected a sequence of SQL statements, got a single string")
    stmts = list(statements)
    if not stmts:
        raise InvalidArgument("Cannot execute an empty batch of statements")
    for idx, stmt in enumerate(stmts):
        if not isinstance(stmt, str):
            raise InvalidArgument(f"Statement {idx} has type {type(stmt).__name__}, expected str")
    return stmts
