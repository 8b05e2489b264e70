from .driver import Driver, Statement, check_statements
from .errors import (
    DriverError, InvalidArgument, TransportError, ServerError, DecodeError, ProtocolMismatch,
)
from .http_driver import HttpDriver
from .result import ResultMeta, ResultSet, Row, Value

__all__ = [
    "Driver", "Statement", "check_statements",
    "DriverError", "InvalidArgument", "TransportError", "ServerError", "DecodeError", "ProtocolMismatch",
    "HttpDriver",
    "ResultMeta", "ResultSet", "Row", "Value",
]
