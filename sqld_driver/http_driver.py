from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
from types import MappingProxyType
import base64
import binascii
import logging
import time
import urllib.parse

import aiohttp

from .classify import classify_exception, classify_status, error_message, parse_json, snippet
from .driver import Driver, Statement, check_statements
from .errors import DecodeError, InvalidArgument, ProtocolMismatch, ServerError
from .result import ResultMeta, ResultSet, Row, Value

_logger = logging.getLogger(__name__)

_STATEMENT_FIELDS = ("success", "rows", "results", "meta")

class HttpDriver(Driver):
    """Driver that sends each transaction to sqld as a single HTTP request.

    The driver only holds its configuration, so one instance can serve any number of concurrent
    transactions. Without a `session`, every transaction opens its own short-lived `aiohttp.ClientSession`;
    a caller-provided session is used as is and is never closed by the driver.
    """

    _url: str
    _timeout: Optional[float]
    _session: Optional[aiohttp.ClientSession]
    _headers: Mapping[str, str]

    def __init__(
        self, url: str, *,
        timeout: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        scheme = urllib.parse.urlparse(url).scheme
        if scheme not in ("http", "https"):
            raise InvalidArgument(f"Unsupported URL scheme for HTTP driver: {scheme!r}")
        if timeout is not None and timeout <= 0:
            raise InvalidArgument(f"Timeout must be positive, got {timeout!r}")
        self._url = url
        self._timeout = timeout
        self._session = session
        self._headers = MappingProxyType(dict(headers or {}))

    @property
    def url(self) -> str:
        return self._url

    @property
    def timeout(self) -> Optional[float]:
        return self._timeout

    @property
    def headers(self) -> Mapping[str, str]:
        return self._headers

    async def transaction(self, statements: Sequence[Statement]) -> List[ResultSet]:
        stmts = check_statements(statements)
        req_body = {
            "statements": stmts,
        }

        _logger.debug("Sending %d statements to %s", len(stmts), self._url)
        start = time.monotonic()
        try:
            if self._session is not None:
                status, resp_body = await self._post(self._session, req_body)
            else:
                async with aiohttp.ClientSession() as session:
                    status, resp_body = await self._post(session, req_body)
        except Exception as e:
            error = classify_exception(e)
            if error is None or error is e:
                raise
            raise error from e
        _logger.debug("Received HTTP status %d from %s in %.3fs", status, self._url, time.monotonic() - start)

        server_error = classify_status(status, resp_body)
        if server_error is not None:
            raise server_error

        resp_json = parse_json(resp_body)
        results_json = _reconcile(resp_json, status, resp_body)
        if len(results_json) != len(stmts):
            raise ProtocolMismatch(len(stmts), len(results_json))

        legacy_shape = not isinstance(resp_json, list)
        return [
            _decode_result_set(result_set_json, legacy_shape)
            for result_set_json in results_json
        ]

    async def _post(self, session: aiohttp.ClientSession, req_body: Any) -> Tuple[int, bytes]:
        kwargs: Dict[str, Any] = {}
        if self._timeout is not None:
            kwargs["timeout"] = aiohttp.ClientTimeout(total=self._timeout)
        async with await session.post(
            self._url, json=req_body, headers=dict(self._headers), allow_redirects=False, **kwargs,
        ) as resp:
            return resp.status, await resp.read()

    def __repr__(self) -> str:
        return f"HttpDriver({self._url!r})"

def _reconcile(resp_json: Any, status: int, resp_body: bytes) -> List[Any]:
    if isinstance(resp_json, list):
        return resp_json
    if isinstance(resp_json, dict):
        if "error" in resp_json and not any(field in resp_json for field in _STATEMENT_FIELDS):
            raise ServerError(status, error_message(resp_body), snippet(resp_body))
        _logger.warning("Server returned a single result object instead of one result per statement")
        return [resp_json]
    raise DecodeError(f"Expected an array of results, got {type(resp_json).__name__}", snippet(resp_body))

def _decode_result_set(result_set_json: Any, legacy_shape: bool) -> ResultSet:
    if not isinstance(result_set_json, dict):
        raise DecodeError(f"Expected a result object, got {type(result_set_json).__name__}")

    meta = _decode_meta(result_set_json.get("meta"), legacy_shape)
    error_json = result_set_json.get("error")
    success = result_set_json.get("success", error_json is None)
    if not isinstance(success, bool):
        raise DecodeError(f"Expected a boolean success flag, got {success!r}")

    if not success:
        if result_set_json.get("rows"):
            raise DecodeError("Received rows for a statement that failed")
        return ResultSet.failure(_decode_error(error_json), meta)

    if "results" in result_set_json:
        columns, rows = _decode_columnar(result_set_json["results"])
    elif "rows" in result_set_json:
        columns, rows = _decode_row_objects(result_set_json["rows"])
    else:
        raise DecodeError("Result object contains neither rows nor results")
    return ResultSet(columns, rows, meta=meta)

def _decode_meta(meta_json: Any, legacy_shape: bool) -> ResultMeta:
    if meta_json is None:
        return ResultMeta(0, legacy_shape)
    if not isinstance(meta_json, dict):
        raise DecodeError(f"Expected a meta object, got {type(meta_json).__name__}")
    duration = meta_json.get("duration")
    if duration is None:
        duration = 0
    if isinstance(duration, bool) or not isinstance(duration, (int, float)) or duration < 0:
        raise DecodeError(f"Received invalid duration {duration!r}")
    return ResultMeta(duration, legacy_shape)

def _decode_error(error_json: Any) -> str:
    if isinstance(error_json, dict):
        error_json = error_json.get("message")
    if error_json is None or error_json == "":
        return "statement failed"
    return str(error_json)

def _decode_columnar(results_json: Any) -> Tuple[Tuple[str, ...], List[Row]]:
    if not isinstance(results_json, dict):
        raise DecodeError(f"Expected a results object, got {type(results_json).__name__}")
    columns_json = results_json.get("columns")
    rows_json = results_json.get("rows")
    if not isinstance(columns_json, list) or not isinstance(rows_json, list):
        raise DecodeError("Results object must contain columns and rows arrays")

    columns = tuple(str(col_json) for col_json in columns_json)
    # a repeated column name resolves to its first occurrence
    column_idxs: Dict[str, int] = {}
    for idx, name in enumerate(columns):
        column_idxs.setdefault(name, idx)
    rows = [_decode_row(row_json, len(columns), column_idxs) for row_json in rows_json]
    return columns, rows

def _decode_row(row_json: Any, column_count: int, column_idxs: Dict[str, int]) -> Row:
    if not isinstance(row_json, list):
        raise DecodeError(f"Expected a row array, got {type(row_json).__name__}")
    values = tuple(_decode_value(value_json) for value_json in row_json)
    if len(values) != column_count:
        raise DecodeError(f"Received {len(values)} values, expected {column_count} columns")
    return Row(column_idxs, values)

def _decode_row_objects(rows_json: Any) -> Tuple[Tuple[str, ...], List[Row]]:
    if not isinstance(rows_json, list):
        raise DecodeError(f"Expected an array of rows, got {type(rows_json).__name__}")

    rows = []
    for row_json in rows_json:
        if not isinstance(row_json, dict):
            raise DecodeError(f"Expected a row object, got {type(row_json).__name__}")
        rows.append(Row.from_mapping({
            str(name): _decode_value(value_json)
            for name, value_json in row_json.items()
        }))
    columns = tuple(rows[0]) if rows else ()
    return columns, rows

def _decode_value(value_json: Any) -> Value:
    if isinstance(value_json, bool):
        raise DecodeError(f"Received unexpected boolean value {value_json!r}")
    elif isinstance(value_json, int) or isinstance(value_json, float):
        return value_json
    elif isinstance(value_json, str):
        return value_json
    elif value_json is None:
        return None
    elif isinstance(value_json, dict) and isinstance(value_json.get("base64"), str):
        try:
            encoded = value_json["base64"]
            return base64.b64decode(encoded + "=" * (-len(encoded) % 4))
        except binascii.Error as e:
            raise DecodeError(f"Received invalid base64 value: {e}")
    else:
        raise DecodeError(f"Received unexpected JSON value of type {type(value_json).__name__}")
