"""
Opening and closing Snowflake connections.

The API dependencies open one connection per request; the seeding script
uses the context manager. MockSnowflakeConnection keeps the two tables in
memory and understands exactly the statements the repositories issue, so
the whole API runs without an account when SNOWFLAKE_MOCK_MODE is set.
"""

import base64
import json
import logging
import re
from contextlib import contextmanager
from typing import Any, Generator, Optional

from .base import SnowflakeConfig, SnowflakeConnection

logger = logging.getLogger(__name__)


class SnowflakeConnectionError(Exception):
    """Connecting or authenticating to Snowflake failed."""
    pass


def _load_private_key(key_path: Optional[str] = None, key_base64: Optional[str] = None) -> bytes:
    """
    Load private key for key-pair authentication.

    Snowflake requires the private key as DER bytes, not a file path.
    The PEM can come from a file or, for hosted deployments without a
    filesystem, as a base64-encoded environment variable.
    """
    from cryptography.hazmat.backends import default_backend
    from cryptography.hazmat.primitives import serialization

    if key_path:
        with open(key_path, 'rb') as key_file:
            pem_data = key_file.read()
    elif key_base64:
        pem_data = base64.b64decode(key_base64)
    else:
        raise SnowflakeConnectionError("No private key provided")

    private_key = serialization.load_pem_private_key(
        pem_data,
        password=None,  # No password on the key
        backend=default_backend()
    )

    # Convert to the format Snowflake expects
    return private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    )


def open_snowflake_connection(config: SnowflakeConfig) -> SnowflakeConnection:
    """Open a connection; the caller owns closing it."""
    import snowflake.connector

    connect_params = {
        'account': config.account,
        'user': config.user,
        'database': config.database,
        'schema': config.schema,
        'warehouse': config.warehouse,
        'role': config.role,
        'client_session_keep_alive': True,
    }

    if config.private_key_path or config.private_key_base64:
        logger.info("Using key-pair authentication for Snowflake")
        try:
            connect_params['private_key'] = _load_private_key(
                config.private_key_path, config.private_key_base64
            )
        except (OSError, ValueError) as e:
            raise SnowflakeConnectionError(f"Could not load private key: {e}") from e
    elif config.password:
        logger.info("Using password authentication for Snowflake")
        connect_params['password'] = config.password
    else:
        raise SnowflakeConnectionError(
            "Either password or a private key must be provided"
        )

    try:
        conn = snowflake.connector.connect(**connect_params)
    except snowflake.connector.errors.DatabaseError as e:
        logger.error(
            "Snowflake connection failed",
            extra={"error": str(e), "account": config.account}
        )
        raise SnowflakeConnectionError(f"Database connection failed: {e}") from e

    logger.debug(
        "Established Snowflake connection",
        extra={
            "account": config.account,
            "database": config.database,
            "schema": config.schema,
        }
    )
    return conn


@contextmanager
def get_snowflake_connection(config: SnowflakeConfig) -> Generator[SnowflakeConnection, None, None]:
    """
    Provide Snowflake connection with automatic cleanup.

    Supports both password and key-pair authentication:
    - If a private key (path or base64) is set, uses key-pair auth
    - Otherwise, uses password auth

    Only connection failures become SnowflakeConnectionError; exceptions
    raised by the caller inside the block propagate unchanged.

    Usage:
        with get_snowflake_connection(config) as conn:
            cursor = conn.cursor()
            # do work
            conn.commit()
    """
    conn = open_snowflake_connection(config)
    try:
        yield conn
    finally:
        try:
            conn.close()
            logger.debug("Closed Snowflake connection")
        except Exception as e:
            logger.warning(
                "Error closing Snowflake connection",
                extra={"error": str(e)}
            )


# ---------------------------------------------------------------------------
# Mock Connection for Local Development
# ---------------------------------------------------------------------------

_PRIMARY_KEYS = {
    'access_codes': 'code',
    'workout_logs': 'id',
}

_SELECT_RE = re.compile(r"^SELECT\s+(?P<columns>.+?)\s+FROM\s+(?P<table>\w+)(?P<rest>.*)$", re.I | re.S)
_INSERT_RE = re.compile(
    r"INSERT\s+INTO\s+(?P<table>\w+)\s*\((?P<columns>[^)]*)\)\s*SELECT\s+(?P<values>.+)$",
    re.I | re.S,
)
_DELETE_RE = re.compile(r"DELETE\s+FROM\s+(?P<table>\w+)(?P<rest>.*)$", re.I | re.S)
_MERGE_RE = re.compile(r"MERGE\s+INTO\s+(?P<table>\w+)", re.I)
_CONDITION_RE = re.compile(r"(\w+)\s*=\s*%s", re.I)
_ORDER_RE = re.compile(r"ORDER\s+BY\s+(\w+)(\s+DESC)?", re.I)
_ALIAS_RE = re.compile(r"%s\s+AS\s+(\w+)", re.I)


class MockSnowflakeCursor:
    """
    Mock Snowflake cursor for testing.

    Implements just enough of the cursor interface to support the
    repository queries without a real database: column-list SELECTs with
    equality filters and a single ORDER BY, INSERT ... SELECT with
    PARSE_JSON, DELETE ... WHERE id IN, and MERGE INTO for upserts.
    DDL statements are accepted and ignored.
    """

    def __init__(self, storage: dict) -> None:
        self._storage = storage
        self._results: list = []
        self._rowcount: int = 0

    def execute(self, query: str, params: Optional[tuple] = None) -> 'MockSnowflakeCursor':
        """Execute a query against mock storage by pattern matching."""
        logger.debug(
            "Mock cursor execute",
            extra={"query": query[:100], "params": params}
        )

        query = " ".join(query.split())
        params = tuple(params or ())
        query_upper = query.upper()

        self._results = []
        self._rowcount = 0

        if query_upper.startswith('MERGE INTO'):
            self._handle_merge(query, params)
        elif query_upper.startswith('INSERT INTO'):
            self._handle_insert(query, params)
        elif query_upper.startswith('DELETE FROM'):
            self._handle_delete(query, params)
        elif query_upper.startswith('SELECT'):
            self._handle_select(query, params)
        elif query_upper.startswith(('CREATE', 'ALTER', 'USE')):
            pass
        else:
            raise ValueError(f"Mock cursor cannot execute: {query[:60]}")

        return self

    def _table(self, name: str) -> dict[str, dict]:
        table = self._storage.get(name.lower())
        if table is None:
            raise ValueError(f"Table {name} does not exist")
        return table

    def _filter(self, rows: list[dict], where: str, params: tuple) -> list[dict]:
        conditions = _CONDITION_RE.findall(where)
        for column, value in zip(conditions, params):
            rows = [row for row in rows if row.get(column.lower()) == value]
        return rows

    def _handle_select(self, query: str, params: tuple) -> None:
        match = _SELECT_RE.match(query)
        if not match:
            raise ValueError(f"Unsupported SELECT: {query[:60]}")

        columns = [c.strip().lower() for c in match.group('columns').split(',')]
        where = re.split(r"ORDER\s+BY", match.group('rest'), maxsplit=1, flags=re.I)[0]
        rows = self._filter(list(self._table(match.group('table')).values()), where, params)

        order = _ORDER_RE.search(match.group('rest'))
        if order and order.group(2):
            # Reversed first so ties come back newest insert first
            rows = sorted(reversed(rows), key=lambda row: row.get(order.group(1).lower()), reverse=True)
        elif order:
            rows = sorted(rows, key=lambda row: row.get(order.group(1).lower()))

        self._results = [tuple(row.get(column) for column in columns) for row in rows]
        self._rowcount = len(self._results)

    def _handle_insert(self, query: str, params: tuple) -> None:
        match = _INSERT_RE.search(query)
        if not match:
            raise ValueError(f"Unsupported INSERT: {query[:60]}")

        columns = [c.strip().lower() for c in match.group('columns').split(',')]
        expressions = [e.strip().upper() for e in match.group('values').split(',')]
        if len(columns) != len(params) or len(expressions) != len(params):
            raise ValueError("Column count does not match parameter count")

        row: dict[str, Any] = {}
        for column, expression, value in zip(columns, expressions, params):
            if expression.startswith('PARSE_JSON') and value is not None:
                value = json.loads(value)
            row[column] = value

        table_name = match.group('table').lower()
        key = _PRIMARY_KEYS.get(table_name, columns[0])
        self._table(table_name)[str(row[key])] = row
        self._rowcount = 1

    def _handle_delete(self, query: str, params: tuple) -> None:
        match = _DELETE_RE.search(query)
        table = self._table(match.group('table'))
        rest = match.group('rest').upper()

        if ' IN (' in rest:
            targets = {str(p) for p in params}
        elif 'WHERE' in rest:
            targets = {
                key for key, row in table.items()
                if self._filter([row], match.group('rest'), params)
            }
        else:
            targets = set(table)

        for key in targets:
            if table.pop(key, None) is not None:
                self._rowcount += 1

    def _handle_merge(self, query: str, params: tuple) -> None:
        match = _MERGE_RE.search(query)
        table_name = match.group('table').lower()
        columns = [alias.lower() for alias in _ALIAS_RE.findall(query)]
        if len(columns) != len(params):
            raise ValueError("Column count does not match parameter count")

        row = dict(zip(columns, params))
        key = str(row[_PRIMARY_KEYS.get(table_name, columns[0])])
        self._table(table_name).setdefault(key, {}).update(row)
        self._rowcount = 1

    def fetchone(self):
        """First result row, or None."""
        if not self._results:
            return None
        return self._results[0]

    def fetchall(self) -> list:
        return list(self._results)

    def close(self) -> None:
        pass

    @property
    def rowcount(self) -> int:
        return self._rowcount


class MockSnowflakeConnection:
    """
    In-memory stand-in for a Snowflake connection.

    Rows live in plain dicts keyed by primary key, one per table. The API
    shares a single instance across requests in mock mode so data persists
    between calls.
    """

    def __init__(self) -> None:
        self._storage: dict[str, dict[str, dict]] = {
            'access_codes': {},
            'workout_logs': {},
        }

        logger.info("Using in-memory Snowflake tables")

    def cursor(self) -> MockSnowflakeCursor:
        return MockSnowflakeCursor(self._storage)

    def commit(self) -> None:
        logger.debug("Mock connection commit")

    def rollback(self) -> None:
        logger.debug("Mock connection rollback")

    def close(self) -> None:
        logger.debug("Mock connection close")

    # Helper methods for testing
    def _add_access_code(
        self,
        code: str,
        role: str = "coach",
        coach_name: str = "",
        commission_per_workout: Optional[float] = None,
    ) -> None:
        """Add a directory row to mock storage (for test setup)."""
        self._storage['access_codes'][code] = {
            'code': code,
            'role': role,
            'coach_name': coach_name,
            'commission_per_workout': commission_per_workout,
        }

    def _remove_access_code(self, code: str) -> None:
        self._storage['access_codes'].pop(code, None)

    def _clear(self) -> None:
        """Empty every table."""
        for table in self._storage.values():
            table.clear()


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

@contextmanager
def create_snowflake_connection(
    config: Optional[SnowflakeConfig] = None,
    mock_mode: bool = False,
) -> Generator[SnowflakeConnection, None, None]:
    """
    Create Snowflake connection based on configuration.

    Args:
        config: Snowflake configuration (required if not mock_mode)
        mock_mode: If True, return an in-memory connection

    Yields:
        SnowflakeConnection implementation (real or mock)
    """
    if mock_mode:
        conn = MockSnowflakeConnection()
        try:
            yield conn
        finally:
            conn.close()
    else:
        if config is None:
            raise ValueError("config is required when not in mock mode")

        with get_snowflake_connection(config) as conn:
            yield conn
