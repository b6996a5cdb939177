"""
Shared Snowflake types.

Kept apart from the connection factory so repositories and the mock
connection can both import them without importing each other.
"""

from dataclasses import dataclass
from typing import Optional, Protocol


class SnowflakeConnection(Protocol):
    """
    Protocol for Snowflake connections.

    Using a protocol means tests can provide a mock without
    importing the actual snowflake-connector-python.
    """

    def cursor(self): ...
    def commit(self) -> None: ...


@dataclass
class SnowflakeConfig:
    """Configuration for Snowflake connection."""
    account: str
    user: str
    password: Optional[str] = None
    private_key_path: Optional[str] = None
    private_key_base64: Optional[str] = None
    database: str = "COACHBUILDER"
    schema: str = "PUBLIC"
    warehouse: str = "COMPUTE_WH"
    role: Optional[str] = None


class RepositoryError(Exception):
    """Raised when a query against the store fails."""
    pass
