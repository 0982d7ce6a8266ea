# ride_booking/infra/database.py
"""
PostgreSQL access through an asyncpg pool.
Connection retries, transactions and translation of driver errors
into PersistenceError live here so repositories stay thin.
"""

from __future__ import annotations

import asyncio
import json
from contextlib import asynccontextmanager
from functools import wraps
from typing import Any, AsyncGenerator, Callable, TypeVar

import asyncpg
from asyncpg import Connection, Pool, Record

from ride_booking.common.constants import TypeMsg
from ride_booking.common.errors import ConfigurationError, ConflictError, PersistenceError
from ride_booking.common.logger import log_error, log_info

T = TypeVar("T")

CONNECTION_ERRORS = (
    asyncpg.PostgresConnectionError,
    asyncpg.InterfaceError,
    ConnectionRefusedError,
    OSError,
)

# Arbitrary key for pg_advisory_xact_lock while applying the schema
SCHEMA_LOCK_ID = 770_431_201


def retry_on_connection_error(
    max_attempts: int = 3,
    delay: float = 1.0,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Retries a coroutine when the database connection fails.

    Args:
        max_attempts: Total number of attempts
        delay: Base delay in seconds, multiplied by the attempt number
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            last_error: Exception | None = None

            for attempt in range(1, max_attempts + 1):
                try:
                    return await func(*args, **kwargs)
                except CONNECTION_ERRORS as e:
                    last_error = e
                    if attempt < max_attempts:
                        await log_info(
                            f"Database connection error (attempt {attempt}/{max_attempts}): {e}",
                            type_msg=TypeMsg.WARNING,
                        )
                        await asyncio.sleep(delay * attempt)
                    else:
                        await log_error(f"Database unreachable after {max_attempts} attempts: {e}")

            raise last_error  # type: ignore[misc]

        return wrapper  # type: ignore[return-value]

    return decorator


def to_persistence_error(error: Exception) -> PersistenceError:
    """Maps an asyncpg/OS error onto the domain error hierarchy."""
    if isinstance(error, asyncpg.UniqueViolationError):
        return ConflictError(
            "Unique constraint violated",
            constraint=getattr(error, "constraint_name", None),
        )
    return PersistenceError(f"Database operation failed: {error.__class__.__name__}")


def translate_db_errors(func: Callable[..., T]) -> Callable[..., T]:
    """Re-raises driver errors as PersistenceError."""
    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return await func(*args, **kwargs)
        except (asyncpg.PostgresError, *CONNECTION_ERRORS) as e:
            raise to_persistence_error(e) from e

    return wrapper  # type: ignore[return-value]


async def _init_connection(connection: Connection) -> None:
    """Decodes json/jsonb columns into Python objects."""
    for type_name in ("json", "jsonb"):
        await connection.set_type_codec(
            type_name,
            encoder=json.dumps,
            decoder=json.loads,
            schema="pg_catalog",
        )


class DatabaseManager:
    """
    Owner of the asyncpg pool.
    A process-wide singleton so repositories created per request share it.
    """

    _instance: DatabaseManager | None = None
    _pool: Pool | None = None

    def __new__(cls) -> DatabaseManager:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if hasattr(self, "_initialized"):
            return
        self._initialized = True
        self._pool = None

    @property
    def pool(self) -> Pool:
        if self._pool is None:
            raise RuntimeError("Connection pool is not initialized, call connect() first")
        return self._pool

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    @retry_on_connection_error(max_attempts=3, delay=1.0)
    async def connect(
        self,
        dsn: str,
        min_size: int = 2,
        max_size: int = 10,
        command_timeout: int = 30,
    ) -> None:
        """
        Creates the connection pool.

        Args:
            dsn: postgresql:// connection string
            min_size: Minimum pool size
            max_size: Maximum pool size
            command_timeout: Per-statement timeout in seconds
        """
        if self._pool is not None:
            return

        await log_info("Connecting to PostgreSQL...", type_msg=TypeMsg.INFO)
        self._pool = await asyncpg.create_pool(
            dsn=dsn,
            min_size=min_size,
            max_size=max_size,
            command_timeout=command_timeout,
            init=_init_connection,
        )
        await log_info("PostgreSQL pool ready", type_msg=TypeMsg.INFO)

    async def disconnect(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
            await log_info("PostgreSQL pool closed", type_msg=TypeMsg.INFO)

    @asynccontextmanager
    async def acquire(self) -> AsyncGenerator[Connection, None]:
        """
        Borrows a connection from the pool.

        Example:
            async with db.acquire() as conn:
                rows = await conn.fetch("SELECT * FROM vehicles")
        """
        async with self.pool.acquire() as connection:
            yield connection

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[Connection, None]:
        """
        Runs the block inside one transaction.
        Commits on success; any exception rolls back first and is then
        re-raised, with driver errors converted to PersistenceError.

        Example:
            async with db.transaction() as conn:
                row = await conn.fetchrow("SELECT ... FOR UPDATE", booking_id)
                await conn.execute("UPDATE bookings ...")
        """
        try:
            async with self.pool.acquire() as connection:
                async with connection.transaction():
                    yield connection
        except (asyncpg.PostgresError, *CONNECTION_ERRORS) as e:
            await log_error(f"Transaction rolled back: {e}")
            raise to_persistence_error(e) from e

    @translate_db_errors
    @retry_on_connection_error()
    async def execute(self, query: str, *args: Any) -> str:
        async with self.acquire() as conn:
            return await conn.execute(query, *args)

    @translate_db_errors
    @retry_on_connection_error()
    async def fetch(self, query: str, *args: Any) -> list[Record]:
        async with self.acquire() as conn:
            return await conn.fetch(query, *args)

    @translate_db_errors
    @retry_on_connection_error()
    async def fetchrow(self, query: str, *args: Any) -> Record | None:
        async with self.acquire() as conn:
            return await conn.fetchrow(query, *args)

    @translate_db_errors
    @retry_on_connection_error()
    async def fetchval(self, query: str, *args: Any, column: int = 0) -> Any:
        async with self.acquire() as conn:
            return await conn.fetchval(query, *args, column=column)

    async def health_check(self) -> bool:
        """True when `SELECT 1` succeeds."""
        try:
            return await self.fetchval("SELECT 1") == 1
        except (PersistenceError, RuntimeError) as e:
            await log_error(f"PostgreSQL health check failed: {e}")
            return False


_db_manager: DatabaseManager | None = None


def get_db() -> DatabaseManager:
    """Returns the shared DatabaseManager."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager


async def init_db() -> DatabaseManager:
    """
    Opens the pool from settings and applies migrations/init.sql.
    DATABASE_URL is mandatory.
    """
    from ride_booking.config import settings

    dsn = settings.database.dsn
    if not dsn:
        await log_error("DATABASE_URL is not set, refusing to start")
        raise ConfigurationError("DATABASE_URL environment variable is required")

    db = get_db()
    await db.connect(
        dsn=dsn,
        min_size=settings.database.DB_MIN_POOL_SIZE,
        max_size=settings.database.DB_MAX_POOL_SIZE,
        command_timeout=settings.database.DB_COMMAND_TIMEOUT,
    )
    await _init_schema(db)
    return db


async def _init_schema(db: DatabaseManager) -> None:
    """Applies the idempotent schema under an advisory lock."""
    from ride_booking.config.loader import get_project_root

    schema_path = get_project_root() / "migrations" / "init.sql"
    if not schema_path.exists():
        await log_error(f"Schema file not found: {schema_path}")
        return

    schema_sql = schema_path.read_text(encoding="utf-8")
    await log_info("Applying database schema...", type_msg=TypeMsg.INFO)

    # Advisory lock keeps parallel workers from racing on CREATE statements
    async with db.transaction() as conn:
        await conn.execute("SELECT pg_advisory_xact_lock($1)", SCHEMA_LOCK_ID)
        await conn.execute(schema_sql)

    await log_info("Database schema applied", type_msg=TypeMsg.INFO)


async def close_db() -> None:
    await get_db().disconnect()
