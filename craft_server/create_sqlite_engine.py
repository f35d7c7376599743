from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from craft_server.load_secrets import db_timeout, sqlite_path


def create_sqlite_engine(path: str, timeout: float = db_timeout) -> AsyncEngine:
    """Create an aiosqlite engine with foreign keys enforced

    Args:
        path (str): SQLite database file
        timeout (float): Seconds to wait on a locked database before failing

    Returns:
        AsyncEngine: Engine bound to the file
    """
    sqlite_engine = create_async_engine(
        url=f"sqlite+aiosqlite:///{path}",
        echo=False,
        connect_args={"timeout": timeout},
    )

    @event.listens_for(sqlite_engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return sqlite_engine


engine = create_sqlite_engine(sqlite_path)
