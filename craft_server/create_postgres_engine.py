from sqlalchemy.ext.asyncio import create_async_engine
from craft_server.load_secrets import user, password, host, port, db_name, db_timeout

POSTGRES_DATABASE_URL = (
    f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{db_name}"
)

engine = create_async_engine(
    POSTGRES_DATABASE_URL,
    pool_size=20,
    max_overflow=20,
    connect_args={"timeout": db_timeout, "command_timeout": db_timeout},
)
