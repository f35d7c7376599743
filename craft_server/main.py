import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine
from starlette.middleware.cors import CORSMiddleware

from craft_server.crud import CreateData
from craft_server.db import create_session_factory
from craft_server.load_secrets import cors_origins, log_level, server_host, server_port
from craft_server.routers import craft
from craft_server.services.recipe_db import seed_starting_elements

logging.basicConfig(level=log_level)
logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def create_app(engine: AsyncEngine | None = None) -> FastAPI:
    """Build the API application bound to one database engine

    Args:
        engine (AsyncEngine | None): Engine to serve from. Defaults to the
            configured PostgreSQL or SQLite engine.

    Returns:
        FastAPI: Application with the craft routes and CORS enabled
    """
    if engine is None:
        from craft_server.db import engine
    session_factory = create_session_factory(engine)

    @asynccontextmanager
    async def lifespan(app):
        """Create tables and the starting elements before serving."""
        await CreateData.create_table(engine)
        await seed_starting_elements(session_factory)
        try:
            yield
        finally:
            await engine.dispose()
            logging.info("Stop Server")

    app = FastAPI(lifespan=lifespan)
    app.state.session_factory = session_factory
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(craft.rest_router)
    return app


def run():
    uvicorn.run(
        "craft_server.main:create_app",
        factory=True,
        host=server_host,
        port=server_port,
    )


if __name__ == "__main__":
    run()
