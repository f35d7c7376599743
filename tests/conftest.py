import pytest
import pytest_asyncio

from craft_server.create_sqlite_engine import create_sqlite_engine
from craft_server.crud import CreateData
from craft_server.db import create_session_factory
from craft_server.services.recipe_db import seed_starting_elements


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Seeded store in a temporary SQLite file."""
    engine = create_sqlite_engine(str(tmp_path / "craft_test.db"))
    await CreateData.create_table(engine)
    factory = create_session_factory(engine)
    await seed_starting_elements(factory)
    yield factory
    await engine.dispose()


@pytest.fixture
def api_engine(tmp_path):
    """Unconnected engine; the app lifespan creates and seeds the tables."""
    return create_sqlite_engine(str(tmp_path / "craft_api.db"))


@pytest.fixture
def dead_engine(tmp_path):
    """Engine whose database file cannot be opened."""
    return create_sqlite_engine(str(tmp_path / "missing_dir" / "craft.db"), timeout=0.1)
