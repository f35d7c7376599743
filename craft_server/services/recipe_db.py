"""DB service layer for combination use cases.

- Routers should not touch DB sessions directly; they call this module.
- This layer owns session/transaction boundaries.
- CRUD helpers only flush; commit happens when session.begin() exits.
- One recipe per unordered pair is guaranteed by the store's unique
  constraints, not by locks here: a writer that loses the race rolls back
  and reads what the winner committed.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from craft_server.crud import CreateData, ReadData
from craft_server.db import Session
from craft_server.domain.errors import (
    DuplicateName,
    DuplicatePair,
    StorageUnavailable,
    UnknownElement,
)
from craft_server.domain.generator import generate
from craft_server.domain.pair_key import canonicalize
from craft_server.models.schema_models import (
    CombinationResultSchema,
    ElementSchema,
    RecipeDetailSchema,
    RecipeSchema,
)

STARTING_ELEMENTS = [
    ("Water", "💧"),
    ("Fire", "🔥"),
    ("Earth", "🌍"),
    ("Wind", "💨"),
]

MAX_RESOLVE_ATTEMPTS = 3

# Driver-level failures (asyncpg raises OSError on refused connections and
# asyncio.TimeoutError on command_timeout) are not wrapped by SQLAlchemy.
STORAGE_ERRORS = (SQLAlchemyError, OSError, asyncio.TimeoutError, TimeoutError)


@asynccontextmanager
async def storage_guard(action: str):
    """Turn store and driver failures raised inside the block into StorageUnavailable."""
    try:
        yield
    except STORAGE_ERRORS as e:
        logging.error(f"Failed to {action}: {e!r}")
        raise StorageUnavailable(f"Failed to {action}: {e}") from e


def _cached(recipe: RecipeSchema) -> CombinationResultSchema:
    return CombinationResultSchema(
        result=recipe.result,
        first_discoverer=recipe.first_discoverer,
        is_new=False,
    )


async def _read_existing_recipe(
    name_a: str, name_b: str, session_factory: async_sessionmaker
) -> RecipeSchema | None:
    async with session_factory() as session:
        element_a = await ReadData.read_element_by_name(name_a, session)
        element_b = await ReadData.read_element_by_name(name_b, session)
        if element_a is None or element_b is None:
            return None
        return await ReadData.read_recipe_by_pair(
            element_a.element_id, element_b.element_id, session
        )


async def _resolve_once(
    name_a: str, name_b: str, discoverer: str, session_factory: async_sessionmaker
) -> CombinationResultSchema:
    """One transactional attempt: read the recipe or create element + recipe.

    Raises:
        UnknownElement: A name does not resolve to an element
        DuplicateName: Another writer created the generated element first
        DuplicatePair: Another writer created the recipe first
    """
    async with session_factory() as session:
        async with session.begin():
            element_a = await ReadData.read_element_by_name(name_a, session)
            element_b = await ReadData.read_element_by_name(name_b, session)
            missing = [
                name
                for name, element in ((name_a, element_a), (name_b, element_b))
                if element is None
            ]
            if missing:
                raise UnknownElement(missing)

            recipe = await ReadData.read_recipe_by_pair(
                element_a.element_id, element_b.element_id, session
            )
            if recipe is not None:
                return _cached(recipe)

            generated = generate(name_a, name_b)
            result = await ReadData.read_element_by_name(generated.name, session)
            if result is None:
                result = await CreateData.create_element(
                    generated.name, generated.emoji, session
                )
            recipe = await CreateData.create_recipe(
                element_a.element_id,
                element_b.element_id,
                result.element_id,
                discoverer,
                session,
            )
    return CombinationResultSchema(
        result=recipe.result,
        first_discoverer=recipe.first_discoverer,
        is_new=True,
    )


async def resolve_combination(
    name_a: str,
    name_b: str,
    discoverer: str,
    session_factory: async_sessionmaker = Session,
) -> CombinationResultSchema:
    """Resolve a pair of elements, discovering its recipe on first use.

    The first successful resolution of a pair is authoritative; later
    resolutions (in either order, by anyone) return the stored result with
    is_new=False and the original discoverer.

    Args:
        name_a (str): First element name (case-insensitive)
        name_b (str): Second element name, may equal name_a
        discoverer (str): Recorded only if this call creates the recipe
        session_factory (async_sessionmaker): Store to resolve against

    Raises:
        UnknownElement: A name does not resolve to an element
        StorageUnavailable: The store failed or timed out

    Returns:
        CombinationResultSchema: Result element, first discoverer and is_new
    """
    pair_key = canonicalize(name_a, name_b)
    attempt = 0
    while True:
        attempt += 1
        try:
            async with storage_guard(f"resolve {pair_key}"):
                combination = await _resolve_once(name_a, name_b, discoverer, session_factory)
        except DuplicatePair as e:
            first_id, second_id = e.element_ids
            logging.warning(
                f"Lost recipe race for {pair_key} ({first_id}, {second_id}), reading winner"
            )
            async with storage_guard(f"read recipe for {pair_key}"):
                recipe = await _read_existing_recipe(name_a, name_b, session_factory)
            if recipe is None:
                raise StorageUnavailable(f"Recipe for {pair_key} vanished after conflict")
            return _cached(recipe)
        except DuplicateName as e:
            if attempt >= MAX_RESOLVE_ATTEMPTS:
                raise StorageUnavailable(
                    f"Could not resolve {pair_key} after {attempt} attempts"
                ) from e
            logging.warning(f"Lost element race for {e.name} while resolving {pair_key}, retrying")
            continue

        if combination.is_new:
            logging.info(
                f"New recipe {pair_key} -> {combination.result.emoji} "
                f"{combination.result.name} by {combination.first_discoverer}"
            )
        else:
            logging.debug(f"Cached recipe {pair_key} -> {combination.result.name}")
        return combination


async def read_all_elements(session_factory: async_sessionmaker = Session) -> List[ElementSchema]:
    async with storage_guard("read elements"):
        async with session_factory() as session:
            return await ReadData.read_all_elements(session)


async def read_all_recipes(session_factory: async_sessionmaker = Session) -> List[RecipeDetailSchema]:
    async with storage_guard("read recipes"):
        async with session_factory() as session:
            return await ReadData.read_all_recipes(session)


async def seed_starting_elements(session_factory: async_sessionmaker = Session) -> List[ElementSchema]:
    """Create the starting elements that do not exist yet.

    Safe to run on every startup and from several workers at once.

    Returns:
        List[ElementSchema]: Elements created by this call
    """
    created = []
    for name, emoji in STARTING_ELEMENTS:
        try:
            async with session_factory() as session:
                async with session.begin():
                    if await ReadData.read_element_by_name(name, session) is not None:
                        continue
                    element = await CreateData.create_element(name, emoji, session)
        except DuplicateName:
            continue
        created.append(element)
        logging.info(f"Added element: {emoji} {name}")
    return created
