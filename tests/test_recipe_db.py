import asyncio
import logging

import pytest
from sqlalchemy import func, select

from craft_server.crud import CreateData, ReadData
from craft_server.db import create_session_factory
from craft_server.domain.errors import InvalidElementName, StorageUnavailable, UnknownElement
from craft_server.domain.generator import generate
from craft_server.models.schemas import Element, Recipe
from craft_server.services import recipe_db


async def count_rows(session_factory, model) -> int:
    async with session_factory() as session:
        result = await session.execute(select(func.count()).select_from(model))
        return result.scalar_one()


@pytest.mark.asyncio
async def test_seed_is_idempotent(session_factory):
    assert await recipe_db.seed_starting_elements(session_factory) == []
    elements = await recipe_db.read_all_elements(session_factory)
    assert [(e.name, e.emoji) for e in elements] == recipe_db.STARTING_ELEMENTS


@pytest.mark.asyncio
async def test_end_to_end_scenario(session_factory):
    first = await recipe_db.resolve_combination("Fire", "Water", "user-1", session_factory)
    assert first.is_new is True
    assert (first.result.name, first.result.emoji) == ("Steam", "💨")
    assert first.first_discoverer == "user-1"

    again = await recipe_db.resolve_combination("Water", "Fire", "user-2", session_factory)
    assert again.is_new is False
    assert again.result == first.result
    assert again.first_discoverer == "user-1"

    dust = await recipe_db.resolve_combination("Earth", "Wind", "user-3", session_factory)
    assert dust.is_new is True
    assert (dust.result.name, dust.result.emoji) == ("Dust", "🌪️")

    recipes = await recipe_db.read_all_recipes(session_factory)
    assert [r.result_name for r in recipes] == ["Dust", "Steam"]
    assert recipes[1].first_discoverer == "user-1"
    assert {recipes[1].element_a_name, recipes[1].element_b_name} == {"Fire", "Water"}


@pytest.mark.asyncio
async def test_names_are_case_insensitive(session_factory):
    first = await recipe_db.resolve_combination("fire", "WATER", "user-1", session_factory)
    again = await recipe_db.resolve_combination("Water", "Fire", "user-2", session_factory)
    assert first.is_new is True
    assert again.is_new is False
    assert again.result.name == "Steam"


@pytest.mark.asyncio
async def test_one_recipe_per_pair(session_factory):
    await recipe_db.resolve_combination("Fire", "Water", "user-1", session_factory)
    await recipe_db.resolve_combination("Water", "Fire", "user-2", session_factory)
    await recipe_db.resolve_combination("Fire", "Water", "user-3", session_factory)

    assert await count_rows(session_factory, Recipe) == 1
    assert await count_rows(session_factory, Element) == 5
    recipes = await recipe_db.read_all_recipes(session_factory)
    assert recipes[0].first_discoverer == "user-1"


@pytest.mark.asyncio
async def test_self_combination(session_factory):
    expected = generate("Water", "Water")
    first = await recipe_db.resolve_combination("Water", "Water", "user-1", session_factory)
    again = await recipe_db.resolve_combination("water", "WATER", "user-2", session_factory)

    assert first.is_new is True
    assert (first.result.name, first.result.emoji) == (expected.name, expected.emoji)
    assert again.is_new is False
    assert again.result == first.result


@pytest.mark.asyncio
async def test_unknown_element_is_rejected(session_factory):
    with pytest.raises(UnknownElement) as exc_info:
        await recipe_db.resolve_combination("Plasma", "Water", "user-1", session_factory)
    assert exc_info.value.names == ["Plasma"]
    assert await count_rows(session_factory, Recipe) == 0


@pytest.mark.asyncio
async def test_discovered_elements_can_be_combined(session_factory):
    await recipe_db.resolve_combination("Fire", "Water", "user-1", session_factory)
    combination = await recipe_db.resolve_combination("Steam", "Earth", "user-1", session_factory)
    expected = generate("Steam", "Earth")
    assert combination.is_new is True
    assert combination.result.name == expected.name


@pytest.mark.asyncio
async def test_existing_result_element_is_reused(session_factory):
    async with session_factory() as session:
        async with session.begin():
            steam = await CreateData.create_element("Steam", "💨", session)

    combination = await recipe_db.resolve_combination("Fire", "Water", "user-1", session_factory)
    assert combination.is_new is True
    assert combination.result.element_id == steam.element_id
    assert await count_rows(session_factory, Element) == 5


@pytest.mark.asyncio
async def test_recipe_race_loser_returns_winner(session_factory, monkeypatch, caplog):
    await recipe_db.resolve_combination("Fire", "Water", "winner", session_factory)

    original = ReadData.read_recipe_by_pair
    calls = []

    async def stale_first_read(element_id_a, element_id_b, session):
        calls.append((element_id_a, element_id_b))
        if len(calls) == 1:
            return None
        return await original(element_id_a, element_id_b, session)

    monkeypatch.setattr(ReadData, "read_recipe_by_pair", staticmethod(stale_first_read))

    caplog.set_level(logging.WARNING)
    combination = await recipe_db.resolve_combination("Water", "Fire", "loser", session_factory)
    assert combination.is_new is False
    assert combination.first_discoverer == "winner"
    first_id, second_id = sorted(calls[0])
    assert f"Lost recipe race for fire_water ({first_id}, {second_id})" in caplog.text
    assert combination.result.name == "Steam"
    assert await count_rows(session_factory, Recipe) == 1


@pytest.mark.asyncio
async def test_element_race_loser_retries(session_factory, monkeypatch):
    async with session_factory() as session:
        async with session.begin():
            await CreateData.create_element("Steam", "💨", session)

    original = ReadData.read_element_by_name
    hidden = []

    async def hide_steam_once(name, session):
        if name == "Steam" and not hidden:
            hidden.append(name)
            return None
        return await original(name, session)

    monkeypatch.setattr(ReadData, "read_element_by_name", staticmethod(hide_steam_once))

    combination = await recipe_db.resolve_combination("Fire", "Water", "user-1", session_factory)
    assert hidden == ["Steam"]
    assert combination.is_new is True
    assert combination.result.name == "Steam"
    assert await count_rows(session_factory, Element) == 5
    assert await count_rows(session_factory, Recipe) == 1


@pytest.mark.asyncio
async def test_concurrent_resolutions_create_one_recipe(session_factory):
    results = await asyncio.gather(
        *[
            recipe_db.resolve_combination("Fire", "Water", f"user-{i}", session_factory)
            for i in range(5)
        ]
    )
    assert sum(1 for r in results if r.is_new) == 1
    assert {r.result.name for r in results} == {"Steam"}
    winner = next(r for r in results if r.is_new)
    assert {r.first_discoverer for r in results} == {winner.first_discoverer}
    assert await count_rows(session_factory, Recipe) == 1
    assert await count_rows(session_factory, Element) == 5


@pytest.mark.asyncio
async def test_create_element_rejects_separator(session_factory):
    async with session_factory() as session:
        with pytest.raises(InvalidElementName):
            await CreateData.create_element("Fire_Water", "🔥", session)


def refused_session_factory():
    raise ConnectionRefusedError(111, "Connect call failed ('127.0.0.1', 1)")


def timed_out_session_factory():
    raise asyncio.TimeoutError()


@pytest.mark.asyncio
async def test_unreachable_store_is_storage_unavailable(dead_engine):
    factory = create_session_factory(dead_engine)
    with pytest.raises(StorageUnavailable):
        await recipe_db.resolve_combination("Fire", "Water", "user-1", factory)
    with pytest.raises(StorageUnavailable):
        await recipe_db.read_all_elements(factory)
    with pytest.raises(StorageUnavailable):
        await recipe_db.read_all_recipes(factory)
    await dead_engine.dispose()


@pytest.mark.asyncio
async def test_refused_connection_is_storage_unavailable():
    with pytest.raises(StorageUnavailable) as exc_info:
        await recipe_db.resolve_combination("Fire", "Water", "user-1", refused_session_factory)
    assert isinstance(exc_info.value.__cause__, ConnectionRefusedError)

    with pytest.raises(StorageUnavailable):
        await recipe_db.read_all_elements(refused_session_factory)


@pytest.mark.asyncio
async def test_store_timeout_is_storage_unavailable():
    with pytest.raises(StorageUnavailable) as exc_info:
        await recipe_db.read_all_recipes(timed_out_session_factory)
    assert isinstance(exc_info.value.__cause__, asyncio.TimeoutError)
