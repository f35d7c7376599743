"""Storage helpers for elements and recipes.

These helpers only add and flush; they never commit. The caller owns the
session and its transaction (see services/recipe_db.py).
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy import select, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import aliased, joinedload
from typing import List
from uuid import UUID
from uuid6 import uuid7
from datetime import datetime
import logging

from craft_server.domain.errors import DuplicateName, DuplicatePair
from craft_server.domain.pair_key import name_key, validate_element_name
from craft_server.models.schema_models import (
    ElementSchema,
    RecipeDetailSchema,
    RecipeSchema,
)
from craft_server.models.schemas import Base, Element, Recipe


def sort_pair(element_id_a: UUID, element_id_b: UUID) -> tuple[UUID, UUID]:
    """Order two element ids the way recipes store them."""
    if element_id_b < element_id_a:
        return element_id_b, element_id_a
    return element_id_a, element_id_b


class ReadData:
    @staticmethod
    async def read_element_by_name(name: str, session: AsyncSession) -> ElementSchema | None:
        """Read an element by its case-insensitive name

        Args:
            name (str): Element name in any case

        Returns:
            ElementSchema | None: The element, or None if it was never created
        """
        stmt = select(Element).where(Element.name_key == name_key(name))
        result = await session.execute(stmt)
        result = result.scalars().first()

        if result is None:
            return None
        return ElementSchema.model_validate(result)

    @staticmethod
    async def read_recipe_by_pair(
        element_id_a: UUID, element_id_b: UUID, session: AsyncSession
    ) -> RecipeSchema | None:
        """Read the recipe of an unordered element pair

        Args:
            element_id_a (UUID): One element of the pair
            element_id_b (UUID): The other element, may equal element_id_a

        Returns:
            RecipeSchema | None: Recipe with its result element, or None
        """
        first_id, second_id = sort_pair(element_id_a, element_id_b)
        stmt = (
            select(Recipe)
            .options(joinedload(Recipe.result))
            .where(Recipe.element_a_id == first_id, Recipe.element_b_id == second_id)
        )
        result = await session.execute(stmt)
        result = result.scalars().first()

        if result is None:
            return None
        return RecipeSchema.model_validate(result)

    @staticmethod
    async def read_all_elements(session: AsyncSession) -> List[ElementSchema]:
        """Read every element, oldest first"""
        stmt = select(Element).order_by(Element.created_at, Element.element_id)
        result = await session.execute(stmt)
        return [ElementSchema.model_validate(row) for row in result.scalars().all()]

    @staticmethod
    async def read_all_recipes(session: AsyncSession) -> List[RecipeDetailSchema]:
        """Read every recipe with element names, newest first"""
        element_a = aliased(Element)
        element_b = aliased(Element)
        element_result = aliased(Element)
        stmt = (
            select(
                element_a.name,
                element_b.name,
                element_result.name,
                element_result.emoji,
                Recipe.first_discoverer,
                Recipe.created_at,
            )
            .join(element_a, Recipe.element_a_id == element_a.element_id)
            .join(element_b, Recipe.element_b_id == element_b.element_id)
            .join(element_result, Recipe.result_id == element_result.element_id)
            .order_by(desc(Recipe.created_at), desc(Recipe.recipe_id))
        )
        result = await session.execute(stmt)
        return [
            RecipeDetailSchema(
                element_a_name=row[0],
                element_b_name=row[1],
                result_name=row[2],
                result_emoji=row[3],
                first_discoverer=row[4],
                created_at=row[5],
            )
            for row in result.all()
        ]


class CreateData:
    @staticmethod
    async def create_table(engine: AsyncEngine) -> None:
        """Create tables if not exists"""
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logging.info("Database initialized")

    @staticmethod
    async def drop_table(engine: AsyncEngine) -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logging.info("Database tables dropped")

    @staticmethod
    async def create_element(name: str, emoji: str, session: AsyncSession) -> ElementSchema:
        """Add a new element to the current transaction

        Args:
            name (str): Display name, unique case-insensitively
            emoji (str): Emoji shown next to the name

        Raises:
            InvalidElementName: The name cannot be stored
            DuplicateName: An element with the same name already exists

        Returns:
            ElementSchema: The flushed element
        """
        name = validate_element_name(name)
        new_element = Element(
            element_id=uuid7(),
            name=name,
            name_key=name_key(name),
            emoji=emoji,
            created_at=datetime.now(),
        )
        session.add(new_element)
        try:
            await session.flush()
        except IntegrityError as e:
            logging.warning(f"Element name already taken: {name}")
            raise DuplicateName(name) from e
        return ElementSchema.model_validate(new_element)

    @staticmethod
    async def create_recipe(
        element_id_a: UUID,
        element_id_b: UUID,
        result_id: UUID,
        discoverer: str,
        session: AsyncSession,
    ) -> RecipeSchema:
        """Add the recipe of an unordered element pair to the current transaction

        Args:
            element_id_a (UUID): One element of the pair
            element_id_b (UUID): The other element
            result_id (UUID): Element produced by the pair
            discoverer (str): Whoever resolved the pair first

        Raises:
            DuplicatePair: The pair already has a recipe

        Returns:
            RecipeSchema: The flushed recipe with its result element
        """
        first_id, second_id = sort_pair(element_id_a, element_id_b)
        new_recipe = Recipe(
            recipe_id=uuid7(),
            element_a_id=first_id,
            element_b_id=second_id,
            result_id=result_id,
            first_discoverer=discoverer,
            created_at=datetime.now(),
        )
        session.add(new_recipe)
        try:
            await session.flush()
        except IntegrityError as e:
            logging.warning(f"Recipe already exists for pair: {first_id}, {second_id}")
            raise DuplicatePair(first_id, second_id) from e
        return await ReadData.read_recipe_by_pair(first_id, second_id, session)
