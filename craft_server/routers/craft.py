import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import async_sessionmaker

from craft_server.domain.errors import StorageUnavailable, UnknownElement
from craft_server.models.dc_models import (
    CombineRequestModel,
    CombineResponseModel,
    CombineResultModel,
    ElementListModel,
    ElementModel,
    HealthModel,
    RecipeListModel,
    RecipeModel,
)
from craft_server.services import recipe_db

rest_router = APIRouter(prefix="/api")


def get_session_factory(request: Request) -> async_sessionmaker:
    """Resolve the session factory the app was created with."""
    return request.app.state.session_factory


def _storage_error(e: StorageUnavailable) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"Storage unavailable: {e}",
    )


class HealthAPI:
    @staticmethod
    @rest_router.get("/health", response_model=HealthModel)
    async def health():
        return HealthModel(ok=True)


class ElementAPI:
    @staticmethod
    @rest_router.get("/elements", response_model=ElementListModel)
    async def get_elements(session_factory: async_sessionmaker = Depends(get_session_factory)):
        try:
            elements = await recipe_db.read_all_elements(session_factory)
        except StorageUnavailable as e:
            raise _storage_error(e)
        return ElementListModel(
            count=len(elements),
            elements=[
                ElementModel(
                    id=element.element_id,
                    name=element.name,
                    emoji=element.emoji,
                    created_at=element.created_at,
                )
                for element in elements
            ],
        )


class RecipeAPI:
    @staticmethod
    @rest_router.get("/recipes", response_model=RecipeListModel)
    async def get_recipes(session_factory: async_sessionmaker = Depends(get_session_factory)):
        try:
            recipes = await recipe_db.read_all_recipes(session_factory)
        except StorageUnavailable as e:
            raise _storage_error(e)
        return RecipeListModel(
            count=len(recipes),
            recipes=[RecipeModel.model_validate(recipe, from_attributes=True) for recipe in recipes],
        )


class CombineAPI:
    @staticmethod
    @rest_router.post("/combine", response_model=CombineResponseModel)
    async def combine(
        combine_request: CombineRequestModel,
        session_factory: async_sessionmaker = Depends(get_session_factory),
    ):
        """Combine two elements. The first caller of a pair becomes its discoverer."""
        if not combine_request.a or not combine_request.b:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail="Missing elements"
            )
        discoverer = combine_request.userId or f"anon-{int(time.time() * 1000)}"

        try:
            combination = await recipe_db.resolve_combination(
                combine_request.a, combine_request.b, discoverer, session_factory
            )
        except UnknownElement as e:
            logging.info(f"Rejected combination {combine_request.a} + {combine_request.b}: {e}")
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Element not found"
            )
        except StorageUnavailable as e:
            raise _storage_error(e)

        return CombineResponseModel(
            isNew=combination.is_new,
            result=CombineResultModel(
                name=combination.result.name,
                emoji=combination.result.emoji,
                firstDiscoverer=combination.first_discoverer,
            ),
        )
