"""Category-related endpoints for the Chrysalis API."""

import asyncio
from collections.abc import Sequence

from fastapi import APIRouter, status

from chrysalis.models import Category
from chrysalis.schemas.category import CategoryCreate, CategoryResponse
from chrysalis.services.categories import add_category, list_categories

from ..dependencies import SessionDep

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("/", response_model=list[CategoryResponse])
async def get_categories(db: SessionDep) -> Sequence[Category]:
    """List all categories ordered by title."""
    return list_categories(db)


@router.post("/", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(category_data: CategoryCreate, db: SessionDep) -> Category:
    """Create a new category with a unique title."""
    return await asyncio.to_thread(add_category, db, category_data.title)
