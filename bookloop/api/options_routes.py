"""Picker options (genres, languages, authors)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from bookloop.api.schemas import OptionsResponse, OptionsUpdateRequest
from bookloop.core.dependencies import get_options_service
from bookloop.services.options_service import OptionsService

router = APIRouter(prefix="/options", tags=["options"])


@router.get("", response_model=OptionsResponse)
async def get_options(
    options_service: Annotated[OptionsService, Depends(get_options_service)],
) -> OptionsResponse:
    return OptionsResponse.model_validate(await options_service.get_options())


@router.put("", response_model=OptionsResponse)
async def update_options(
    body: OptionsUpdateRequest,
    response: Response,
    options_service: Annotated[OptionsService, Depends(get_options_service)],
) -> OptionsResponse:
    """Replace the supplied lists. Responds 201 when the options did not exist yet."""
    options, created = await options_service.upsert_options(
        genres=body.genres, languages=body.languages, authors=body.authors
    )
    if created:
        response.status_code = status.HTTP_201_CREATED
    return OptionsResponse.model_validate(options)
