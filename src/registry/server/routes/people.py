"""People and region routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from registry.db.models import DocumentType
from registry.people import NotFoundError, PersonService
from registry.server.schemas import (
    ErrorResponse,
    PersonRequest,
    PersonResponse,
    PersonSummaryResponse,
    PersonWriteResponse,
    RegionResponse,
)

router = APIRouter(
    responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}},
)
logger = logging.getLogger(__name__)

NOT_FOUND = {status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}}


def get_service(request: Request) -> PersonService:
    return request.app.state.service


def get_max_page_size(request: Request) -> int:
    return request.app.state.max_page_size


Service = Annotated[PersonService, Depends(get_service)]


@router.post(
    "/people",
    status_code=status.HTTP_201_CREATED,
    response_model=PersonWriteResponse,
)
async def create_person(body: PersonRequest, service: Service) -> PersonWriteResponse:
    person = await service.create_person(body.to_draft())
    return PersonWriteResponse.from_person(person)


@router.put("/people", response_model=PersonWriteResponse, responses=NOT_FOUND)
async def update_person(body: PersonRequest, service: Service) -> PersonWriteResponse:
    person = await service.update_person(body.to_draft())
    return PersonWriteResponse.from_person(person)


# Fixed paths must be declared before /people/{person_id}


@router.get("/people/find", responses=NOT_FOUND)
async def find_person(
    service: Service,
    name: Annotated[str, Query(min_length=1)],
    doc_type: DocumentType,
    doc_number: Annotated[str, Query(min_length=1)],
) -> int:
    """Return the id of the person with this name and document, or 404."""
    person_id = await service.find_by_name_and_document(name, doc_type, doc_number)
    if person_id is None:
        raise NotFoundError("No person with this name and document")
    return person_id


@router.get("/people/verify")
async def verify_person(
    service: Service,
    name: Annotated[str, Query(min_length=1)],
    passport: Annotated[str, Query(min_length=1)],
) -> bool:
    return await service.verify_passport(name, passport)


@router.get(
    "/people/{person_id}", response_model=PersonResponse, responses=NOT_FOUND
)
async def get_person(person_id: int, service: Service) -> PersonResponse:
    person = await service.get_person(person_id)
    return PersonResponse.from_person(person)


@router.get("/people", response_model=list[PersonSummaryResponse])
async def list_people(
    service: Service,
    max_page_size: Annotated[int, Depends(get_max_page_size)],
    page_number: Annotated[int, Query(ge=0)],
    page_size: Annotated[int, Query(ge=1)],
    region: Annotated[str | None, Query(max_length=20)] = None,
) -> list[PersonSummaryResponse]:
    if page_size > max_page_size:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"page_size must not exceed {max_page_size}",
        )
    people = await service.list_people(page_number, page_size, region)
    return [PersonSummaryResponse.from_person(p) for p in people]


@router.get("/regions", response_model=list[RegionResponse])
async def list_regions(service: Service) -> list[RegionResponse]:
    regions = await service.list_regions()
    return [RegionResponse.model_validate(r) for r in regions]
