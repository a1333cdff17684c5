from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from taskflow.api.deps import get_developer_service, require_roles
from taskflow.api.errors import ensure_success, unwrap
from taskflow.api.schemas.common import Page
from taskflow.api.schemas.developers import DeveloperDetailResponse, DeveloperResponse
from taskflow.api.uploads import read_upload
from taskflow.core.auth import Role
from taskflow.domain import CurrentUser, JobLevel
from taskflow.domain.pagination import MAX_PAGE_SIZE
from taskflow.domain.requests import CreateDeveloperRequest, UpdateDeveloperRequest
from taskflow.domain.services import DeveloperService

router = APIRouter(prefix="/developers", tags=["Developers"])


@router.get("", response_model=Page[DeveloperResponse], summary="List developers")
async def list_developers(
    page_number: int = Query(1, ge=1),
    page_size: int = Query(MAX_PAGE_SIZE, ge=1),
    service: DeveloperService = Depends(get_developer_service),  # noqa: B008
    _: CurrentUser = Depends(require_roles([Role.ADMIN, Role.DEVELOPER])),  # noqa: B008
) -> Page[DeveloperResponse]:
    """Return one page of developers, oldest first. Page size is capped server side."""
    page = await service.get_developers(page_number, page_size)
    return Page[DeveloperResponse].model_validate(page)


@router.get("/{developer_id}", response_model=DeveloperDetailResponse, summary="Get developer")
async def get_developer(
    developer_id: UUID,
    service: DeveloperService = Depends(get_developer_service),  # noqa: B008
    _: CurrentUser = Depends(require_roles([Role.ADMIN, Role.DEVELOPER])),  # noqa: B008
) -> DeveloperDetailResponse:
    result = await service.get_developer(developer_id)
    return DeveloperDetailResponse.model_validate(unwrap(result))


@router.post(
    "",
    response_model=DeveloperResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create developer",
    description="Create a developer together with its login account (admin-only).",
)
async def create_developer(
    email: str = Form(...),
    password: str = Form(...),
    full_name: str = Form(...),
    age: int = Form(...),
    job_title: str = Form(...),
    year_of_experience: int = Form(...),
    job_level: JobLevel = Form(...),
    image: UploadFile | None = File(None),  # noqa: B008
    service: DeveloperService = Depends(get_developer_service),  # noqa: B008
    user: CurrentUser = Depends(require_roles([Role.ADMIN])),  # noqa: B008
) -> DeveloperResponse:
    request = CreateDeveloperRequest(
        email=email,
        password=password,
        full_name=full_name,
        age=age,
        job_title=job_title,
        year_of_experience=year_of_experience,
        job_level=job_level,
        image=await read_upload(image),
    )
    result = await service.create_developer(request, user.id)
    return DeveloperResponse.model_validate(unwrap(result))


@router.put("", response_model=DeveloperResponse, summary="Update developer")
async def update_developer(
    id: UUID = Form(...),  # noqa: A002
    full_name: str = Form(...),
    age: int = Form(...),
    job_title: str = Form(...),
    year_of_experience: int = Form(...),
    job_level: JobLevel = Form(...),
    image: UploadFile | None = File(None),  # noqa: B008
    service: DeveloperService = Depends(get_developer_service),  # noqa: B008
    user: CurrentUser = Depends(require_roles([Role.ADMIN, Role.MANAGER])),  # noqa: B008
) -> DeveloperResponse:
    request = UpdateDeveloperRequest(
        id=id,
        full_name=full_name,
        age=age,
        job_title=job_title,
        year_of_experience=year_of_experience,
        job_level=job_level,
        image=await read_upload(image),
    )
    result = await service.update_developer(request, user.id)
    return DeveloperResponse.model_validate(unwrap(result))


@router.delete(
    "/{developer_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete developer"
)
async def delete_developer(
    developer_id: UUID,
    service: DeveloperService = Depends(get_developer_service),  # noqa: B008
    user: CurrentUser = Depends(require_roles([Role.ADMIN, Role.MANAGER])),  # noqa: B008
) -> None:
    ensure_success(await service.delete_developer(developer_id, user.id))
