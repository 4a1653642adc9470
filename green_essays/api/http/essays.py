from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from green_essays.core.auth import get_acting_user
from green_essays.core.config import settings
from green_essays.core.db import get_db
from green_essays.db.repositories.essay_repository import EssayRepository
from green_essays.domains.essays.entities import ActingUser, Essay
from green_essays.domains.essays.exceptions import LoadFailure, PublicationFailure, SaveFailure
from green_essays.domains.essays.page import EssayPage, PageState
from green_essays.domains.essays.schemas import (
    AddEssayRequest, AddEssayResponse, EssayListResponse, EssayPageResponse,
    EssayResponse, EssayUpdate, EssayVersionListResponse, EssayVersionResponse
)
from green_essays.domains.essays.sections import is_edit_flag, section_description, section_title
from green_essays.domains.essays.services import EssayService

router = APIRouter(prefix="/essays", tags=["essays"])


async def get_essay_repository(db: AsyncSession = Depends(get_db)):
    """Зависимость для получения репозитория эссе"""
    return EssayRepository(db)


def _essay_response(essay: Essay) -> EssayResponse:
    return EssayResponse.model_validate(essay)


async def _open_page(
    section: str,
    slug: str,
    edit: bool,
    repository,
    acting_user: ActingUser
) -> EssayPage:
    """Навигация на страницу эссе с переводом ошибок в HTTP"""
    page = EssayPage(
        repository,
        acting_user,
        autosave_interval=settings.autosave_interval_seconds,
        words_per_minute=settings.words_per_minute
    )
    try:
        await page.navigate(section, slug, edit=edit)
    except LoadFailure as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e)
        )

    if page.state == PageState.NOT_FOUND:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Essay not found"
        )
    return page


@router.get("/{section}", response_model=EssayListResponse)
async def list_section_essays(
    section: str,
    repository = Depends(get_essay_repository),
    acting_user: ActingUser = Depends(get_acting_user)
):
    """Получение эссе раздела"""
    essay_service = EssayService(repository, words_per_minute=settings.words_per_minute)

    try:
        essays = await essay_service.list_section(section, acting_user)
    except LoadFailure as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e)
        )

    return EssayListResponse(
        section=section,
        section_title=section_title(section),
        section_description=section_description(section),
        essays=[_essay_response(essay) for essay in essays],
        total=len(essays)
    )


@router.post("/{section}", response_model=AddEssayResponse, status_code=status.HTTP_201_CREATED)
async def add_essay(
    section: str,
    request: AddEssayRequest,
    repository = Depends(get_essay_repository),
    acting_user: ActingUser = Depends(get_acting_user)
):
    """Создание нового эссе в разделе"""
    essay_service = EssayService(repository, words_per_minute=settings.words_per_minute)

    try:
        essay, path = await essay_service.add_essay(
            section,
            acting_user,
            title=request.title,
            subtitle=request.subtitle,
            author=request.author
        )
    except PermissionError as e:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(e)
        )
    except SaveFailure as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )

    return AddEssayResponse(id=essay.id, slug=essay.slug, path=path, essay=_essay_response(essay))


@router.get("/{section}/{slug}", response_model=EssayPageResponse)
async def open_essay_page(
    section: str,
    slug: str,
    edit: Optional[str] = Query(None),
    repository = Depends(get_essay_repository),
    acting_user: ActingUser = Depends(get_acting_user)
):
    """Разрешение эссе для страницы: документ, заготовка или автосоздание"""
    page = await _open_page(section, slug, is_edit_flag(edit), repository, acting_user)

    try:
        resolved = page.session.resolved
        failure = page.provision_failure
        return EssayPageResponse(
            state=page.state.value,
            kind=resolved.kind,
            is_template=resolved.is_template,
            is_editing=page.is_editing,
            url=page.location.url,
            essay=_essay_response(resolved.essay),
            provision_error=str(failure) if failure else None
        )
    finally:
        page.close()


@router.put("/{section}/{slug}", response_model=EssayResponse)
async def save_essay(
    section: str,
    slug: str,
    update_data: EssayUpdate,
    repository = Depends(get_essay_repository),
    acting_user: ActingUser = Depends(get_acting_user)
):
    """Сохранение правок эссе (для заготовки создается новое эссе)"""
    if not acting_user.is_privileged:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have permission to edit this essay"
        )

    page = await _open_page(section, slug, True, repository, acting_user)
    try:
        essay = await page.session.save(update_data.to_updates())
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e)
        )
    except SaveFailure as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    finally:
        page.close()

    return _essay_response(essay)


async def _change_status(section: str, slug: str, publish: bool, repository, acting_user: ActingUser) -> EssayResponse:
    if not acting_user.is_privileged:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You don't have permission to change publication status"
        )

    page = await _open_page(section, slug, False, repository, acting_user)
    try:
        if publish:
            essay = await page.session.publish()
        else:
            essay = await page.session.unpublish()
    except PublicationFailure as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
    finally:
        page.close()

    return _essay_response(essay)


@router.post("/{section}/{slug}/publish", response_model=EssayResponse)
async def publish_essay(
    section: str,
    slug: str,
    repository = Depends(get_essay_repository),
    acting_user: ActingUser = Depends(get_acting_user)
):
    """Публикация эссе"""
    return await _change_status(section, slug, True, repository, acting_user)


@router.post("/{section}/{slug}/unpublish", response_model=EssayResponse)
async def unpublish_essay(
    section: str,
    slug: str,
    repository = Depends(get_essay_repository),
    acting_user: ActingUser = Depends(get_acting_user)
):
    """Снятие эссе с публикации"""
    return await _change_status(section, slug, False, repository, acting_user)


@router.get("/{section}/{slug}/versions", response_model=EssayVersionListResponse)
async def get_essay_versions(
    section: str,
    slug: str,
    repository = Depends(get_essay_repository),
    acting_user: ActingUser = Depends(get_acting_user)
):
    """Получение истории версий эссе"""
    page = await _open_page(section, slug, False, repository, acting_user)
    try:
        resolved = page.resolution
        versions = await page.service.list_versions(resolved)
    except LoadFailure as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e)
        )
    finally:
        page.close()

    return EssayVersionListResponse(
        essay_id=resolved.essay.id,
        versions=[EssayVersionResponse.model_validate(version) for version in versions]
    )
