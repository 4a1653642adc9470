import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from green_essays.db.models.essay import (
    Essay as EssayModel, EssayVersion as EssayVersionModel, EditLogEntry as EditLogEntryModel
)
from green_essays.domains.essays.entities import Essay, EssayStatus, EssayVersion
from green_essays.domains.essays.exceptions import RepositoryError

logger = logging.getLogger(__name__)

STATUS_ACTIONS = {
    EssayStatus.PUBLISHED.value: "essay_published",
    EssayStatus.DRAFT.value: "essay_unpublished",
}


class EssayRepository:
    """Репозиторий для работы с эссе"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.version_repository = EssayVersionRepository(session)
        self.edit_log_repository = EditLogRepository(session)

    async def list_by_section(self, section: str, include_drafts: bool = True) -> List[Essay]:
        """Получение эссе раздела"""
        query = select(EssayModel).where(EssayModel.section == section)

        if not include_drafts:
            query = query.where(EssayModel.status == EssayStatus.PUBLISHED.value)

        try:
            result = await self.session.execute(query.order_by(EssayModel.updated_at.desc()))
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to list essays: {e}") from e

        return [self._to_domain(model) for model in result.scalars().all()]

    async def create(self, payload: Dict[str, Any]) -> Essay:
        """Создание нового эссе"""
        db_essay = EssayModel(**payload)

        self.session.add(db_essay)
        try:
            await self.session.commit()
            await self.session.refresh(db_essay)
        except IntegrityError as e:
            await self.session.rollback()
            raise RepositoryError(
                f"Essay '{payload.get('slug')}' already exists in section '{payload.get('section')}'"
            ) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise RepositoryError(f"Failed to create essay: {e}") from e

        essay = self._to_domain(db_essay)
        await self.edit_log_repository.record(essay.id, payload.get("updated_by"), "essay_created")
        return essay

    async def update(self, essay_id: str, values: Dict[str, Any]) -> Essay:
        """Обновление эссе и запись снимка версии"""
        try:
            result = await self.session.execute(
                update(EssayModel).where(EssayModel.id == essay_id).values(**values)
            )
            if result.rowcount == 0:
                await self.session.rollback()
                raise RepositoryError(f"Essay {essay_id} not found")

            db_essay = await self._get_model(essay_id)
            await self.version_repository.create(db_essay, created_by=values.get("updated_by"))
            await self.session.commit()
            await self.session.refresh(db_essay)
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise RepositoryError(f"Failed to update essay {essay_id}: {e}") from e

        essay = self._to_domain(db_essay)
        await self.edit_log_repository.record(essay_id, values.get("updated_by"), "essay_updated")
        return essay

    async def set_status(
        self,
        essay_id: str,
        status: str,
        version: int,
        updated_by: Optional[str] = None
    ) -> Essay:
        """Смена статуса публикации"""
        try:
            result = await self.session.execute(
                update(EssayModel)
                .where(EssayModel.id == essay_id)
                .values(status=status, version=version, updated_by=updated_by)
            )
            if result.rowcount == 0:
                await self.session.rollback()
                raise RepositoryError(f"Essay {essay_id} not found")
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise RepositoryError(f"Failed to change status of essay {essay_id}: {e}") from e

        db_essay = await self._get_model(essay_id)
        await self.session.refresh(db_essay)
        essay = self._to_domain(db_essay)
        await self.edit_log_repository.record(essay_id, updated_by, STATUS_ACTIONS[status])
        return essay

    async def list_versions(self, essay_id: str, limit: int = 50, offset: int = 0) -> List[EssayVersion]:
        """Получение версий эссе"""
        try:
            return await self.version_repository.get_by_essay(essay_id, limit, offset)
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to list versions of essay {essay_id}: {e}") from e

    async def _get_model(self, essay_id: str) -> Optional[EssayModel]:
        result = await self.session.execute(
            select(EssayModel).where(EssayModel.id == essay_id)
        )
        return result.scalar_one_or_none()

    def _to_domain(self, db_essay: EssayModel) -> Essay:
        """Преобразование модели БД в доменную сущность"""
        return Essay(
            id=db_essay.id,
            slug=db_essay.slug,
            section=db_essay.section,
            title=db_essay.title,
            subtitle=db_essay.subtitle or "",
            author_name=db_essay.author_name,
            cover_image_url=db_essay.cover_image_url,
            content_html=db_essay.content_html,
            content_json=db_essay.content_json,
            status=EssayStatus.from_string(db_essay.status),
            version=db_essay.version,
            reading_time=db_essay.reading_time,
            updated_by=db_essay.updated_by,
            created_at=db_essay.created_at,
            updated_at=db_essay.updated_at
        )


class EssayVersionRepository:
    """Репозиторий для работы со снимками версий"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, db_essay: EssayModel, created_by: Optional[str] = None) -> EssayVersionModel:
        """Снимок текущего состояния эссе (фиксируется вместе с обновлением)"""
        db_version = EssayVersionModel(
            essay_id=db_essay.id,
            version=db_essay.version,
            title=db_essay.title,
            subtitle=db_essay.subtitle,
            content_html=db_essay.content_html,
            content_json=db_essay.content_json,
            created_by=created_by
        )
        self.session.add(db_version)
        await self.session.flush()
        return db_version

    async def get_by_essay(self, essay_id: str, limit: int = 50, offset: int = 0) -> List[EssayVersion]:
        """Получение версий эссе, новые первыми"""
        result = await self.session.execute(
            select(EssayVersionModel)
            .where(EssayVersionModel.essay_id == essay_id)
            .order_by(EssayVersionModel.version.desc())
            .offset(offset)
            .limit(limit)
        )
        return [self._to_domain(version) for version in result.scalars().all()]

    def _to_domain(self, db_version: EssayVersionModel) -> EssayVersion:
        return EssayVersion(
            id=db_version.id,
            essay_id=db_version.essay_id,
            version=db_version.version,
            title=db_version.title,
            subtitle=db_version.subtitle,
            content_html=db_version.content_html,
            content_json=db_version.content_json,
            created_by=db_version.created_by,
            created_at=db_version.created_at
        )


class EditLogRepository:
    """Журнал действий редакторов"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def record(self, essay_id: str, user_email: Optional[str], action: str) -> None:
        """
        Запись действия после зафиксированной операции.

        Ошибка журнала только логируется. Откат сессии помечает загруженные
        объекты устаревшими, поэтому вызывающий код строит доменную
        сущность до записи в журнал.
        """
        self.session.add(EditLogEntryModel(essay_id=essay_id, user_email=user_email or "", action=action))
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.warning(f"Failed to write edit log for essay {essay_id} ({action}): {e}")
