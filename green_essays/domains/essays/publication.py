"""
Публикация эссе: draft <-> published.

    draft --publish--> published
    published --unpublish--> draft

Переход в текущее состояние ничего не делает и версию не меняет.
Каждый настоящий переход увеличивает версию на единицу.
"""

import logging
from typing import Dict, Set

from green_essays.domains.essays.entities import ActingUser, Essay, EssayStatus, ResolvedEssay
from green_essays.domains.essays.exceptions import PublicationFailure, RepositoryError

logger = logging.getLogger(__name__)


VALID_TRANSITIONS: Dict[EssayStatus, Set[EssayStatus]] = {
    EssayStatus.DRAFT: {EssayStatus.PUBLISHED},
    EssayStatus.PUBLISHED: {EssayStatus.DRAFT},
}


class PublicationStateMachine:
    """Единственный путь изменения статуса эссе"""

    def __init__(self, repository):
        self.repository = repository

    def can_transition(self, essay: Essay, target: EssayStatus) -> bool:
        return target in VALID_TRANSITIONS.get(essay.status, set())

    async def publish(self, resolved: ResolvedEssay, acting_user: ActingUser) -> Essay:
        return await self.transition(resolved, EssayStatus.PUBLISHED, acting_user)

    async def unpublish(self, resolved: ResolvedEssay, acting_user: ActingUser) -> Essay:
        return await self.transition(resolved, EssayStatus.DRAFT, acting_user)

    async def transition(
        self,
        resolved: ResolvedEssay,
        target: EssayStatus | str,
        acting_user: ActingUser,
    ) -> Essay:
        """
        Перевод эссе в целевой статус.

        Возвращает запись, подтвержденную хранилищем. Статус локально не
        переключается до подтверждения.

        Raises:
            PermissionError: пользователь без прав редактора
            PublicationFailure: документ не сохранен или хранилище вернуло ошибку
        """
        if isinstance(target, str):
            target = EssayStatus.from_string(target)

        if not acting_user.is_privileged:
            raise PermissionError("You don't have permission to change publication status")

        essay = resolved.essay
        if essay is None or not resolved.is_real:
            raise PublicationFailure(
                "Only saved essays can be published or unpublished",
                essay_id=essay.id if essay else None,
            )

        if essay.status == target:
            logger.debug(f"Essay {essay.id} already {target.value}, nothing to do")
            return essay

        if not self.can_transition(essay, target):
            raise PublicationFailure(
                f"Invalid transition from {essay.status.value} to {target.value}",
                essay_id=essay.id,
            )

        try:
            updated = await self.repository.set_status(
                essay.id,
                target.value,
                version=essay.version + 1,
                updated_by=acting_user.identity,
            )
        except RepositoryError as e:
            logger.error(f"Essay {essay.id} transition failed: {essay.status.value} → {target.value}: {e}")
            raise PublicationFailure(str(e), essay_id=essay.id) from e

        logger.info(
            f"Essay {essay.id} transitioned: {essay.status.value} → {target.value} "
            f"(version {essay.version} → {updated.version})"
        )
        return updated
