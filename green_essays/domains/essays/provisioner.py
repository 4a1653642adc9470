import asyncio
import logging
from typing import Any, Dict, Optional, Set, Tuple

from green_essays.domains.essays.entities import ActingUser, Essay, ResolvedEssay
from green_essays.domains.essays.exceptions import ProvisionFailure, RepositoryError
from green_essays.domains.essays.resolver import build_template

logger = logging.getLogger(__name__)

EssayKey = Tuple[str, str]


class AutoProvisioner:
    """
    Одноразовое создание эссе для редактора, открывшего несуществующий slug.

    Один экземпляр живет столько же, сколько страница. Для каждой пары
    (section, slug) выполняется не больше одного вызова create: флаг
    "создание идет" ставится до первой точки ожидания, поэтому повторная
    оценка тех же входных данных не порождает второй запрос.
    """

    def __init__(self, repository):
        self.repository = repository
        self._in_flight: Dict[EssayKey, asyncio.Task] = {}
        self._attempted: Set[EssayKey] = set()
        self.failures: Dict[EssayKey, ProvisionFailure] = {}
        self.created: Dict[EssayKey, Essay] = {}

    def is_provisioning(self, section: str, slug: str) -> bool:
        return (section, slug) in self._in_flight

    def should_provision(
        self,
        loading: bool,
        resolved: ResolvedEssay,
        section: Optional[str],
        slug: Optional[str],
        acting_user: ActingUser,
    ) -> bool:
        """Все условия автоматического создания выполнены"""
        if loading or not resolved.is_template:
            return False
        if not section or not slug:
            return False
        if not acting_user.can_provision:
            return False
        return (section, slug) not in self._attempted

    @staticmethod
    def build_payload(section: str, slug: str, acting_user: ActingUser) -> Dict[str, Any]:
        payload = build_template(section, slug, acting_user).to_payload()
        payload["updated_by"] = acting_user.identity
        return payload

    async def observe(
        self,
        loading: bool,
        resolved: ResolvedEssay,
        section: Optional[str],
        slug: Optional[str],
        acting_user: ActingUser,
    ) -> Optional[Essay]:
        """
        Реакция на очередное разрешение.

        Возвращает созданную запись или None, если создавать нечего или
        создание не удалось. Параллельные наблюдатели одной пары получают
        результат уже идущего запроса.
        """
        key = (section, slug)
        pending = self._in_flight.get(key)
        if pending is not None:
            return await asyncio.shield(pending)

        if not self.should_provision(loading, resolved, section, slug, acting_user):
            return None

        self._attempted.add(key)
        payload = self.build_payload(section, slug, acting_user)
        task = asyncio.ensure_future(self._create(key, payload))
        self._in_flight[key] = task
        task.add_done_callback(lambda _: self._in_flight.pop(key, None))
        return await asyncio.shield(task)

    async def _create(self, key: EssayKey, payload: Dict[str, Any]) -> Optional[Essay]:
        section, slug = key
        logger.info(f"Provisioning essay {section}/{slug} for {payload['updated_by']}")
        try:
            essay = await self.repository.create(payload)
        except RepositoryError as e:
            # Заготовка остается на экране, ошибка только логируется
            failure = ProvisionFailure(f"Failed to provision essay {section}/{slug}: {e}")
            self.failures[key] = failure
            logger.error(str(failure))
            return None

        self.created[key] = essay
        logger.info(f"Provisioned essay {essay.id} for {section}/{slug}")
        return essay
