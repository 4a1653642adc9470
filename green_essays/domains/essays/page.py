"""
Страница эссе: одно упорядоченное решение на каждую навигацию.

    LOADING -> NOT_FOUND
            -> SHOW_REAL
            -> SHOW_TEMPLATE
            -> PROVISIONING -> SHOW_REAL | SHOW_TEMPLATE

Переходы зависят только от результата resolve() и флага "идет создание".
Созданная запись добавляется в коллекцию в памяти, после чего обычное
повторное разрешение возвращает настоящий документ.
"""

import logging
from enum import Enum
from typing import List, Optional

from green_essays.domains.essays.edit_session import EditSession
from green_essays.domains.essays.entities import ActingUser, Essay, ResolvedEssay
from green_essays.domains.essays.exceptions import LoadFailure, ProvisionFailure
from green_essays.domains.essays.provisioner import AutoProvisioner
from green_essays.domains.essays.resolver import resolve
from green_essays.domains.essays.sections import EssayLocation
from green_essays.domains.essays.services import EssayService

logger = logging.getLogger(__name__)


class PageState(str, Enum):
    LOADING = "loading"
    NOT_FOUND = "not_found"
    SHOW_TEMPLATE = "show_template"
    PROVISIONING = "provisioning"
    SHOW_REAL = "show_real"


class EssayPage:
    """Состояние страницы эссе в пределах одного монтирования"""

    def __init__(
        self,
        repository,
        acting_user: ActingUser,
        autosave_interval: Optional[float] = None,
        words_per_minute: int = 200,
    ):
        self.repository = repository
        self.acting_user = acting_user
        self.autosave_interval = autosave_interval
        self.words_per_minute = words_per_minute
        self.service = EssayService(repository, words_per_minute=words_per_minute)
        self.provisioner = AutoProvisioner(repository)

        self.state = PageState.LOADING
        self.location: Optional[EssayLocation] = None
        self.session: Optional[EditSession] = None

        self._collection: List[Essay] = []
        self._loading = True
        self._generation = 0
        self._closed = False

    @property
    def collection(self) -> List[Essay]:
        return list(self._collection)

    @property
    def resolution(self) -> ResolvedEssay:
        """Текущее разрешение; пересчитывается при каждом обращении"""
        location = self.location
        return resolve(
            location.section if location else None,
            location.slug if location else None,
            self._collection,
            self._loading,
            self.acting_user,
        )

    @property
    def current_essay(self) -> Optional[Essay]:
        """Эссе, на которое должны ссылаться последующие сохранения"""
        if self.session is not None:
            return self.session.essay
        return self.resolution.essay

    @property
    def is_editing(self) -> bool:
        return self.session.is_editing if self.session is not None else False

    @property
    def provision_failure(self) -> Optional[ProvisionFailure]:
        if self.location is None:
            return None
        return self.provisioner.failures.get((self.location.section, self.location.slug))

    async def navigate(self, section: Optional[str], slug: Optional[str], edit: bool = False) -> PageState:
        """
        Переход на (section, slug).

        Результаты операций, начатых для предыдущего адреса, отбрасываются.

        Raises:
            LoadFailure: коллекция раздела не загрузилась
        """
        if self._closed:
            raise RuntimeError("Essay page is closed")

        self._generation += 1
        generation = self._generation
        self._close_session()

        if not section or not slug:
            self.location = None
            self._collection = []
            self._loading = False
            self.state = PageState.NOT_FOUND
            return self.state

        self.location = EssayLocation(section=section, slug=slug, edit=bool(edit))
        self._loading = True
        self.state = PageState.LOADING

        try:
            collection = await self.service.list_section(section, self.acting_user)
        except LoadFailure:
            if self._is_current(generation):
                self._loading = False
            raise

        if not self._is_current(generation):
            logger.debug(f"Discarding stale collection for {section}/{slug}")
            return self.state

        self._collection = collection
        self._loading = False
        return await self._settle(generation)

    def close(self) -> None:
        """Размонтирование страницы"""
        self._closed = True
        self._generation += 1
        self._close_session()

    async def _settle(self, generation: int) -> PageState:
        location = self.location
        resolved = self.resolution

        if resolved.is_not_found:
            self.state = PageState.NOT_FOUND
            return self.state

        # Редактор на заготовке сразу попадает в режим редактирования
        if resolved.is_template and self.acting_user.is_privileged and not location.edit:
            self._replace_location(location.with_edit(True))
            location = self.location

        # Коллекция могла загрузиться раньше, чем завершилось создание
        provisioned = self.provisioner.created.get((location.section, location.slug))
        if resolved.is_template and provisioned is not None:
            self._fold(provisioned)
            resolved = self.resolution

        # Идущее создание той же пары не запускается заново, а ожидается
        joining = resolved.is_template and self.provisioner.is_provisioning(location.section, location.slug)
        if joining or self.provisioner.should_provision(
            self._loading, resolved, location.section, location.slug, self.acting_user
        ):
            self.state = PageState.PROVISIONING
            created = await self.provisioner.observe(
                self._loading, resolved, location.section, location.slug, self.acting_user
            )
            # Запись уже в хранилище: пока адрес тот же, она попадает в коллекцию
            if created is not None and self._at(location.section, location.slug):
                self._fold(created)
            if not self._is_current(generation):
                logger.info(f"Navigation changed, discarding provisioning result for {location.section}/{location.slug}")
                return self.state
            resolved = self.resolution

        self.state = PageState.SHOW_TEMPLATE if resolved.is_template else PageState.SHOW_REAL
        self.session = EditSession(
            self.repository,
            resolved,
            self.acting_user,
            location,
            autosave_interval=self.autosave_interval,
            words_per_minute=self.words_per_minute,
            on_location_replace=self._replace_location,
            on_essay_saved=self._fold,
        )
        return self.state

    def _fold(self, essay: Essay) -> None:
        """Добавление подтвержденной записи в коллекцию вместо перезагрузки"""
        self._collection = [
            existing for existing in self._collection
            if existing.id != essay.id and existing.slug != essay.slug
        ]
        self._collection.append(essay)
        if self.location is not None and essay.slug == self.location.slug:
            self.state = PageState.SHOW_REAL

    def _replace_location(self, location: EssayLocation) -> None:
        # Замена адреса без новой записи в истории
        logger.debug(f"Replacing location with {location.url}")
        self.location = location

    def _close_session(self) -> None:
        if self.session is not None:
            self.session.close()
            self.session = None

    def _at(self, section: str, slug: str) -> bool:
        location = self.location
        return (
            not self._closed
            and location is not None
            and location.section == section
            and location.slug == slug
        )

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation
