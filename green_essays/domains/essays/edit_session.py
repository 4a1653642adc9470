import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from green_essays.domains.essays.entities import (
    ActingUser, Essay, EssayStatus, ResolvedEssay, EDITABLE_FIELDS, IMMUTABLE_FIELDS,
    estimate_reading_time,
)
from green_essays.domains.essays.exceptions import EssayError, RepositoryError, SaveFailure
from green_essays.domains.essays.publication import PublicationStateMachine
from green_essays.domains.essays.sections import EssayLocation

logger = logging.getLogger(__name__)


def initial_edit_mode(edit_flag: bool, acting_user: ActingUser, resolved: ResolvedEssay) -> bool:
    """Начальный режим: флаг в URL, права редактора и настоящий документ"""
    return bool(edit_flag) and acting_user.is_privileged and resolved.is_real


def validate_updates(updates: Dict[str, Any]) -> Dict[str, Any]:
    """Проверка правок перед сохранением"""
    frozen = IMMUTABLE_FIELDS.intersection(updates)
    if frozen:
        raise ValueError(f"Fields cannot be changed after creation: {', '.join(sorted(frozen))}")

    unknown = set(updates) - EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown essay fields: {', '.join(sorted(unknown))}")

    # HTML и структурное представление сохраняются только вместе
    if ("content_html" in updates) != ("content_json" in updates):
        raise ValueError("content_html and content_json must be saved together")

    return dict(updates)


class EditSession:
    """
    Сессия редактирования одного разрешенного эссе.

    Хранит флаг режима редактирования, синхронизирует его с параметром
    edit в адресе и проводит сохранение и смену статуса через хранилище.
    Одновременно для эссе выполняется не больше одной операции записи.
    """

    def __init__(
        self,
        repository,
        resolved: ResolvedEssay,
        acting_user: ActingUser,
        location: EssayLocation,
        publication: Optional[PublicationStateMachine] = None,
        autosave_interval: Optional[float] = None,
        words_per_minute: int = 200,
        on_location_replace: Optional[Callable[[EssayLocation], None]] = None,
        on_essay_saved: Optional[Callable[[Essay], None]] = None,
    ):
        self.repository = repository
        self.acting_user = acting_user
        self.location = location
        self.publication = publication or PublicationStateMachine(repository)
        self.autosave_interval = autosave_interval
        self.words_per_minute = words_per_minute
        self.last_error: Optional[EssayError] = None

        self._resolved = resolved
        self._on_location_replace = on_location_replace
        self._on_essay_saved = on_essay_saved
        self._lock = asyncio.Lock()
        self._pending: Dict[str, Any] = {}
        self._autosave_task: Optional[asyncio.Task] = None
        self._closed = False

        self.is_editing = initial_edit_mode(location.edit, acting_user, resolved)

        # Заготовку редактор никогда не видит в режиме чтения
        if resolved.is_template and acting_user.is_privileged:
            self.is_editing = True
            if not location.edit:
                self._replace_location(location.with_edit(True))

    @property
    def resolved(self) -> ResolvedEssay:
        return self._resolved

    @property
    def essay(self) -> Optional[Essay]:
        return self._resolved.essay

    @property
    def pending(self) -> Dict[str, Any]:
        return dict(self._pending)

    @property
    def is_persisting(self) -> bool:
        return self._lock.locked()

    @property
    def closed(self) -> bool:
        return self._closed

    def toggle_edit(self) -> bool:
        """Переключение режима редактирования (ничего не сохраняет)"""
        self.is_editing = not self.is_editing
        return self.is_editing

    async def save(self, updates: Optional[Dict[str, Any]] = None) -> Optional[Essay]:
        """
        Сохранение правок вместе с накопленным буфером автосохранения.

        Для заготовки создается новое эссе, для настоящего вызывается update.
        Ручное сохранение ждет завершения уже идущей записи.

        Returns:
            Подтвержденная запись или None, если сессия закрыта до завершения.

        Raises:
            PermissionError: пользователь без прав редактора
            ValueError: недопустимые правки
            SaveFailure: хранилище вернуло ошибку или эссе нельзя сохранить
        """
        self._require_privileged()
        changes = validate_updates({**self._pending, **(updates or {})})
        self._cancel_autosave()
        self._pending = {}

        async with self._lock:
            return await self._persist(changes)

    async def flush(self) -> Optional[Essay]:
        """Немедленное сохранение буфера (например, при потере фокуса поля)"""
        if not self._pending:
            return None
        return await self.save()

    def schedule_autosave(self, updates: Dict[str, Any]) -> None:
        """Буферизация правок и перезапуск таймера автосохранения"""
        self._require_privileged()
        self._pending = validate_updates({**self._pending, **updates})
        if self.autosave_interval is None or self._closed:
            return
        self._restart_autosave()

    async def publish(self) -> Optional[Essay]:
        return await self._transition(self.publication.publish, EssayStatus.PUBLISHED)

    async def unpublish(self) -> Optional[Essay]:
        return await self._transition(self.publication.unpublish, EssayStatus.DRAFT)

    def close(self) -> None:
        """Закрытие сессии при уходе со страницы"""
        self._closed = True
        self._cancel_autosave()
        if self._pending:
            logger.warning(
                f"Discarding {len(self._pending)} unsaved field(s) for essay "
                f"{self.essay.id if self.essay else '-'}"
            )
            self._pending = {}

    async def _transition(self, change, target: EssayStatus) -> Optional[Essay]:
        async with self._lock:
            try:
                essay = await change(self._resolved, self.acting_user)
            except EssayError as e:
                self.last_error = e
                raise

        if self._closed:
            logger.info(f"Session closed, discarding {target.value} result for essay {essay.id}")
            return None

        self._resolved = ResolvedEssay.real(essay)
        self.last_error = None
        if self._on_essay_saved is not None:
            self._on_essay_saved(essay)
        return essay

    async def _persist(self, changes: Dict[str, Any]) -> Optional[Essay]:
        resolved = self._resolved
        essay = resolved.essay

        if essay is None:
            raise SaveFailure("Nothing to save: essay was not found")

        if resolved.is_dummy:
            # Демонстрационные эссе не меняются на месте
            self.last_error = SaveFailure("Sample essays are read-only", essay_id=essay.id)
            raise self.last_error

        try:
            if resolved.is_template:
                saved = await self._create_from_template(essay, changes)
            else:
                saved = await self._update(essay, changes)
        except RepositoryError as e:
            # Правки возвращаются в буфер, чтобы не потерять работу
            self._pending = {**changes, **self._pending}
            self.last_error = SaveFailure(f"Failed to save essay: {e}", essay_id=essay.id)
            logger.error(f"Error saving essay {essay.id}: {e}")
            raise self.last_error from e

        if self._closed:
            logger.info(f"Session closed, discarding save result for essay {saved.id}")
            return None

        self._resolved = ResolvedEssay.real(saved)
        self.last_error = None

        if self._on_essay_saved is not None:
            self._on_essay_saved(saved)

        logger.info(f"Essay saved: {saved.id} version {saved.version}")
        return saved

    async def _update(self, essay: Essay, changes: Dict[str, Any]) -> Essay:
        values = dict(changes)
        if "content_html" in values:
            values["reading_time"] = estimate_reading_time(values["content_html"], self.words_per_minute)
        values.update(
            version=essay.version + 1,
            updated_by=self.acting_user.identity,
            updated_at=datetime.now(timezone.utc),
        )
        return await self.repository.update(essay.id, values)

    async def _create_from_template(self, template: Essay, changes: Dict[str, Any]) -> Essay:
        payload = template.to_payload()
        payload.update(changes)
        payload.update(
            status=EssayStatus.DRAFT.value,
            version=1,
            reading_time=estimate_reading_time(payload.get("content_html"), self.words_per_minute),
            updated_by=self.acting_user.identity,
        )
        logger.info(f"Creating essay {template.section}/{template.slug} from template on save")
        return await self.repository.create(payload)

    def _require_privileged(self) -> None:
        if not self.acting_user.is_privileged:
            raise PermissionError("You don't have permission to edit this essay")

    def _replace_location(self, location: EssayLocation) -> None:
        self.location = location
        if self._on_location_replace is not None:
            self._on_location_replace(location)

    def _restart_autosave(self) -> None:
        self._cancel_autosave()
        self._autosave_task = asyncio.ensure_future(self._autosave_after(self.autosave_interval))

    def _cancel_autosave(self) -> None:
        task, self._autosave_task = self._autosave_task, None
        if task is not None and not task.done():
            task.cancel()

    async def _autosave_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        # Таймер сработал, отменять его больше нечего
        self._autosave_task = None
        await self._run_autosave()

    async def _run_autosave(self) -> Optional[Essay]:
        if self._closed or not self._pending:
            return None

        if self._lock.locked():
            logger.debug("Autosave skipped: another save is in flight, rescheduling")
            self._restart_autosave()
            return None

        changes = self._pending
        self._pending = {}
        async with self._lock:
            try:
                return await self._persist(changes)
            except SaveFailure as e:
                logger.warning(f"Autosave failed: {e}")
                return None
