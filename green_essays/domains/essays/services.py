import logging
import random
import re
import string
from typing import List, Optional, Tuple

from green_essays.domains.essays.dummy import dummy_essays
from green_essays.domains.essays.entities import (
    ActingUser, Essay, EssayStatus, EssayVersion, ResolvedEssay,
    estimate_reading_time, seed_content_html, seed_content_json,
)
from green_essays.domains.essays.exceptions import LoadFailure, RepositoryError, SaveFailure
from green_essays.domains.essays.sections import build_essay_url

logger = logging.getLogger(__name__)

UNTITLED_TITLE = "Untitled Essay"
UNTITLED_SLUG_PREFIX = "untitled-essay"
DEFAULT_COVER_IMAGE = "/assets/placeholders/cover_default.webp"


def slugify(text: str) -> str:
    """Преобразование заголовка в slug"""
    text = text.lower().strip()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_-]+", "-", text)
    return text.strip("-")


def untitled_slug() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=5))
    return f"{UNTITLED_SLUG_PREFIX}-{suffix}"


class EssayService:
    """Сервис для работы с коллекциями эссе"""

    def __init__(self, repository, words_per_minute: int = 200):
        self.repository = repository
        self.words_per_minute = words_per_minute

    async def list_section(self, section: str, acting_user: ActingUser) -> List[Essay]:
        """
        Коллекция раздела для отображения.

        Читатель без прав видит только опубликованные эссе. Если в разделе
        нет ни одного сохраненного эссе, возвращаются демонстрационные.
        """
        try:
            essays = await self.repository.list_by_section(
                section, include_drafts=acting_user.is_privileged
            )
        except RepositoryError as e:
            logger.error(f"Error fetching essays for section {section}: {e}")
            raise LoadFailure(f"Failed to load essays for section {section}") from e

        if not essays:
            return dummy_essays(section)

        return sorted(
            essays,
            key=lambda essay: essay.updated_at.timestamp() if essay.updated_at else 0,
            reverse=True,
        )

    async def add_essay(
        self,
        section: str,
        acting_user: ActingUser,
        title: Optional[str] = None,
        subtitle: str = "",
        author: Optional[str] = None,
    ) -> Tuple[Essay, str]:
        """Явное создание нового эссе в разделе; возвращает эссе и его адрес"""
        if not acting_user.can_provision:
            raise PermissionError("Not authorized - Admin or Editor role required")

        title = (title or "").strip()
        slug = slugify(title) if title else ""
        if not slug:
            slug = untitled_slug()
        title = title or UNTITLED_TITLE

        content_html = seed_content_html(title)
        payload = {
            "slug": slug,
            "section": section,
            "title": title,
            "subtitle": subtitle.strip(),
            "author_name": (author or "").strip() or acting_user.author_name(fallback="Editor"),
            "cover_image_url": DEFAULT_COVER_IMAGE,
            "content_html": content_html,
            "content_json": seed_content_json(title),
            "status": EssayStatus.DRAFT.value,
            "version": 1,
            "reading_time": estimate_reading_time(content_html, self.words_per_minute),
            "updated_by": acting_user.identity,
        }

        try:
            essay = await self.repository.create(payload)
        except RepositoryError as e:
            logger.error(f"Create essay error in section {section}: {e}")
            raise SaveFailure(f"Failed to create essay: {e}") from e

        path = build_essay_url(section, essay.slug)
        logger.info(f"Essay {essay.id} created at {path} by {acting_user.identity}")
        return essay, path

    async def list_versions(self, resolved: ResolvedEssay) -> List[EssayVersion]:
        """История версий; у заготовок и демонстрационных эссе ее нет"""
        if not resolved.is_real:
            return []
        essay = resolved.essay
        try:
            return await self.repository.list_versions(essay.id)
        except RepositoryError as e:
            logger.error(f"Error fetching essay versions for {essay.id}: {e}")
            raise LoadFailure(f"Failed to load versions for essay {essay.id}", essay_id=essay.id) from e
