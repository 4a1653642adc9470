import copy
import math
import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


TEMPLATE_PREFIX = "template-"
DUMMY_PREFIX = "dummy-"

DEFAULT_TITLE = "New Essay"
DEFAULT_AUTHOR = "Author"
SEED_PARAGRAPH = "Start writing your essay..."

# Поля, которые нельзя менять после создания документа
IMMUTABLE_FIELDS = frozenset({"id", "slug", "section", "created_at"})
EDITABLE_FIELDS = frozenset({
    "title", "subtitle", "author_name", "cover_image_url",
    "content_html", "content_json",
})

_TAG_RE = re.compile(r"<[^>]*>")
_SPACE_RE = re.compile(r"\s+")


class EssayStatus(str, Enum):
    """Статус публикации эссе"""
    DRAFT = "draft"
    PUBLISHED = "published"

    @classmethod
    def from_string(cls, value: str) -> "EssayStatus":
        for status in cls:
            if status.value == value:
                return status
        raise ValueError(f"Unknown status: {value}")


class EssayKind(str, Enum):
    """Вариант документа, выбранный при разрешении"""
    REAL = "real"
    DUMMY = "dummy"
    TEMPLATE = "template"


@dataclass
class Essay:
    id: str
    slug: str
    section: str
    title: str
    subtitle: str = ""
    author_name: str = DEFAULT_AUTHOR
    cover_image_url: Optional[str] = None
    content_html: Optional[str] = None
    content_json: Optional[Dict[str, Any]] = None
    status: EssayStatus = EssayStatus.DRAFT
    version: int = 1
    reading_time: int = 1
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_published(self) -> bool:
        return self.status == EssayStatus.PUBLISHED

    def to_payload(self) -> Dict[str, Any]:
        """Поля для создания записи в хранилище (без идентификатора и аудита)"""
        return {
            "slug": self.slug,
            "section": self.section,
            "title": self.title,
            "subtitle": self.subtitle,
            "author_name": self.author_name,
            "cover_image_url": self.cover_image_url,
            "content_html": self.content_html,
            "content_json": copy.deepcopy(self.content_json),
            "status": self.status.value,
            "version": self.version,
            "reading_time": self.reading_time,
            "updated_by": self.updated_by,
        }


@dataclass
class EssayVersion:
    """Снимок эссе на момент сохранения"""
    essay_id: str
    version: int
    title: str
    subtitle: Optional[str] = None
    content_html: Optional[str] = None
    content_json: Optional[Dict[str, Any]] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    id: Optional[str] = None


@dataclass(frozen=True)
class ActingUser:
    is_privileged: bool = False
    identity: Optional[str] = None

    @classmethod
    def anonymous(cls) -> "ActingUser":
        return cls(is_privileged=False, identity=None)

    @property
    def can_provision(self) -> bool:
        return self.is_privileged and bool(self.identity)

    def author_name(self, fallback: str = DEFAULT_AUTHOR) -> str:
        """Имя автора по умолчанию: локальная часть email"""
        if not self.identity:
            return fallback
        return self.identity.split("@")[0] or fallback


@dataclass(frozen=True)
class ResolvedEssay:
    """Результат разрешения (section, slug) в конкретный вариант документа"""
    essay: Optional[Essay] = None
    kind: Optional[EssayKind] = None
    is_loading: bool = False

    @classmethod
    def loading(cls) -> "ResolvedEssay":
        return cls(is_loading=True)

    @classmethod
    def not_found(cls) -> "ResolvedEssay":
        return cls()

    @classmethod
    def real(cls, essay: Essay) -> "ResolvedEssay":
        return cls(essay=essay, kind=EssayKind.REAL)

    @property
    def is_template(self) -> bool:
        return self.kind == EssayKind.TEMPLATE

    @property
    def is_real(self) -> bool:
        return self.kind == EssayKind.REAL

    @property
    def is_dummy(self) -> bool:
        return self.kind == EssayKind.DUMMY

    @property
    def is_not_found(self) -> bool:
        return not self.is_loading and self.essay is None


def classify(essay_id: str) -> EssayKind:
    """Определение варианта по пространству имен идентификатора"""
    if essay_id.startswith(TEMPLATE_PREFIX):
        return EssayKind.TEMPLATE
    if essay_id.startswith(DUMMY_PREFIX):
        return EssayKind.DUMMY
    return EssayKind.REAL


def template_id(slug: str) -> str:
    return f"{TEMPLATE_PREFIX}{slug}"


def seed_content_html(title: str = DEFAULT_TITLE) -> str:
    return f"<h1>{title}</h1><p>{SEED_PARAGRAPH}</p>"


def seed_content_json(title: str = DEFAULT_TITLE) -> Dict[str, Any]:
    return {
        "type": "doc",
        "content": [
            {"type": "heading", "attrs": {"level": 1}, "content": [{"type": "text", "text": title}]},
            {"type": "paragraph", "content": [{"type": "text", "text": SEED_PARAGRAPH}]},
        ],
    }


def estimate_reading_time(content_html: Optional[str], words_per_minute: int = 200) -> int:
    """Оценка времени чтения в минутах (не меньше одной)"""
    if not content_html:
        return 1
    text = _SPACE_RE.sub(" ", _TAG_RE.sub(" ", content_html)).strip()
    if not text:
        return 1
    word_count = len(text.split(" "))
    return max(1, math.ceil(word_count / words_per_minute))
