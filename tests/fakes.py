"""In-memory stand-ins for the essay repository used across the test suite."""

import asyncio
import dataclasses
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from green_essays.domains.essays.entities import (
    ActingUser, Essay, EssayStatus, EssayVersion, seed_content_html, seed_content_json,
)
from green_essays.domains.essays.exceptions import RepositoryError

EDITOR = ActingUser(is_privileged=True, identity="ed@x.com")
VIEWER = ActingUser.anonymous()


def make_essay(**overrides) -> Essay:
    """Build a persisted-looking essay with sensible defaults."""
    now = datetime.now(timezone.utc)
    values = dict(
        id=str(uuid.uuid4()),
        slug="existing-essay",
        section="future",
        title="Existing Essay",
        subtitle="",
        author_name="ed",
        content_html=seed_content_html("Existing Essay"),
        content_json=seed_content_json("Existing Essay"),
        status=EssayStatus.DRAFT,
        version=1,
        reading_time=1,
        created_at=now,
        updated_at=now,
    )
    values.update(overrides)
    return Essay(**values)


class FakeEssayRepository:
    """Records every call and can be told to fail or stall."""

    def __init__(self, essays: Optional[List[Essay]] = None):
        self.essays: Dict[str, Essay] = {essay.id: essay for essay in essays or []}
        self.versions: Dict[str, List[EssayVersion]] = {}

        self.list_calls: List[tuple] = []
        self.create_calls: List[Dict[str, Any]] = []
        self.update_calls: List[tuple] = []
        self.status_calls: List[tuple] = []

        self.fail_list = False
        self.fail_create = False
        self.fail_update = False
        self.fail_status = False

        self.list_delays: Dict[str, float] = {}
        self.create_delay = 0.0
        self.update_delay = 0.0

    async def list_by_section(self, section: str, include_drafts: bool = True) -> List[Essay]:
        self.list_calls.append((section, include_drafts))
        await asyncio.sleep(self.list_delays.get(section, 0))
        if self.fail_list:
            raise RepositoryError("connection refused")
        return [
            essay for essay in self.essays.values()
            if essay.section == section and (include_drafts or essay.is_published)
        ]

    async def create(self, payload: Dict[str, Any]) -> Essay:
        self.create_calls.append(dict(payload))
        await asyncio.sleep(self.create_delay)
        if self.fail_create:
            raise RepositoryError("permission denied for table green_essays")
        for essay in self.essays.values():
            if essay.section == payload["section"] and essay.slug == payload["slug"]:
                raise RepositoryError("duplicate key value violates unique constraint")

        values = dict(payload)
        values["status"] = EssayStatus.from_string(values["status"])
        now = datetime.now(timezone.utc)
        essay = Essay(id=str(uuid.uuid4()), created_at=now, updated_at=now, **values)
        self.essays[essay.id] = essay
        return essay

    async def update(self, essay_id: str, values: Dict[str, Any]) -> Essay:
        self.update_calls.append((essay_id, dict(values)))
        await asyncio.sleep(self.update_delay)
        if self.fail_update:
            raise RepositoryError("statement timeout")
        existing = self.essays.get(essay_id)
        if existing is None:
            raise RepositoryError(f"Essay {essay_id} not found")

        essay = dataclasses.replace(existing, **values)
        self.essays[essay_id] = essay
        self.versions.setdefault(essay_id, []).insert(0, EssayVersion(
            essay_id=essay_id,
            version=essay.version,
            title=essay.title,
            subtitle=essay.subtitle,
            content_html=essay.content_html,
            content_json=essay.content_json,
            created_by=values.get("updated_by"),
            created_at=datetime.now(timezone.utc),
        ))
        return essay

    async def set_status(
        self,
        essay_id: str,
        status: str,
        version: int,
        updated_by: Optional[str] = None
    ) -> Essay:
        self.status_calls.append((essay_id, status, version, updated_by))
        if self.fail_status:
            raise RepositoryError("row-level security violation")
        existing = self.essays.get(essay_id)
        if existing is None:
            raise RepositoryError(f"Essay {essay_id} not found")

        essay = dataclasses.replace(
            existing,
            status=EssayStatus.from_string(status),
            version=version,
            updated_by=updated_by,
            updated_at=existing.updated_at + timedelta(seconds=1) if existing.updated_at else None,
        )
        self.essays[essay_id] = essay
        return essay

    async def list_versions(self, essay_id: str, limit: int = 50, offset: int = 0) -> List[EssayVersion]:
        return self.versions.get(essay_id, [])[offset:offset + limit]
