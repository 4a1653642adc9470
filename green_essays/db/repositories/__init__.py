from green_essays.db.repositories.essay_repository import (
    EssayRepository, EssayVersionRepository, EditLogRepository
)

__all__ = [
    "EssayRepository",
    "EssayVersionRepository",
    "EditLogRepository"
]
