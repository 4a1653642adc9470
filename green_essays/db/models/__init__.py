from green_essays.db.models.essay import Essay, EssayVersion, EditLogEntry

__all__ = [
    "Essay",
    "EssayVersion",
    "EditLogEntry"
]
