import uuid

from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func

from green_essays.core.db import Base


def generate_id() -> str:
    return str(uuid.uuid4())


class BaseModel(Base):
    """Общие колонки: непрозрачный идентификатор и временные метки"""
    __abstract__ = True

    id = Column(String(36), primary_key=True, default=generate_id)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
