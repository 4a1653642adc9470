from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Optional, List, Dict, Any
from datetime import datetime

from green_essays.domains.essays.entities import EssayKind, EssayStatus


class EssayResponse(BaseModel):
    """Схема для ответа с данными эссе"""
    id: str
    slug: str
    section: str
    title: str
    subtitle: Optional[str] = ""
    author_name: str
    cover_image_url: Optional[str] = None
    content_html: Optional[str] = None
    content_json: Optional[Dict[str, Any]] = None
    status: EssayStatus
    version: int
    reading_time: int
    updated_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class EssayUpdate(BaseModel):
    """Схема для сохранения правок"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    subtitle: Optional[str] = Field(None, max_length=1000)
    author_name: Optional[str] = Field(None, max_length=255)
    cover_image_url: Optional[str] = Field(None, max_length=1024)
    content_html: Optional[str] = Field(None, max_length=1000000)  # 1MB max content
    content_json: Optional[Dict[str, Any]] = None

    @field_validator('title', 'author_name')
    @classmethod
    def validate_required(cls, v, info):
        # Валидатор вызывается только для переданных полей, явный null запрещен
        if v is None:
            raise ValueError(f'{info.field_name} cannot be null')
        return v

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Title cannot be empty')
        return v.strip() if v else v

    def to_updates(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class AddEssayRequest(BaseModel):
    """Схема для явного создания эссе в разделе"""
    title: Optional[str] = Field(None, max_length=255)
    subtitle: str = Field(default="", max_length=1000)
    author: Optional[str] = Field(None, max_length=255)


class AddEssayResponse(BaseModel):
    """Схема для ответа о созданном эссе"""
    id: str
    slug: str
    path: str
    essay: EssayResponse


class EssayListResponse(BaseModel):
    """Схема для списка эссе раздела"""
    section: str
    section_title: str
    section_description: str = ""
    essays: List[EssayResponse]
    total: int


class EssayPageResponse(BaseModel):
    """Схема для результата навигации на страницу эссе"""
    state: str
    kind: Optional[EssayKind] = None
    is_template: bool
    is_editing: bool
    url: Optional[str] = None
    essay: Optional[EssayResponse] = None
    provision_error: Optional[str] = None


class EssayVersionResponse(BaseModel):
    """Схема для ответа с данными версии эссе"""
    essay_id: str
    version: int
    title: str
    subtitle: Optional[str] = None
    content_html: Optional[str] = None
    content_json: Optional[Dict[str, Any]] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class EssayVersionListResponse(BaseModel):
    """Схема для истории версий"""
    essay_id: str
    versions: List[EssayVersionResponse]
