"""
Import schemas for bulk document loading.
"""
from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from cms.schemas.document import clean_body, clean_text


class DocumentImportDTO(BaseModel):
    """External description of one webpage."""
    document_type: str = Field(..., description="Concrete webpage type used when the page is new")
    url_segment: str = Field(..., min_length=1, max_length=450)
    parent_url: Optional[str] = Field(None, description="URL segment of the parent webpage")
    name: str = Field(..., min_length=1, max_length=255)
    body_content: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None
    reveal_in_navigation: bool = False
    require_ssl: bool = False
    display_order: int = 0
    publish_date: Optional[datetime] = None
    tags: List[str] = Field(default_factory=list)
    url_history: List[str] = Field(default_factory=list)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError('Name cannot be empty')
        return clean_text(v)

    @field_validator('body_content')
    @classmethod
    def validate_body_content(cls, v):
        return clean_body(v)

    @field_validator('publish_date')
    @classmethod
    def validate_publish_date(cls, v):
        """Store publish dates as naive UTC."""
        if v is not None and v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v

    @field_validator('tags')
    @classmethod
    def validate_tags(cls, v):
        """Trim and sanitize tag names, dropping blanks."""
        validated_tags = []
        for tag in v:
            if isinstance(tag, str) and tag.strip():
                validated_tags.append(clean_text(tag))
        return validated_tags


class ImportRequest(BaseModel):
    documents: List[DocumentImportDTO]


class ImportResponse(BaseModel):
    imported: int
    document_ids: List[int]
