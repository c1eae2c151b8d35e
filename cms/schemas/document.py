"""
Document schemas for API request/response models.
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator
import bleach

ALLOWED_BODY_TAGS = [
    'p', 'br', 'strong', 'em', 'code', 'pre', 'blockquote',
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6',
    'ul', 'ol', 'li', 'a', 'img', 'table', 'thead', 'tbody', 'tr', 'td', 'th'
]
ALLOWED_BODY_ATTRIBUTES = {
    'a': ['href', 'title'],
    'img': ['src', 'alt', 'title', 'width', 'height'],
    'code': ['class'],
    'pre': ['class']
}


def clean_text(value: str) -> str:
    """Strip all markup from a single line value."""
    return bleach.clean(value.strip(), tags=[], strip=True)


def clean_body(value: Optional[str]) -> Optional[str]:
    """Sanitize body HTML down to basic formatting."""
    if value is None:
        return None
    return bleach.clean(value, tags=ALLOWED_BODY_TAGS, attributes=ALLOWED_BODY_ATTRIBUTES, strip=True)


class DocumentCreate(BaseModel):
    """Schema for creating a new document."""
    document_type: str = Field(..., description="Concrete document type, e.g. TextPage")
    name: str = Field(..., min_length=1, max_length=255, description="Document name")
    parent_id: Optional[int] = Field(None, description="Parent document id")
    url_segment: Optional[str] = Field(None, max_length=450, description="URL segment; generated when omitted")
    body_content: Optional[str] = Field(None, description="Webpage body HTML")
    meta_title: Optional[str] = Field(None, max_length=255)
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = Field(None, max_length=255)
    reveal_in_navigation: bool = False
    requires_ssl: bool = False

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Validate and sanitize name."""
        if not v or len(v.strip()) == 0:
            raise ValueError('Name cannot be empty')
        return clean_text(v)

    @field_validator('body_content')
    @classmethod
    def validate_body_content(cls, v):
        return clean_body(v)


class SortItem(BaseModel):
    """One entry of a sibling reordering."""
    id: int
    order: int = Field(..., ge=0)


class SetTagsRequest(BaseModel):
    """Comma separated tag names; empty or null clears the tags."""
    tags: Optional[str] = Field(None, max_length=2000)

    @field_validator('tags')
    @classmethod
    def validate_tags(cls, v):
        if v is None:
            return v
        return clean_text(v)


class SetParentRequest(BaseModel):
    parent_id: Optional[int] = None


class DocumentResponse(BaseModel):
    """Schema for document response."""
    id: int
    document_type: str
    site_id: int
    parent_id: Optional[int]
    name: str
    url_segment: Optional[str]
    display_order: int
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None
    body_content: Optional[str] = None
    publish_on: Optional[datetime] = None
    published: bool = False
    tags: List[str] = Field(default_factory=list)
    shown_widget_ids: List[int] = Field(default_factory=list)
    hidden_widget_ids: List[int] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DocumentSummary(BaseModel):
    """Minimal document reference used for breadcrumbs."""
    id: int
    name: str
    url_segment: Optional[str]
    document_type: str

    model_config = ConfigDict(from_attributes=True)


class UrlSuggestionResponse(BaseModel):
    url: str


class UrlValidityResponse(BaseModel):
    url: str
    valid: bool


class DocumentVersionResponse(BaseModel):
    id: int
    document_id: int
    data: dict
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
