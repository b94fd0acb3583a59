"""
Pydantic models for catalog services (decoration packages).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ServiceBase(BaseModel):
    description: Optional[str] = Field(None, examples=["Balloon arch and table centrepieces"])
    category: Optional[str] = Field(None, examples=["wedding"])
    image_url: Optional[str] = None


class ServiceCreate(ServiceBase):
    # Presence and positivity are checked by ``CatalogService`` so the
    # error names the missing field the same way for every client.
    name: Optional[str] = Field(None, examples=["Wedding stage decoration"])
    cost: Optional[int] = Field(None, examples=[450])


class ServiceUpdate(ServiceBase):
    name: Optional[str] = None
    cost: Optional[int] = None


class ServiceRead(ServiceBase):
    id: int
    name: str
    cost: int
    created_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
    }
