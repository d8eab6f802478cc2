"""Identity Schemas — users and temples at the API boundary.

Invariants:
    - UserContactUpdate distinguishes "field omitted" from "field set to null"
      via model_fields_set
"""

from pydantic import BaseModel, ConfigDict, Field


class UserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: str | None = Field(None, max_length=254)
    phone: str | None = Field(None, max_length=20)


class UserContactUpdate(BaseModel):
    """Partial update of contact fields. Omitted keeps, null clears."""
    email: str | None = Field(None, max_length=254)
    phone: str | None = Field(None, max_length=20)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str | None
    phone: str | None


class TempleCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    location: str = Field(min_length=1, max_length=200)


class TempleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    location: str
