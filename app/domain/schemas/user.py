"""Pydantic schemas for the User domain."""

from typing import Optional

from pydantic import BaseModel


class UserBase(BaseModel):
    name: str
    email: str
    id_card_no: Optional[str] = None


class UserCreate(UserBase):
    pass


class UserUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    id_card_no: Optional[str] = None


class UserRead(UserBase):
    id: int

    model_config = {"from_attributes": True}
