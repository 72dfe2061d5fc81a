from datetime import date
from typing import List, Optional
from sqlmodel import Field, SQLModel, Column, JSON
from .base import Base


class Trip(Base, table=True):
    __tablename__ = "trips"

    title: Optional[str] = None
    destination: str = Field(index=True)
    start_date: date = Field(index=True)
    end_date: date = Field(index=True)
    # Interest labels, display order preserved
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    notes: Optional[str] = None
    cover_image: Optional[str] = None
    custom_map_image: Optional[str] = None


class TripCreate(SQLModel):
    """Payload of the trip creation flow."""

    title: Optional[str] = None
    destination: str
    start_date: date
    # A week after start_date when left out
    end_date: Optional[date] = None
    tags: List[str] = Field(default_factory=list)
    cover_image: Optional[str] = None
    custom_map_image: Optional[str] = None
