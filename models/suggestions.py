from typing import List
from pydantic import BaseModel, ConfigDict, Field


class SuggestedActivity(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str = ""
    location: str = ""
    estimated_cost: float = Field(default=0, alias="estimatedCost")
    time_of_day: str = Field(default="", alias="timeOfDay")


class DaySuggestion(BaseModel):
    # 1-based day number within the trip
    day: int
    activities: List[SuggestedActivity] = Field(default_factory=list)
