# scoring/payloads.py
from datetime import datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import Annotated

from config.points_config import MealType, TransportMode


class Trip(BaseModel):
    mode: TransportMode = Field(..., description="bike, walk, public or car")
    distance_km: float = Field(0, ge=0, description="Trip length in kilometers")
    start_location: Optional[str] = Field(None, max_length=255)
    end_location: Optional[str] = Field(None, max_length=255)

    model_config = ConfigDict(extra="forbid")


class FoodItem(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    category: str = Field(..., description="meat, dairy, vegetables, fruits")
    quantity: float = Field(..., gt=0)
    meal_type: MealType = MealType.snack
    logged_at: Optional[datetime] = None

    model_config = ConfigDict(extra="forbid")


class RecyclingItem(BaseModel):
    category: str = Field(..., description="metal, plastic, paper, glass")
    quantity: int = Field(..., ge=0)

    model_config = ConfigDict(extra="forbid")


class CarbonPayload(BaseModel):
    type: Literal["carbon"] = "carbon"
    trips: List[Trip] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class FoodPayload(BaseModel):
    type: Literal["food"] = "food"
    items: List[FoodItem] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class RecyclingPayload(BaseModel):
    type: Literal["recycling"] = "recycling"
    items: List[RecyclingItem] = Field(default_factory=list)

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    model_config = ConfigDict(extra="forbid")


class ShowerPayload(BaseModel):
    type: Literal["shower"] = "shower"
    duration_minutes: Optional[float] = Field(None, ge=0)
    skipped: bool = False

    model_config = ConfigDict(extra="forbid")


SubmissionPayload = Annotated[
    Union[CarbonPayload, FoodPayload, RecyclingPayload, ShowerPayload],
    Field(discriminator="type"),
]
