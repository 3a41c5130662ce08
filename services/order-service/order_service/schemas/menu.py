"""
Order Service — Menu and stats schemas
"""
from pydantic import BaseModel, ConfigDict, Field


class MenuItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: float
    category: str
    available: bool


class MenuItemCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    price: float = Field(..., gt=0)
    category: str = Field("main", max_length=100)
    available: bool = True


class AvailabilityRequest(BaseModel):
    available: bool


class PopularItem(BaseModel):
    menu_item_id: int
    name: str
    quantity: int
    revenue: float


class SalesSummary(BaseModel):
    date_key: int
    orders_by_status: dict[str, int]
    total_revenue: float
    popular_items: list[PopularItem]
