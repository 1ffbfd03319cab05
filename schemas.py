"""
Order Schemas

Pydantic models for the documents the order API returns and for the views
this service derives from them. The order API speaks camelCase with Mongo
style ``_id`` keys; aliases accept that shape while the models expose
snake_case attributes.
"""

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

OrderStatus = Literal["pending", "confirmed", "shipped", "delivered", "cancelled"]
PaymentStatus = Literal["pending", "paid", "failed"]
Scope = Literal["mine", "all"]
StatusFilter = Literal["all", "pending", "confirmed", "shipped", "delivered", "cancelled"]
DateFilter = Literal["all", "today", "week", "month"]
SortKey = Literal["id", "date", "amount", "status"]
SortDirection = Literal["asc", "desc"]


class _Document(BaseModel):
    # Contact fields and ids sometimes arrive as JSON numbers
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True, coerce_numbers_to_str=True)


# Shipping/billing snapshot captured when the order was placed
class Address(_Document):
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    email: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = Field(None, validation_alias=AliasChoices("zipcode", "zipCode", "zip"))
    country: Optional[str] = None
    phone: Optional[str] = None


# Purchasing account, populated or just an id
class Customer(_Document):
    id: Optional[str] = Field(None, alias="_id")
    name: Optional[str] = None
    email: Optional[str] = None


# Order Item (embedded in Order)
class OrderItem(_Document):
    product_ref: Optional[str] = Field(
        None,
        description="Catalog product id; absent when the product was removed",
    )
    name: str = Field("", description="Snapshot of product name at purchase time")
    price: float = Field(..., ge=0, description="Unit price at purchase time")
    quantity: int = Field(..., ge=1, description="Quantity ordered")
    image: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _product_ref_fallback(cls, data):
        # productId may be null on old orders; the line id stands in for it
        if isinstance(data, dict):
            ref = data.get("productId") or data.get("product_ref") or data.get("_id")
            data = {**data, "product_ref": ref}
        return data


# Order collection
class Order(_Document):
    id: str = Field(..., alias="_id", description="Assigned by the order API")
    date: datetime = Field(..., description="Creation time")
    amount: float = Field(..., ge=0, description="Stored order total")
    status: OrderStatus = "pending"
    payment_status: PaymentStatus = Field("pending", alias="paymentStatus")
    payment_method: str = Field("cod", alias="paymentMethod")
    items: List[OrderItem] = Field(default_factory=list)
    address: Optional[Address] = None
    customer: Optional[Customer] = Field(None, alias="userId")

    @field_validator("date")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_validator("customer", mode="before")
    @classmethod
    def _customer_from_id(cls, v):
        if isinstance(v, str):
            return {"_id": v}
        return v


class CartItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., validation_alias=AliasChoices("id", "_id"), description="Product id")
    name: str = ""
    price: float = Field(0, ge=0)
    quantity: int = Field(1, ge=1)
    image: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None


class ViewConfig(BaseModel):
    search_term: str = ""
    status_filter: StatusFilter = "all"
    date_filter: DateFilter = "all"
    sort_key: SortKey = "date"
    sort_direction: SortDirection = "desc"


class Invoice(BaseModel):
    invoice_number: str
    generated_date: datetime
    orders: List[Order] = Field(default_factory=list)
    total_amount: float = 0
    item_count: int = 0


class MergeReport(BaseModel):
    added: int = 0
    updated: int = 0
    skipped: int = 0

    @computed_field
    @property
    def message(self) -> str:
        def items(n: int) -> str:
            return f"{n} item{'s' if n != 1 else ''}"

        if self.added and self.updated:
            return (
                f"{self.added} new item{'s' if self.added != 1 else ''} added and "
                f"{self.updated} existing item{'s' if self.updated != 1 else ''} updated in cart!"
            )
        if self.added:
            return f"{items(self.added)} added to cart!"
        if self.updated:
            return f"{items(self.updated)} updated in cart!"
        return "Nothing to add to cart"


class DashboardStats(BaseModel):
    total_orders: int
    total_revenue: float
    selected: int
    filtered: int


# Request bodies
class InvoiceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_ids: List[str] = Field(default_factory=list, alias="orderIds")
    scope: Scope = "all"


class ReorderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    order_id: str = Field(..., alias="orderId")
