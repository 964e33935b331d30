"""Target table row models.

Each model mirrors one table of the relational target: fixed columns, typed
values and the declared default of every column. Foreign keys are canonical
identifiers produced by the identifier translator.
"""

from typing import Any, ClassVar, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TargetRow(BaseModel):
    """Base for all target rows."""

    model_config = ConfigDict(extra="forbid", coerce_numbers_to_str=True)

    primary_key_field: ClassVar[str] = "id"

    id: str

    @property
    def primary_key(self) -> str:
        """Value of the row's primary key column."""
        return getattr(self, self.primary_key_field)

    def to_record(self) -> Dict[str, Any]:
        """Convert to the JSON-compatible dict sent to the target."""
        return self.model_dump(mode="json")


class ScopedRow(TargetRow):
    """A row owned by a store (the tenant scope)."""
    store_id: Optional[str] = None
    created_at: Optional[str] = None


class StoreRow(TargetRow):
    name: Optional[str] = None
    owner_id: Optional[str] = None
    owner_name: Optional[str] = None
    email: Optional[str] = None
    plan: str = "free"
    status: str = "active"
    address: Optional[Any] = None
    phone: Optional[str] = None
    settings: Dict[str, Any] = Field(default_factory=dict)
    telegram_bot_token: Optional[str] = None
    telegram_chat_id: Optional[str] = None
    enable_sales_performance: bool = False
    pet_care_enabled: bool = False
    created_at: Optional[str] = None


class ProfileRow(ScopedRow):
    email: str
    name: Optional[str] = None
    role: str = "staff"
    status: str = "active"
    pin: Optional[str] = None
    permissions: List[Any] = Field(default_factory=list)


class CustomerRow(ScopedRow):
    """Customers keep the source id as primary key."""
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[Any] = None
    total_spent: float = 0
    debt: float = 0
    loyalty_points: float = 0
    total_lifetime_points: float = 0


class SupplierRow(ScopedRow):
    name: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[Any] = None


class CategoryRow(ScopedRow):
    name: Optional[str] = None


class ProductRow(ScopedRow):
    name: Optional[str] = None
    barcode: str = ""
    buy_price: float = 0
    sell_price: float = 0
    stock: float = 0
    unit: str = "pcs"
    category_id: Optional[str] = None
    is_deleted: bool = False
    min_stock: float = 0
    type: str = "product"
    sold: float = 0
    revenue: float = 0
    image_url: Optional[str] = None
    discount: float = 0
    discount_type: str = "percent"
    is_unlimited: bool = False
    purchase_unit: Optional[str] = None
    conversion_to_unit: float = 0
    weight: float = 0
    rack_location: Optional[str] = None


class RoomRow(ScopedRow):
    name: Optional[str] = None
    type: Optional[str] = None
    capacity: float = 1
    price_per_night: float = 0
    status: str = "available"
    features: List[Any] = Field(default_factory=list)


class RentalUnitRow(ScopedRow):
    name: Optional[str] = None
    linked_product_id: Optional[str] = None


class PetRow(ScopedRow):
    customer_id: Optional[str] = None
    name: Optional[str] = None
    type: str = "Cat"
    breed: Optional[str] = None
    gender: Optional[str] = None
    birth_date: Optional[str] = None
    weight: float = 0
    notes: Optional[str] = None


class ShiftRow(ScopedRow):
    cashier_id: Optional[str] = None
    cashier_name: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    initial_cash: float = 0
    final_cash: float = 0
    expected_cash: float = 0
    total_sales: float = 0
    status: str = "active"
    notes: str = ""


class TransactionRow(ScopedRow):
    """Transactions keep the source id as primary key."""
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    cashier: Optional[str] = None
    cashier_id: Optional[str] = None
    date: Optional[str] = None
    total: float = 0
    discount: float = 0
    tax: float = 0
    payment_method: Optional[str] = None
    status: str = "success"
    items: List[Any] = Field(default_factory=list)
    shift_id: Optional[str] = None
    void_reason: Optional[str] = None
    payment_details: Dict[str, Any] = Field(default_factory=dict)


class CashFlowRow(ScopedRow):
    type: str = "out"
    category: str = "General"
    amount: float = 0
    description: Optional[str] = None
    date: Optional[str] = None
    expense_group: str = "operational"


class PurchaseOrderRow(ScopedRow):
    supplier_id: Optional[str] = None
    supplier_name: Optional[str] = None
    date: Optional[str] = None
    due_date: Optional[str] = None
    status: str = "draft"
    total_amount: float = 0
    paid_amount: float = 0
    items: List[Any] = Field(default_factory=list)
    note: str = ""


class BookingRow(ScopedRow):
    customer_id: Optional[str] = None
    room_id: Optional[str] = None
    room_name: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    status: str = "booked"
    total_price: float = 0
    notes: Optional[str] = None


class RentalSessionRow(ScopedRow):
    unit_id: Optional[str] = None
    customer_id: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    status: str = "active"
    agreed_total: float = 0


class MedicalRecordRow(ScopedRow):
    pet_id: Optional[str] = None
    date: Optional[str] = None
    diagnosis: Optional[str] = None
    treatment: Optional[str] = None
    notes: Optional[str] = None
    doctor_name: Optional[str] = None
    next_visit: Optional[str] = None


class StockMovementRow(ScopedRow):
    product_id: Optional[str] = None
    type: str = "adjustment"
    qty: float = 0
    date: Optional[str] = None
    note: str = ""
