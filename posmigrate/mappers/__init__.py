"""Entity mappers, one per source collection."""

from .base import EntityMapper, MapperRegistry, MapResult, ScopePolicy, Tier
from .directory import CategoryMapper, CustomerMapper, ProfileMapper, StoreMapper, SupplierMapper
from .hospitality import BookingMapper, MedicalRecordMapper, PetMapper, RentalSessionMapper
from .inventory import ProductMapper, RentalUnitMapper, RoomMapper, StockMovementMapper
from .sales import ExpenseMapper, PurchaseOrderMapper, ShiftMapper, TransactionMapper

# Registration order; the registry sorts by tier and keeps this order within one
ALL_MAPPERS = [
    StoreMapper,
    ProfileMapper,
    CustomerMapper,
    SupplierMapper,
    CategoryMapper,
    ProductMapper,
    RoomMapper,
    RentalUnitMapper,
    PetMapper,
    ShiftMapper,
    TransactionMapper,
    ExpenseMapper,
    PurchaseOrderMapper,
    BookingMapper,
    RentalSessionMapper,
    MedicalRecordMapper,
    StockMovementMapper,
]


def default_registry() -> MapperRegistry:
    """Registry with every built-in mapper."""
    return MapperRegistry(mapper_cls() for mapper_cls in ALL_MAPPERS)


__all__ = [
    "ALL_MAPPERS",
    "EntityMapper",
    "MapperRegistry",
    "MapResult",
    "ScopePolicy",
    "Tier",
    "default_registry",
]
