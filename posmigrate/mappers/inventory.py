"""Mappers for sellable items, rentable assets and stock movements."""

from .base import EntityMapper, MapResult, Tier
from ..models.record import SourceDocument, Skip
from ..models.schema import ProductRow, RentalUnitRow, RoomRow, StockMovementRow
from ..services.context import MigrationContext
from ..services.fields import as_bool, as_list, as_number, as_text


class ProductMapper(EntityMapper):
    """
    Products and services sold at the till.

    Older documents reference their category by name only; those resolve
    through the (store, name) lookup of the reference index, which also
    holds the categories loaded earlier in the same run.
    """

    collection = "products"
    table = "products"
    row_model = ProductRow
    tier = Tier.REFERENCING

    def map(self, doc: SourceDocument, ctx: MigrationContext) -> MapResult:
        store_id = self.resolve_scope(doc, ctx)
        if isinstance(store_id, Skip):
            return store_id

        category_id = self.reference(doc, ctx, "categoryId", "category_id")
        if category_id is None:
            category_id = ctx.index.category_id(store_id, doc.first("category"))

        product_type = doc.first("type")
        if product_type is None:
            product_type = "service" if as_bool(doc.first("isService", "is_service")) else "product"

        return ProductRow(
            id=ctx.translate(doc.id),
            name=doc.first("name"),
            barcode=as_text(doc.first("barcode", "code"), default=""),
            buy_price=as_number(doc.first("buyPrice", "buy_price", "cost")),
            sell_price=as_number(doc.first("sellPrice", "sell_price", "price")),
            stock=as_number(doc.first("stock", "qty")),
            unit=doc.first("unit", default="pcs"),
            category_id=category_id,
            store_id=store_id,
            is_deleted=as_bool(doc.first("isDeleted", "is_deleted")),
            created_at=self.created_at(doc),
            min_stock=as_number(doc.first("minStock", "min_stock")),
            type=product_type,
            sold=as_number(doc.first("sold")),
            revenue=as_number(doc.first("revenue")),
            image_url=doc.first("imageUrl", "image_url", "image"),
            discount=as_number(doc.first("discount")),
            discount_type=doc.first("discountType", "discount_type", default="percent"),
            is_unlimited=as_bool(doc.first("isUnlimited", "is_unlimited")),
            purchase_unit=doc.first("purchaseUnit", "purchase_unit"),
            conversion_to_unit=as_number(doc.first("conversionToUnit", "conversion_to_unit")),
            weight=as_number(doc.first("weight")),
            rack_location=as_text(doc.first("rackLocation", "rack_location")),
        )


class RoomMapper(EntityMapper):
    collection = "rooms"
    table = "rooms"
    row_model = RoomRow
    tier = Tier.REFERENCING

    def map(self, doc: SourceDocument, ctx: MigrationContext) -> MapResult:
        store_id = self.resolve_scope(doc, ctx)
        if isinstance(store_id, Skip):
            return store_id

        return RoomRow(
            id=ctx.translate(doc.id),
            store_id=store_id,
            name=doc.first("name"),
            type=doc.first("type"),
            capacity=as_number(doc.first("capacity"), default=1),
            price_per_night=as_number(doc.first("pricePerNight", "price_per_night", "price")),
            status=doc.first("status", default="available"),
            features=as_list(doc.first("features")),
            created_at=self.created_at(doc),
        )


class RentalUnitMapper(EntityMapper):
    collection = "rental_units"
    table = "rental_units"
    row_model = RentalUnitRow
    tier = Tier.REFERENCING

    def map(self, doc: SourceDocument, ctx: MigrationContext) -> MapResult:
        store_id = self.resolve_scope(doc, ctx)
        if isinstance(store_id, Skip):
            return store_id

        return RentalUnitRow(
            id=ctx.translate(doc.id),
            store_id=store_id,
            name=doc.first("name"),
            linked_product_id=self.reference(doc, ctx, "linkedProductId", "linked_product_id"),
            created_at=self.created_at(doc),
        )


class StockMovementMapper(EntityMapper):
    collection = "stock_movements"
    table = "stock_movements"
    row_model = StockMovementRow
    tier = Tier.DETAIL

    def map(self, doc: SourceDocument, ctx: MigrationContext) -> MapResult:
        store_id = self.resolve_scope(doc, ctx)
        if isinstance(store_id, Skip):
            return store_id

        return StockMovementRow(
            id=ctx.translate(doc.id),
            store_id=store_id,
            product_id=self.reference(doc, ctx, "productId", "product_id"),
            type=doc.first("type", default="adjustment"),
            qty=as_number(doc.first("quantity", "qty")),
            date=self.timestamp(doc, "date"),
            note=as_text(doc.first("reason", "note"), default=""),
            created_at=self.created_at(doc),
        )
