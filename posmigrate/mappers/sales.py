"""Mappers for till activity: shifts, sales, expenses and purchasing."""

from .base import EntityMapper, MapResult, Tier
from ..models.record import SourceDocument, Skip
from ..models.schema import CashFlowRow, PurchaseOrderRow, ShiftRow, TransactionRow
from ..services.context import MigrationContext
from ..services.fields import as_dict, as_list, as_number, as_ref, as_text


class ShiftMapper(EntityMapper):
    """Cashier shifts; the cashier links to a profile through the actor map."""

    collection = "shifts"
    table = "shifts"
    row_model = ShiftRow
    tier = Tier.TRANSACTIONAL

    def map(self, doc: SourceDocument, ctx: MigrationContext) -> MapResult:
        store_id = self.resolve_scope(doc, ctx)
        if isinstance(store_id, Skip):
            return store_id

        return ShiftRow(
            id=ctx.translate(doc.id),
            store_id=store_id,
            cashier_id=ctx.index.actor_id(doc.first("cashierId", "cashier_id")),
            cashier_name=doc.first("cashierName", "cashier_name", "cashier"),
            start_time=self.timestamp(doc, "startTime", "start_time"),
            end_time=self.timestamp(doc, "endTime", "end_time"),
            initial_cash=as_number(doc.first("initialCash", "initial_cash")),
            final_cash=as_number(doc.first("finalCash", "final_cash")),
            expected_cash=as_number(doc.first("expectedCash", "expected_cash")),
            total_sales=as_number(doc.first("totalSales", "total_sales")),
            status=doc.first("status", default="active"),
            notes=as_text(doc.first("notes"), default=""),
            created_at=self.created_at(doc),
        )


class TransactionMapper(EntityMapper):
    """Sales. The target keeps the source id, as it does for customers."""

    collection = "transactions"
    table = "transactions"
    row_model = TransactionRow
    tier = Tier.TRANSACTIONAL

    def map(self, doc: SourceDocument, ctx: MigrationContext) -> MapResult:
        store_id = self.resolve_scope(doc, ctx)
        if isinstance(store_id, Skip):
            return store_id

        return TransactionRow(
            id=doc.id,
            store_id=store_id,
            customer_id=as_ref(doc.first("customerId", "customer_id")),
            customer_name=doc.first("customerName", "customer_name"),
            cashier=as_text(doc.first("cashier")),
            cashier_id=ctx.index.actor_id(doc.first("cashierId", "cashier_id")),
            date=self.timestamp(doc, "date"),
            total=as_number(doc.first("total")),
            discount=as_number(doc.first("discount")),
            tax=as_number(doc.first("tax")),
            payment_method=doc.first("paymentMethod", "payment_method"),
            status=doc.first("status", default="success"),
            items=as_list(doc.first("items")),
            created_at=self.created_at(doc),
            shift_id=self.reference(doc, ctx, "shiftId", "shift_id"),
            void_reason=doc.first("voidReason", "void_reason"),
            payment_details=as_dict(doc.first("paymentDetails", "payment_details")),
        )


class ExpenseMapper(EntityMapper):
    """Expenses become outgoing cash flow entries."""

    collection = "expenses"
    table = "cash_flow"
    row_model = CashFlowRow
    tier = Tier.TRANSACTIONAL

    def map(self, doc: SourceDocument, ctx: MigrationContext) -> MapResult:
        store_id = self.resolve_scope(doc, ctx)
        if isinstance(store_id, Skip):
            return store_id

        return CashFlowRow(
            id=ctx.translate(doc.id),
            store_id=store_id,
            type="out",
            category=doc.first("category", default="General"),
            amount=as_number(doc.first("amount")),
            description=doc.first("description", "note"),
            date=self.timestamp(doc, "date"),
            expense_group=doc.first("group", "expense_group", default="operational"),
            created_at=self.created_at(doc),
        )


class PurchaseOrderMapper(EntityMapper):
    collection = "purchase_orders"
    table = "purchase_orders"
    row_model = PurchaseOrderRow
    tier = Tier.TRANSACTIONAL

    def map(self, doc: SourceDocument, ctx: MigrationContext) -> MapResult:
        store_id = self.resolve_scope(doc, ctx)
        if isinstance(store_id, Skip):
            return store_id

        return PurchaseOrderRow(
            id=ctx.translate(doc.id),
            store_id=store_id,
            supplier_id=self.reference(doc, ctx, "supplierId", "supplier_id"),
            supplier_name=doc.first("supplierName", "supplier_name"),
            date=self.timestamp(doc, "date"),
            due_date=self.timestamp(doc, "dueDate", "due_date"),
            status=doc.first("status", default="draft"),
            total_amount=as_number(doc.first("totalAmount", "total_amount", "total")),
            paid_amount=as_number(doc.first("paidAmount", "paid_amount", "paid")),
            items=as_list(doc.first("items")),
            note=as_text(doc.first("notes", "note"), default=""),
            created_at=self.created_at(doc),
        )
