"""Mappers for stores, staff profiles and the per-store master data."""

from .base import EntityMapper, MapResult, ScopePolicy, Tier
from ..models.record import SourceDocument, Skip
from ..models.schema import (
    CategoryRow,
    CustomerRow,
    ProfileRow,
    StoreRow,
    SupplierRow,
    TargetRow,
)
from ..services.context import MigrationContext
from ..services.fields import as_bool, as_dict, as_list, as_number, as_text
from ..services.reference_index import actor_uid, derive_profile_email


class StoreMapper(EntityMapper):
    """Stores are the tenant scope every other entity hangs off."""

    collection = "stores"
    table = "stores"
    row_model = StoreRow
    tier = Tier.SCOPES
    scope_policy = ScopePolicy.NONE

    def map(self, doc: SourceDocument, ctx: MigrationContext) -> MapResult:
        return StoreRow(
            id=ctx.translate(doc.id),
            name=doc.first("name"),
            # Source owners are auth users of the old backend, not target identities
            owner_id=None,
            owner_name=doc.first("ownerName", "owner_name"),
            email=doc.first("email"),
            plan=doc.first("plan", default="free"),
            status=doc.first("status", default="active"),
            address=doc.first("address"),
            phone=as_text(doc.first("phone")),
            settings=as_dict(doc.first("settings")),
            telegram_bot_token=as_text(doc.first("telegramBotToken", "telegram_bot_token")),
            telegram_chat_id=as_text(doc.first("telegramChatId", "telegram_chat_id")),
            enable_sales_performance=as_bool(doc.first("enableSalesPerformance", "enable_sales_performance")),
            pet_care_enabled=as_bool(doc.first("petCareEnabled", "pet_care_enabled")),
            created_at=self.created_at(doc),
        )

    def on_loaded(self, row: TargetRow, doc: SourceDocument, ctx: MigrationContext) -> None:
        ctx.index.add_scope(row.id)


class ProfileMapper(EntityMapper):
    """
    Staff accounts.

    A profile keeps the id of an existing target identity with the same
    email, else the translated source uid. Staff whose store does not
    resolve are moved to the fallback store instead of being dropped.
    """

    collection = "users"
    table = "profiles"
    row_model = ProfileRow
    tier = Tier.INDEPENDENT
    scope_policy = ScopePolicy.REHOME

    def map(self, doc: SourceDocument, ctx: MigrationContext) -> MapResult:
        email = derive_profile_email(doc, ctx.config.placeholder_email_domain)
        if email in ctx.config.excluded_profile_emails:
            return Skip(f"profile {email} is excluded")

        store_id = self.resolve_scope(doc, ctx)
        if isinstance(store_id, Skip):
            return store_id

        return ProfileRow(
            id=ctx.index.profile_id(email) or ctx.translate(actor_uid(doc)),
            email=email,
            name=doc.first("name", "displayName"),
            role=doc.first("role", default="staff"),
            store_id=store_id,
            status=doc.first("status", default="active"),
            pin=as_text(doc.first("pin")),
            permissions=as_list(doc.first("permissions")),
            created_at=self.created_at(doc),
        )

    def on_loaded(self, row: TargetRow, doc: SourceDocument, ctx: MigrationContext) -> None:
        ctx.index.add_profile(row.email, row.id, uid=actor_uid(doc))


class CustomerMapper(EntityMapper):
    """Customers keep their source id; other entities reference it raw."""

    collection = "customers"
    table = "customers"
    row_model = CustomerRow
    tier = Tier.INDEPENDENT

    def map(self, doc: SourceDocument, ctx: MigrationContext) -> MapResult:
        store_id = self.resolve_scope(doc, ctx)
        if isinstance(store_id, Skip):
            return store_id

        return CustomerRow(
            id=doc.id,
            name=doc.first("name"),
            phone=as_text(doc.first("phone")),
            email=doc.first("email"),
            address=doc.first("address"),
            store_id=store_id,
            total_spent=as_number(doc.first("totalSpent", "total_spent")),
            debt=as_number(doc.first("debt")),
            loyalty_points=as_number(doc.first("loyaltyPoints", "loyalty_points")),
            total_lifetime_points=as_number(doc.first("totalLifetimePoints", "total_lifetime_points")),
            created_at=self.created_at(doc),
        )


class SupplierMapper(EntityMapper):
    collection = "suppliers"
    table = "suppliers"
    row_model = SupplierRow
    tier = Tier.INDEPENDENT

    def map(self, doc: SourceDocument, ctx: MigrationContext) -> MapResult:
        store_id = self.resolve_scope(doc, ctx)
        if isinstance(store_id, Skip):
            return store_id

        return SupplierRow(
            id=ctx.translate(doc.id),
            name=doc.first("name"),
            contact_person=doc.first("contactPerson", "contact_person"),
            phone=as_text(doc.first("phone")),
            email=doc.first("email"),
            address=doc.first("address"),
            store_id=store_id,
            created_at=self.created_at(doc),
        )


class CategoryMapper(EntityMapper):
    """Product categories; products may refer to them by name only."""

    collection = "categories"
    table = "categories"
    row_model = CategoryRow
    tier = Tier.INDEPENDENT

    def map(self, doc: SourceDocument, ctx: MigrationContext) -> MapResult:
        store_id = self.resolve_scope(doc, ctx)
        if isinstance(store_id, Skip):
            return store_id

        return CategoryRow(
            id=ctx.translate(doc.id),
            name=doc.first("name"),
            store_id=store_id,
            created_at=self.created_at(doc),
        )

    def on_loaded(self, row: TargetRow, doc: SourceDocument, ctx: MigrationContext) -> None:
        ctx.index.add_category(row.store_id, row.name, row.id)
