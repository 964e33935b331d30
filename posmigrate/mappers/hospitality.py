"""Mappers for the vet, hotel and rental verticals."""

from .base import EntityMapper, MapResult, Tier
from ..models.record import SourceDocument, Skip
from ..models.schema import BookingRow, MedicalRecordRow, PetRow, RentalSessionRow
from ..services.context import MigrationContext
from ..services.fields import as_number, as_ref


class PetMapper(EntityMapper):
    collection = "pets"
    table = "pets"
    row_model = PetRow
    tier = Tier.REFERENCING

    def map(self, doc: SourceDocument, ctx: MigrationContext) -> MapResult:
        store_id = self.resolve_scope(doc, ctx)
        if isinstance(store_id, Skip):
            return store_id

        return PetRow(
            id=ctx.translate(doc.id),
            store_id=store_id,
            customer_id=as_ref(doc.first("customerId", "customer_id")),
            name=doc.first("name"),
            type=doc.first("type", default="Cat"),
            breed=doc.first("breed"),
            gender=doc.first("gender"),
            birth_date=self.timestamp(doc, "birthDate", "birth_date"),
            weight=as_number(doc.first("weight")),
            notes=doc.first("notes"),
            created_at=self.created_at(doc),
        )


class BookingMapper(EntityMapper):
    collection = "bookings"
    table = "bookings"
    row_model = BookingRow
    tier = Tier.TRANSACTIONAL

    def map(self, doc: SourceDocument, ctx: MigrationContext) -> MapResult:
        store_id = self.resolve_scope(doc, ctx)
        if isinstance(store_id, Skip):
            return store_id

        return BookingRow(
            id=ctx.translate(doc.id),
            store_id=store_id,
            customer_id=as_ref(doc.first("customerId", "customer_id")),
            room_id=self.reference(doc, ctx, "roomId", "room_id"),
            room_name=doc.first("roomName", "room_name"),
            start_date=self.timestamp(doc, "checkIn", "check_in"),
            end_date=self.timestamp(doc, "checkOut", "check_out"),
            status=doc.first("status", default="booked"),
            total_price=as_number(doc.first("totalPrice", "total_price", "total")),
            notes=doc.first("notes"),
            created_at=self.created_at(doc),
        )


class RentalSessionMapper(EntityMapper):
    collection = "rental_sessions"
    table = "rental_sessions"
    row_model = RentalSessionRow
    tier = Tier.TRANSACTIONAL

    def map(self, doc: SourceDocument, ctx: MigrationContext) -> MapResult:
        store_id = self.resolve_scope(doc, ctx)
        if isinstance(store_id, Skip):
            return store_id

        return RentalSessionRow(
            id=ctx.translate(doc.id),
            store_id=store_id,
            unit_id=self.reference(doc, ctx, "unitId", "unit_id"),
            customer_id=as_ref(doc.first("customerId", "customer_id")),
            start_time=self.timestamp(doc, "startTime", "start_time"),
            end_time=self.timestamp(doc, "endTime", "end_time"),
            status=doc.first("status", default="active"),
            agreed_total=as_number(doc.first("totalCost", "agreedTotal", "agreed_total")),
            created_at=self.created_at(doc),
        )


class MedicalRecordMapper(EntityMapper):
    collection = "medical_records"
    table = "medical_records"
    row_model = MedicalRecordRow
    tier = Tier.DETAIL

    def map(self, doc: SourceDocument, ctx: MigrationContext) -> MapResult:
        store_id = self.resolve_scope(doc, ctx)
        if isinstance(store_id, Skip):
            return store_id

        return MedicalRecordRow(
            id=ctx.translate(doc.id),
            store_id=store_id,
            pet_id=self.reference(doc, ctx, "petId", "pet_id"),
            date=self.timestamp(doc, "date"),
            diagnosis=doc.first("diagnosis"),
            treatment=doc.first("treatment"),
            notes=doc.first("notes"),
            doctor_name=doc.first("doctorName", "doctor_name"),
            next_visit=self.timestamp(doc, "nextVisit", "next_visit"),
            created_at=self.created_at(doc),
        )
