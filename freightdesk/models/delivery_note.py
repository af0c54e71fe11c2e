from sqlalchemy import Column, String, Float, Boolean, ForeignKey, Enum, Integer, JSON, Text, DateTime
from sqlalchemy.orm import relationship
from freightdesk.models.base import BaseModel
from freightdesk.core.enums import NoteShape

class DeliveryNote(BaseModel):
    __tablename__ = "delivery_notes"

    note_number = Column(Integer, nullable=False, unique=True, index=True)
    quote_id = Column(ForeignKey("quotes.id"), nullable=False, unique=True)
    quote = relationship("Quote", backref="delivery_notes")

    shape = Column(Enum(NoteShape), nullable=False, default=NoteShape.SINGLE)
    client_name = Column(String(200), nullable=True)
    destination = Column(Text, nullable=True)
    vehicle_type = Column(String(120), nullable=True)
    distance = Column(Float, nullable=True)
    observations = Column(Text, nullable=True)

    # Ordered by visiting order; list of PickupOrigin dicts.
    pickup_origins = Column(JSON, nullable=False, default=list)

    photo = Column(Text, nullable=True)
    signature = Column(Text, nullable=True)
    signed_at = Column(DateTime(timezone=True), nullable=True)

    origin_signature = Column(Text, nullable=True)
    origin_signature_document = Column(String(40), nullable=True)
    origin_signed_at = Column(DateTime(timezone=True), nullable=True)
    destination_signature = Column(Text, nullable=True)
    destination_signature_document = Column(String(40), nullable=True)
    destination_signed_at = Column(DateTime(timezone=True), nullable=True)
    require_destination_signature = Column(Boolean, nullable=False, default=False)

    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
