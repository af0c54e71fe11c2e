from sqlalchemy import Column, String, Float, Boolean, ForeignKey, Enum, JSON, Text, DateTime
from sqlalchemy.orm import relationship
from freightdesk.models.base import BaseModel
from freightdesk.core.enums import QuoteStatus, PricingSource

class Quote(BaseModel):
    __tablename__ = "quotes"

    origin = Column(Text, nullable=False)
    destination = Column(Text, nullable=False)
    origin_coords = Column(JSON, nullable=True)
    destination_coords = Column(JSON, nullable=True)
    distance = Column(Float, nullable=False)
    duration = Column(Float, nullable=True)

    vehicle_type_id = Column(ForeignKey("vehicle_types.id"), nullable=True)
    vehicle_type_name = Column(String(120), nullable=True)
    vehicle_type = relationship("VehicleType")

    pricing_rule_id = Column(ForeignKey("pricing_rules.id", ondelete="SET NULL"), nullable=True)
    zone_name = Column(String(120), nullable=True)
    pricing_source = Column(Enum(PricingSource), nullable=False)

    is_urgent = Column(Boolean, nullable=False, default=False)
    extras = Column(JSON, nullable=True)

    customer_name = Column(String(200), nullable=True)
    phone_number = Column(String(40), nullable=True)
    pickup_time = Column(DateTime(timezone=True), nullable=True)
    observations = Column(Text, nullable=True)

    base_price = Column(Float, nullable=False)
    distance_cost = Column(Float, nullable=False)
    toll_cost = Column(Float, nullable=False, default=0.0)
    urgency_surcharge = Column(Float, nullable=False, default=0.0)
    extras_cost = Column(Float, nullable=False, default=0.0)
    min_price = Column(Float, nullable=False, default=0.0)
    total_price = Column(Float, nullable=False)

    status = Column(Enum(QuoteStatus), default=QuoteStatus.PENDING, nullable=False)
