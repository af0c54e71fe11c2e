from sqlalchemy import Column, String, Float, Boolean, Text
from freightdesk.models.base import BaseModel

class VehicleType(BaseModel):
    __tablename__ = "vehicle_types"

    name = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    capacity = Column(String(120), nullable=True)
    price_per_km = Column(Float, nullable=False)
    direction_price = Column(Float, nullable=False, default=0.0)
    minimum_price = Column(Float, nullable=False, default=0.0)
    is_active = Column(Boolean, nullable=False, default=True)
