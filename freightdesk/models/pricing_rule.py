from sqlalchemy import Column, String, Float, Boolean, Integer
from freightdesk.models.base import BaseModel

class PricingRule(BaseModel):
    __tablename__ = "pricing_rules"

    zone = Column(Integer, nullable=False, index=True)
    name = Column(String(120), nullable=False)
    country = Column(String(80), nullable=False, index=True)
    min_km = Column(Float, nullable=False)
    max_km = Column(Float, nullable=False)
    base_price = Column(Float, nullable=False)
    price_per_km = Column(Float, nullable=False)
    toll_surcharge_pct = Column(Float, nullable=False, default=0.0)
    min_price = Column(Float, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
