from sqlalchemy import Column, String
from freightdesk.models.base import BaseModel

class Audit(BaseModel):
    __tablename__ = "audits"

    actor = Column(String(120), nullable=True)
    endpoint = Column(String(255), nullable=False)
    payload_hash = Column(String(128), nullable=False)
