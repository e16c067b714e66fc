from sqlalchemy import Column, Integer, String, Float, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from core.database import Base

UNKNOWN_MUNICIPALITY = "Unknown"


class Beach(Base):
    __tablename__ = "beaches"

    id = Column(Integer, primary_key=True, index=True)
    place_id = Column(String(255), nullable=False, index=True)
    # 식별 정책이 계산한 키 (정책과 무관하게 해변당 하나만 존재)
    identity_key = Column(String(512), unique=True, nullable=False)
    name = Column(String(255), nullable=False, index=True)
    municipality = Column(String(255), nullable=False, default=UNKNOWN_MUNICIPALITY)
    source_url = Column(String(512), nullable=True, index=True)
    # 좌표는 별도 작업에서 채움
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow)

    conditions = relationship(
        "BeachCondition",
        back_populates="beach",
        cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Beach(place_id='{self.place_id}', name='{self.name}', municipality='{self.municipality}')>"
