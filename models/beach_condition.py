from sqlalchemy import Column, Integer, String, Float, DateTime, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from core.database import Base

DEFAULT_FLAG_STATUS = "green"
DEFAULT_SOURCE = "apify"


class BeachCondition(Base):
    __tablename__ = "beach_conditions"

    id = Column(Integer, primary_key=True, index=True)
    beach_id = Column(Integer, ForeignKey("beaches.id", ondelete="CASCADE"), nullable=False, index=True)
    recorded_at = Column(DateTime, nullable=False, index=True)
    occupancy_percent = Column(Integer, nullable=True)
    occupancy_text = Column(String(100), nullable=True)
    flag_status = Column(String(20), nullable=False, default=DEFAULT_FLAG_STATUS)
    has_jellyfish = Column(Boolean, nullable=True)
    air_temperature = Column(Float, nullable=True)
    water_temperature = Column(Float, nullable=True)
    wind_speed = Column(Float, nullable=True)
    wave_height = Column(Float, nullable=True)
    source = Column(String(50), nullable=False, default=DEFAULT_SOURCE)
    created_at = Column(DateTime, default=datetime.utcnow)

    beach = relationship("Beach", back_populates="conditions")

    def __repr__(self):
        return f"<BeachCondition(beach_id={self.beach_id}, recorded_at='{self.recorded_at}', flag_status='{self.flag_status}')>"
