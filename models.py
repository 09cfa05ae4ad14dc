from sqlalchemy import Column, Integer, String, DateTime, Float, Boolean, Text, ForeignKey
from sqlalchemy.orm import declarative_base
from datetime import datetime

Base = declarative_base()

class CityRecord(Base):
    __tablename__ = "cities"

    id = Column(String, primary_key=True, index=True)
    name = Column(String, nullable=True)
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)
    infrastructure = Column(Text, nullable=True)  # comma separated: airport,train_station,bus_station,ferry_pier
    created_at = Column(DateTime, default=datetime.utcnow)

class TransportRouteRecord(Base):
    __tablename__ = "transport_routes"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    from_city_id = Column(String, ForeignKey("cities.id"), nullable=False, index=True)
    to_city_id = Column(String, ForeignKey("cities.id"), nullable=False, index=True)
    weight = Column(Float, nullable=False, default=0.0)
    transport_type = Column(String, nullable=False, default="unknown")  # airplane, train, bus, ferry, ..., synthetic
    duration_minutes = Column(Integer, nullable=True)
    suggested_mode = Column(String, nullable=True)  # only set for synthetic links
    is_synthetic = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)

class NetworkRevision(Base):
    """Single-row counter bumped on every committed change to the route network"""
    __tablename__ = "network_revision"

    id = Column(Integer, primary_key=True)
    value = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

NETWORK_REVISION_ROW_ID = 1
