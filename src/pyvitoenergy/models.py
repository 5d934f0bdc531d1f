"""
Database models for the VitoEnergy application.
"""

from sqlalchemy import Boolean, Column, Date, DateTime, Float, Integer, String, func
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class HeatingData(Base):
    """One minute of raw plant telemetry, unique by timestamp."""

    __tablename__ = "heating_data"

    id = Column(Integer, primary_key=True)
    timestamp = Column(DateTime, unique=True, index=True, nullable=False)
    date = Column(Date, index=True, nullable=False)
    collector_temp = Column(Float, nullable=False, default=0.0)
    outside_temp = Column(Float, nullable=False, default=0.0)
    dhw_temp_top = Column(Float, nullable=False, default=0.0)
    dhw_temp_bottom = Column(Float, nullable=False, default=0.0)
    flow_temp = Column(Float, nullable=False, default=0.0)
    flow_temp_setpoint = Column(Float, nullable=False, default=0.0)
    burner_starts = Column(Integer, nullable=False, default=0)
    boiler_modulation = Column(Float, nullable=True)
    fan_control = Column(Float, nullable=False, default=0.0)
    collector_pump_on = Column(Boolean, nullable=False, default=False)
    boiler_pump_on = Column(Boolean, nullable=False, default=False)
    burner_state = Column(String, nullable=False, default="")
    solar_status = Column(String, nullable=False, default="")
    water_pressure = Column(Float, nullable=False, default=0.0)
    dhw_pump_on = Column(Boolean, nullable=False, default=False)
    fan_speed = Column(Integer, nullable=False, default=0)
    return_temp = Column(Float, nullable=False, default=0.0)
    boiler_pump_speed = Column(Integer, nullable=False, default=0)
    sensor_temp = Column(Float, nullable=False, default=0.0)

    def __repr__(self) -> str:
        return f"<HeatingData(timestamp={self.timestamp})>"


class DailyEnergy(Base):
    """Per-date energy and temperature summary, unique by date."""

    __tablename__ = "daily_energy"

    id = Column(Integer, primary_key=True)
    date = Column(Date, unique=True, index=True, nullable=False)
    solar_energy_kwh = Column(Float, nullable=False, default=0.0)
    gas_energy_kwh = Column(Float, nullable=False, default=0.0)
    house_heating_energy_kwh = Column(Float, nullable=False, default=0.0)
    total_energy_kwh = Column(Float, nullable=False, default=0.0)
    solar_active_minutes = Column(Integer, nullable=False, default=0)
    gas_active_minutes = Column(Integer, nullable=False, default=0)
    house_heating_active_minutes = Column(Integer, nullable=False, default=0)
    avg_collector_temp = Column(Float, nullable=False, default=0.0)
    max_collector_temp = Column(Float, nullable=False, default=0.0)
    avg_dhw_temp = Column(Float, nullable=False, default=0.0)
    max_dhw_temp = Column(Float, nullable=False, default=0.0)
    avg_outside_temp = Column(Float, nullable=False, default=0.0)
    min_outside_temp = Column(Float, nullable=False, default=0.0)
    max_outside_temp = Column(Float, nullable=False, default=0.0)
    avg_flow_temp = Column(Float, nullable=False, default=0.0)
    max_flow_temp = Column(Float, nullable=False, default=0.0)
    avg_return_temp = Column(Float, nullable=False, default=0.0)
    avg_water_pressure = Column(Float, nullable=False, default=0.0)
    avg_boiler_modulation = Column(Float, nullable=False, default=0.0)
    burner_starts = Column(Integer, nullable=False, default=0)
    data_points_count = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<DailyEnergy(date={self.date}, total_energy_kwh={self.total_energy_kwh})>"
