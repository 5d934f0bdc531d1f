from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    local_mode: bool = False
    use_streamlit: bool = True
    timezone: str = "Europe/Berlin"
    database_path: str = "heating_energy.db"
    import_directory: str = "inbox"
    streamlit_port: int = 8501  # Default port for Streamlit
    background_task_interval: int = 3600  # 1 hour in seconds

    # Telemetry parsing
    strict_parsing: bool = False  # Raise on unparsable numeric fields instead of using 0

    # Plant constants
    solar_flow_rate_lpm: float = 5.5
    specific_heat_kj_per_kg_k: float = 4.18
    burner_capacity_kw: float = 10.0

    # Integration
    integration_mode: str = "fixed"  # "fixed" or "elapsed"
    nominal_interval_minutes: float = 1.0

    # Presentation
    decimation_factor: int = 5
    default_days: int = 2

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
