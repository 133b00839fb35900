from pydantic_settings import BaseSettings, SettingsConfigDict

VERSION = "0.1.0"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    DATABASE_URL: str = "sqlite:///./fleetwatch.db"
    MAP_CONFIG: str = "config/map.yaml"
    LOG_LEVEL: str = "INFO"
    # Live boat-state polling (seconds, wall-clock fixed interval)
    POLL_INTERVAL_SECONDS: float = 5.0
    # Display clock tick (seconds) - cosmetic only
    CLOCK_INTERVAL_SECONDS: float = 1.0
    # Drop poll results that complete after a newer poll was already applied.
    # False restores plain last-writer-wins by completion order.
    POLL_DISCARD_STALE: bool = True
    # Re-issue the distress notification on every snapshot while distressed
    # instead of once on the false -> true edge.
    DISTRESS_RENOTIFY_EVERY_UPDATE: bool = False
    # Highlight circle drawn around each distressed boat (meters)
    DISTRESS_RADIUS_METERS: float = 1000.0
    # Notifications kept in memory for the HTTP alert board
    ALERT_HISTORY_SIZE: int = 50
    # Calendar-day bucketing for track filtering: "local", "UTC" or an IANA zone
    TRACK_DAY_TIMEZONE: str = "local"
    # Open-Meteo forecast API (free, no key needed)
    WEATHER_API_BASE_URL: str = "https://api.open-meteo.com"
    WEATHER_TIMEOUT: float = 10.0
    # Viewer position for the weather card (unset = geolocation unavailable)
    VIEWER_LATITUDE: float | None = None
    VIEWER_LONGITUDE: float | None = None
    # CORS origins (comma-separated string for env var support)
    CORS_ORIGINS: str = "http://localhost:5173"
    # Connection pool
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20


settings = Settings()
