"""
Settings for sqlclient, read from the environment (prefix ``SQLCLIENT_``) or a ``.env`` file.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SQLCLIENT_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Driver connect timeout (seconds)
    CONNECT_TIMEOUT: int = 10
    # Connections older than this are closed instead of reused (seconds)
    CONN_MAX_LIFETIME_SEC: float = 300.0
    # Statement used for liveness probes
    PING_QUERY: str = "SELECT 1"


settings = Settings()
