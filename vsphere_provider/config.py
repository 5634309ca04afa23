"""
Configuration for the vSphere provider.

Reads from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

# Bound applied to every single remote call (seconds)
DEFAULT_API_TIMEOUT = 300

# Socket timeout while establishing the vCenter session (seconds)
CONNECT_TIMEOUT = 30

# Prefix of the provisional id stored between AddPortGroup and the first read
HOST_PORT_GROUP_ID_PREFIX = "tf-HostPortGroup"


class Settings(BaseSettings):
    """Provider settings loaded from environment."""

    model_config = SettingsConfigDict(env_prefix="VSPHERE_")

    # vCenter / ESXi connection
    server: str = "vcenter.example.com"
    user: str = "administrator@vsphere.local"
    password: str = ""
    port: int = 443
    allow_unverified_ssl: bool = False

    # Per-call timeout in seconds
    api_timeout: int = DEFAULT_API_TIMEOUT

    # Logging
    log_level: str = "INFO"


settings = Settings()
