"""Settings for dynacache, loaded from the environment."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from dynacache.cache.memory import DEFAULT_CLEANUP_INTERVAL, CacheOptions


class DynacacheSettings(BaseSettings):
    """AWS client and cache settings.

    Values are read from environment variables (case-insensitive) or a
    ``.env`` file, e.g. ``AWS_DEFAULT_REGION`` or ``CACHE_TTL``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # AWS
    aws_default_region: str = "us-east-1"
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    aws_url: str | None = None
    aws_retry_attempts: int = 3
    aws_connect_timeout: float = 5.0
    aws_read_timeout: float = 60.0
    aws_secret_id: str | None = None

    # Cache
    cache_enabled: bool = True
    cache_ttl: int | None = None
    cache_cleanup_interval: int = DEFAULT_CLEANUP_INTERVAL
    cache_enable_logging: bool = False

    @property
    def has_static_credentials(self) -> bool:
        return bool(self.aws_access_key_id and self.aws_secret_access_key)

    def cache_options(self, prefix: str = "") -> CacheOptions:
        """Build LocalCache options from these settings.

        Args:
            prefix: Key prefix for the instance

        Returns:
            CacheOptions instance
        """
        return CacheOptions(
            cleanup_interval=self.cache_cleanup_interval,
            enable_logging=self.cache_enable_logging,
            prefix=prefix,
        )

    def cache_config(self, **overrides):
        """Build a cache-aside CacheConfig from these settings.

        Args:
            **overrides: CacheConfig fields to override

        Returns:
            CacheConfig instance
        """
        from dynacache.cached.table import CacheConfig

        values = {"enabled": self.cache_enabled, "ttl": self.cache_ttl}
        values.update(overrides)
        return CacheConfig(**values)
