import os

from sfetch.exceptions import ConfigurationException

_TRUTHY = {"1", "true", "yes", "on"}


class ConfigManager:
    def __init__(self):
        self.SFETCH_DEBUG_METADATA: bool = (
            os.environ.get("SFETCH_DEBUG_METADATA", "true").strip().lower() in _TRUTHY
        )
        self.SFETCH_CLIENT_TIMEOUT_SECS: float | None = self._parse_timeout(
            os.environ.get("SFETCH_CLIENT_TIMEOUT_SECS")
        )

    @staticmethod
    def _parse_timeout(raw: str | None) -> float | None:
        # Unset means the transport's own default applies.
        if raw is None or not raw.strip():
            return None
        try:
            value = float(raw)
        except ValueError as e:
            raise ConfigurationException(
                f"Invalid SFETCH_CLIENT_TIMEOUT_SECS: {raw!r}"
            ) from e
        if value <= 0:
            raise ConfigurationException(
                f"SFETCH_CLIENT_TIMEOUT_SECS must be positive, got {raw!r}"
            )
        return value
