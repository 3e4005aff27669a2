"""CLI context management for settings and shared services."""

from dataclasses import dataclass, field

from sqlpowerhouse.config import Settings
from sqlpowerhouse.service import Services


def build_settings(database_url: str | None = None, echo: bool = False) -> Settings:
    """Resolve settings from CLI overrides and the environment.

    Priority:
    1. Explicit CLI options
    2. SQLPOWERHOUSE_* environment variables / .env
    3. Defaults
    """
    overrides: dict[str, object] = {}
    if database_url:
        overrides["database_url"] = database_url
    if echo:
        overrides["echo_sql"] = True
    return Settings(**overrides)  # type: ignore[arg-type]


@dataclass
class CLIContext:
    """Shared context for CLI commands.

    Manages the service container lifecycle and output preferences.
    """

    settings: Settings
    json_output: bool
    _services: Services | None = field(default=None, init=False, repr=False)

    def get_services(self) -> Services:
        """Get or create the service container (lazy initialization)."""
        if self._services is None:
            self._services = Services(self.settings)
        return self._services

    def close(self) -> None:
        """Dispose of any connection pools that were opened."""
        if self._services is not None:
            self._services.close()
            self._services = None
