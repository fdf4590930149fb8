"""Configuration management for Rollcast.

Reads configuration from ~/.config/rollcast.toml and creates default config if needed.
"""

from pathlib import Path
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import tomllib
import tomli_w

DEFAULT_BUDGET_LIMIT = Decimal("2000")
DEFAULT_CATCH_UP_LIMIT = 12


@dataclass
class Config:
    """Application configuration."""

    base_dir: Path
    db_data_dir: Path
    db_filename: str
    log_level: str
    log_dir: Path
    budget_limit: Decimal = DEFAULT_BUDGET_LIMIT
    catch_up_limit: int = DEFAULT_CATCH_UP_LIMIT

    @property
    def db_path(self) -> Path:
        """Get the full database path (data_dir/filename)."""
        return self.db_data_dir / self.db_filename

    @classmethod
    def default(cls) -> "Config":
        """Create a Config with default values."""
        home = Path.home()
        base_dir = home / "data" / "rollcast"
        return cls(
            base_dir=base_dir,
            db_data_dir=base_dir / "db",
            db_filename="rollcast.db",
            log_level="INFO",
            log_dir=base_dir / "logs",
            budget_limit=DEFAULT_BUDGET_LIMIT,
            catch_up_limit=DEFAULT_CATCH_UP_LIMIT,
        )


def get_config_path() -> Path:
    """Get the path to the config file."""
    return Path.home() / ".config" / "rollcast.toml"


def get_migrations_dir() -> Path:
    """Get the path to the migrations directory.

    This is always relative to the code location, not configurable.
    """
    return Path(__file__).parent / "db" / "migrations"


def load_config() -> Config:
    """Load configuration from file, creating default if it doesn't exist.

    Returns:
        Config object with loaded or default values.

    Raises:
        ValueError: If budget_limit is negative or catch_up_limit is below 1.
    """
    config_path = get_config_path()

    # If config doesn't exist, create it with defaults
    if not config_path.exists():
        config = Config.default()
        _write_config(config)
        return config

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    return _parse_config(data)


def _parse_config(data: dict) -> Config:
    """Build a Config from parsed TOML data, filling in defaults."""
    base_dir = Path(data.get("base_dir", Path.home() / "data" / "rollcast"))

    db_config = data.get("database", {})
    db_data_dir = Path(db_config.get("data_dir", base_dir / "db"))
    db_filename = db_config.get("filename", "rollcast.db")

    log_config = data.get("logging", {})
    log_level = log_config.get("level", "INFO")
    log_dir = Path(log_config.get("log_dir", base_dir / "logs"))

    # TOML floats are binary; go through str so 1999.99 stays 1999.99
    forecast_config = data.get("forecast", {})
    raw_budget = forecast_config.get("budget_limit", DEFAULT_BUDGET_LIMIT)
    try:
        budget_limit = Decimal(str(raw_budget))
    except InvalidOperation:
        raise ValueError(f"budget_limit must be a number, got {raw_budget!r}") from None
    if not budget_limit.is_finite() or budget_limit < 0:
        raise ValueError(
            f"budget_limit must be a non-negative number, got {raw_budget!r}"
        )

    rollover_config = data.get("rollover", {})
    catch_up_limit = int(
        rollover_config.get("catch_up_limit", DEFAULT_CATCH_UP_LIMIT)
    )
    if catch_up_limit < 1:
        raise ValueError(f"catch_up_limit must be at least 1, got {catch_up_limit}")

    return Config(
        base_dir=base_dir,
        db_data_dir=db_data_dir,
        db_filename=db_filename,
        log_level=log_level,
        log_dir=log_dir,
        budget_limit=budget_limit,
        catch_up_limit=catch_up_limit,
    )


def _write_config(config: Config) -> None:
    """Write config to the config file.

    Args:
        config: Config object to write.
    """
    config_path = get_config_path()

    # Ensure config directory exists
    config_path.parent.mkdir(parents=True, exist_ok=True)

    # Convert config to TOML structure
    data = {
        "base_dir": str(config.base_dir),
        "database": {
            "data_dir": str(config.db_data_dir),
            "filename": config.db_filename,
        },
        "logging": {
            "level": config.log_level,
            "log_dir": str(config.log_dir),
        },
        "forecast": {
            "budget_limit": str(config.budget_limit),
        },
        "rollover": {
            "catch_up_limit": config.catch_up_limit,
        },
    }

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)
