"""Configuration management for pagecreator.

Supports TOML configuration format with auto-discovery.
"""

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

CONFIG_FILENAME = "pagecreator.toml"


@dataclass
class PagesConfig:
    """Collection source files configuration."""

    source_dir: Path = field(default_factory=lambda: Path("src/pages"))


@dataclass
class DataConfig:
    """Data source configuration."""

    source_dir: Path = field(default_factory=lambda: Path("data"))


@dataclass
class OutputConfig:
    """Build output configuration."""

    dir: Path = field(default_factory=lambda: Path("public"))


@dataclass
class ServerConfig:
    """Development server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080


@dataclass
class WatchConfig:
    """Watch mode configuration."""

    enabled: bool = True
    debounce_ms: int = 1600


@dataclass
class LoggingConfig:
    """Logging configuration."""

    verbose: bool = False


@dataclass
class Config:
    """Application configuration."""

    pages: PagesConfig
    data: DataConfig
    output: OutputConfig
    server: ServerConfig
    watch: WatchConfig
    logging: LoggingConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Config":
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for pagecreator.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls._default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents."""
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> "Config":
        return cls(
            pages=PagesConfig(),
            data=DataConfig(),
            output=OutputConfig(),
            server=ServerConfig(),
            watch=WatchConfig(),
            logging=LoggingConfig(),
        )

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load configuration from a specific file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ValueError(f"Invalid TOML in {path}: {e}") from e

        config_dir = path.parent

        return cls(
            pages=PagesConfig(
                source_dir=cls._parse_dir(data, "pages", "source_dir", "src/pages", config_dir),
            ),
            data=DataConfig(
                source_dir=cls._parse_dir(data, "data", "source_dir", "data", config_dir),
            ),
            output=OutputConfig(
                dir=cls._parse_dir(data, "output", "dir", "public", config_dir),
            ),
            server=cls._parse_server(data.get("server")),
            watch=cls._parse_watch(data.get("watch")),
            logging=cls._parse_logging(data.get("logging")),
            config_path=path,
        )

    @classmethod
    def _section(cls, data: object, name: str) -> dict[str, object]:
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"{name} section must be a dictionary")
        return data

    @classmethod
    def _parse_dir(
        cls,
        data: dict[str, object],
        section_name: str,
        key: str,
        default: str,
        config_dir: Path,
    ) -> Path:
        """Parse a directory setting relative to the config file.

        Args:
            data: Whole configuration document
            section_name: Section holding the setting (e.g., "pages")
            key: Setting name (e.g., "source_dir")
            default: Default relative directory
            config_dir: Directory containing config file

        Returns:
            Directory path resolved against config_dir
        """
        section = cls._section(data.get(section_name), section_name)
        value = section.get(key, default)
        if not isinstance(value, str):
            raise ValueError(f"{section_name}.{key} must be a string")
        return config_dir / value

    @classmethod
    def _parse_server(cls, data: object) -> ServerConfig:
        section = cls._section(data, "server")

        host = section.get("host", "127.0.0.1")
        if not isinstance(host, str):
            raise ValueError("server.host must be a string")

        port = section.get("port", 8080)
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError("server.port must be an integer")

        return ServerConfig(host=host, port=port)

    @classmethod
    def _parse_watch(cls, data: object) -> WatchConfig:
        section = cls._section(data, "watch")

        enabled = section.get("enabled", True)
        if not isinstance(enabled, bool):
            raise ValueError("watch.enabled must be a boolean")

        debounce_ms = section.get("debounce_ms", 1600)
        if not isinstance(debounce_ms, int) or isinstance(debounce_ms, bool) or debounce_ms < 0:
            raise ValueError("watch.debounce_ms must be a non-negative integer")

        return WatchConfig(enabled=enabled, debounce_ms=debounce_ms)

    @classmethod
    def _parse_logging(cls, data: object) -> LoggingConfig:
        section = cls._section(data, "logging")

        verbose = section.get("verbose", False)
        if not isinstance(verbose, bool):
            raise ValueError("logging.verbose must be a boolean")

        return LoggingConfig(verbose=verbose)

    def with_overrides(
        self,
        *,
        pages_dir: Path | None = None,
        data_dir: Path | None = None,
        output_dir: Path | None = None,
        host: str | None = None,
        port: int | None = None,
        verbose: bool | None = None,
    ) -> "Config":
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Returns:
            New Config instance with overrides applied
        """
        pages = self.pages
        if pages_dir is not None:
            pages = replace(self.pages, source_dir=pages_dir)

        data = self.data
        if data_dir is not None:
            data = replace(self.data, source_dir=data_dir)

        output = self.output
        if output_dir is not None:
            output = replace(self.output, dir=output_dir)

        server = self.server
        if host is not None or port is not None:
            server = replace(
                self.server,
                host=host if host is not None else self.server.host,
                port=port if port is not None else self.server.port,
            )

        logging = self.logging
        if verbose is not None:
            logging = replace(self.logging, verbose=verbose)

        return replace(
            self,
            pages=pages,
            data=data,
            output=output,
            server=server,
            logging=logging,
        )
