"""
Configuration management for confsnap.

Supports:
- TOML config files
- Environment variables
- Command-line overrides
- Sensible defaults

Priority (highest to lowest):
1. Command-line arguments
2. Environment variables
3. Config file
4. Defaults
"""

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .snapshot.summary import SUMMARY_PROFILES

# Default config file locations (searched in order)
CONFIG_SEARCH_PATHS = [
    Path.cwd() / "confsnap.toml",
    Path.cwd() / "config" / "confsnap.toml",
    Path.home() / ".confsnap" / "config.toml",
    Path.home() / ".config" / "confsnap" / "config.toml",
]

STORAGE_BACKENDS = ("local", "s3")
REMOTE_PROVIDERS = ("cloudfront",)


@dataclass
class TargetConfig:
    """Which remote configuration instance to operate on."""
    id: str = ""


@dataclass
class RemoteConfig:
    """Remote configuration service settings."""
    provider: str = "cloudfront"
    region: str = "us-east-1"
    connect_timeout: float = 10.0
    read_timeout: float = 30.0
    max_attempts: int = 3


@dataclass
class StorageConfig:
    """Where snapshots, indexes and history documents live."""
    backend: str = "local"
    path: str = "./config/cloudfront-backups"
    bucket: str = ""
    prefix: str = "confsnap/"
    region: Optional[str] = None
    endpoint_url: Optional[str] = None


@dataclass
class RetentionConfig:
    """Retention policy."""
    max_age_days: float = 30.0
    history_cap: int = 50


@dataclass
class SummaryConfig:
    """Which summary fields to extract from payloads."""
    profile: str = "cloudfront"


@dataclass
class OutputConfig:
    """Output configuration."""
    verbose: bool = False
    quiet: bool = False


@dataclass
class Config:
    """Main configuration container."""
    target: TargetConfig = field(default_factory=TargetConfig)
    remote: RemoteConfig = field(default_factory=RemoteConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    retention: RetentionConfig = field(default_factory=RetentionConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    # Source tracking
    _config_file: Optional[Path] = None

    @classmethod
    def load(
        cls,
        config_path: Optional[str] = None,
        environ: Optional[Dict[str, str]] = None,
    ) -> "Config":
        """
        Load configuration from file and environment.

        Args:
            config_path: Explicit path to config file. If None, searches default locations.
            environ: Environment mapping (default: os.environ)

        Returns:
            Config instance with loaded values
        """
        config = cls()

        # Find config file
        if config_path:
            path = Path(config_path)
            if not path.exists():
                raise FileNotFoundError(f"Config file not found: {config_path}")
        else:
            path = cls._find_config_file()

        if path:
            config = cls._load_from_file(path)
            config._config_file = path

        config.apply_env(os.environ if environ is None else environ)
        return config

    @classmethod
    def _find_config_file(cls) -> Optional[Path]:
        """Find config file in default locations."""
        for path in CONFIG_SEARCH_PATHS:
            if path.exists():
                return path
        return None

    @classmethod
    def _load_from_file(cls, path: Path) -> "Config":
        """Load config from TOML file."""
        with open(path, "rb") as f:
            data = tomllib.load(f)

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: Dict[str, Any]) -> "Config":
        """Create Config from dictionary."""
        config = cls()

        # Target
        if "target" in data:
            config.target = TargetConfig(id=str(data["target"].get("id", config.target.id)))

        # Remote
        if "remote" in data:
            remote = data["remote"]
            config.remote = RemoteConfig(
                provider=remote.get("provider", config.remote.provider),
                region=remote.get("region", config.remote.region),
                connect_timeout=float(remote.get("connect_timeout", config.remote.connect_timeout)),
                read_timeout=float(remote.get("read_timeout", config.remote.read_timeout)),
                max_attempts=int(remote.get("max_attempts", config.remote.max_attempts)),
            )

        # Storage
        if "storage" in data:
            storage = data["storage"]
            config.storage = StorageConfig(
                backend=storage.get("backend", config.storage.backend),
                path=storage.get("path", config.storage.path),
                bucket=storage.get("bucket", config.storage.bucket),
                prefix=storage.get("prefix", config.storage.prefix),
                region=storage.get("region") or None,
                endpoint_url=storage.get("endpoint_url") or None,
            )

        # Retention
        if "retention" in data:
            retention = data["retention"]
            config.retention = RetentionConfig(
                max_age_days=float(retention.get("max_age_days", config.retention.max_age_days)),
                history_cap=int(retention.get("history_cap", config.retention.history_cap)),
            )

        # Summary
        if "summary" in data:
            config.summary = SummaryConfig(
                profile=data["summary"].get("profile", config.summary.profile),
            )

        # Output
        if "output" in data:
            out = data["output"]
            config.output = OutputConfig(
                verbose=out.get("verbose", config.output.verbose),
                quiet=out.get("quiet", config.output.quiet),
            )

        return config

    def apply_env(self, environ: Dict[str, str]) -> "Config":
        """Override config values from environment variables."""
        if environ.get("CLOUDFRONT_DISTRIBUTION_ID"):
            self.target.id = environ["CLOUDFRONT_DISTRIBUTION_ID"]
        if environ.get("CONFSNAP_BACKUP_DIR"):
            self.storage.backend = "local"
            self.storage.path = environ["CONFSNAP_BACKUP_DIR"]
        if environ.get("CONFSNAP_S3_BUCKET"):
            self.storage.backend = "s3"
            self.storage.bucket = environ["CONFSNAP_S3_BUCKET"]
        if environ.get("AWS_REGION") and self.storage.region is None:
            self.storage.region = environ["AWS_REGION"]
        return self

    def override_from_args(self, args) -> "Config":
        """
        Override config values from argparse namespace.

        Args with value None are ignored (keeping config file values).
        """
        if getattr(args, "target", None):
            self.target.id = args.target
        if getattr(args, "backup_dir", None):
            self.storage.backend = "local"
            self.storage.path = args.backup_dir
        if getattr(args, "profile", None):
            self.summary.profile = args.profile
        if getattr(args, "verbose", None):
            self.output.verbose = True
        if getattr(args, "quiet", None):
            self.output.quiet = True
            self.output.verbose = False

        return self

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if not self.target.id:
            errors.append("Target id is required. Set CLOUDFRONT_DISTRIBUTION_ID or [target] id")
        if self.remote.provider not in REMOTE_PROVIDERS:
            errors.append(f"Unknown remote provider: {self.remote.provider}")
        if self.storage.backend not in STORAGE_BACKENDS:
            errors.append(f"Unknown storage backend: {self.storage.backend}")
        if self.summary.profile not in SUMMARY_PROFILES:
            errors.append(f"Unknown summary profile: {self.summary.profile}")
        if self.storage.backend == "s3" and not self.storage.bucket:
            errors.append("S3 storage requires a bucket")
        if self.retention.max_age_days < 0:
            errors.append("Retention max_age_days must not be negative")
        if self.retention.history_cap < 1:
            errors.append("Retention history_cap must be at least 1")

        return errors

    def summary_text(self, include_config_path: bool = True) -> str:
        """Generate human-readable config summary."""
        lines = []

        if include_config_path:
            if self._config_file:
                lines.append(f"Config: {self._config_file}")
            else:
                lines.append("Config: (defaults)")

        lines.append(f"Target: {self.target.id or '(not set)'} via {self.remote.provider}")
        if self.storage.backend == "s3":
            lines.append(f"Storage: s3://{self.storage.bucket}/{self.storage.prefix}")
        else:
            lines.append(f"Storage: {self.storage.path}")
        lines.append(
            f"Retention: {self.retention.max_age_days:g} days, "
            f"history cap {self.retention.history_cap}"
        )

        return "\n".join(lines)
