"""
Configuration management for the HDFS stress harness.

Uses pydantic-settings for type-safe environment variable handling.
Every field can be set through a ``STRESS_`` prefixed environment variable
or a local ``.env`` file. Credentials are never read from files in the repo.
"""

from enum import Enum
from functools import lru_cache
from urllib.parse import urlparse

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class NodeControlMode(str, Enum):
    """How cluster node processes are stopped and started."""

    DOCKER = "docker"
    COMMAND = "command"


class Settings(BaseSettings):
    """
    Harness settings loaded from environment variables.

    Time values carry their unit in the field name (``_ms`` or ``_s``).
    """

    model_config = SettingsConfigDict(
        env_prefix="STRESS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Solr cluster
    solr_nodes: str = Field(
        default="http://localhost:8983/solr",
        description="Comma-separated Solr node base URLs (first one is the admin node)",
    )
    solr_username: str | None = Field(default=None, description="Solr basic auth user")
    solr_password: SecretStr | None = Field(default=None, description="Solr basic auth password")
    solr_request_timeout_s: float = Field(
        default=30.0,
        description="Per-request timeout for Solr calls in seconds",
        gt=0,
        le=600,
    )
    solr_config_name: str | None = Field(
        default=None,
        description="Configset passed as collection.configName on CREATE",
    )

    # Node process control
    node_control: NodeControlMode = Field(
        default=NodeControlMode.DOCKER,
        description="Node controller implementation: docker or command",
    )
    node_names: str = Field(
        default="",
        description="Comma-separated node process names aligned with solr_nodes",
    )
    node_stop_command: str = Field(
        default="docker stop {node}",
        description="Stop command template for command mode",
    )
    node_start_command: str = Field(
        default="docker start {node}",
        description="Start command template for command mode",
    )
    node_command_timeout_s: float = Field(default=120.0, gt=0, le=3600)

    # HDFS
    webhdfs_url: str = Field(
        default="http://localhost:9870",
        description="NameNode HTTP address serving /webhdfs/v1",
    )
    hdfs_user: str = Field(default="hdfs", description="user.name passed to WebHDFS")
    dfsadmin_command: str = Field(
        default="hdfs dfsadmin",
        description="Command prefix used for safe mode control",
    )
    hdfs_command_timeout_s: float = Field(default=60.0, gt=0, le=3600)

    # Scenario
    collection_name: str = Field(default="delete_data_dir")
    shard_count: int | None = Field(
        default=None,
        description="Base shard count; random 1-2 (or 7 when nightly) if unset",
        ge=1,
        le=64,
    )
    nightly: bool = Field(default=False, description="Use the larger nightly base shard count")
    cycles: int | None = Field(
        default=None,
        description="Create/index/delete cycles; random 1-2 if unset",
        ge=1,
        le=100,
    )
    max_docs_per_node: int = Field(default=1000, ge=1, le=100_000)
    chaos_probability: float = Field(
        default=0.5,
        description="Probability that a scenario ends with a chaos cycle",
        ge=0.0,
        le=1.0,
    )
    chaos_max_delay_ms: int = Field(
        default=10_000,
        description="Exclusive upper bound of the deferred safe mode exit delay",
        ge=1,
        le=600_000,
    )
    chaos_restore_safe_mode: bool = Field(
        default=True,
        description="Leave safe mode after a chaos cycle whose deferred exit never fired",
    )
    delete_after_chaos: bool = Field(
        default=True,
        description="Delete the chaos collection once it has recovered",
    )
    auto_soft_commit_probability: float = Field(default=0.5, ge=0.0, le=1.0)
    auto_soft_commit_max_time_ms: int = Field(default=1000, ge=1, le=600_000)
    seed: int | None = Field(default=None, description="Random seed for reproducible runs")

    # Convergence waits
    poll_interval_ms: int = Field(default=200, ge=1, le=60_000)
    leader_timeout_ms: int = Field(default=30_000, ge=1)
    delete_timeout_ms: int = Field(default=10_000, ge=1)
    recovery_timeout_s: float = Field(default=330.0, gt=0)

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_json: bool = Field(default=False, description="Emit JSON log lines")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper_v

    @field_validator("solr_nodes")
    @classmethod
    def validate_solr_nodes(cls, v: str) -> str:
        """Require at least one http(s) node URL."""
        urls = [u.strip() for u in v.split(",") if u.strip()]
        if not urls:
            raise ValueError("solr_nodes must list at least one URL")
        for url in urls:
            if urlparse(url).scheme not in ("http", "https"):
                raise ValueError(f"Invalid Solr node URL: {url}")
        return ",".join(u.rstrip("/") for u in urls)

    @property
    def solr_node_urls(self) -> list[str]:
        """Solr node base URLs in configured order."""
        return self.solr_nodes.split(",")

    @property
    def admin_url(self) -> str:
        """Node used for Collections API and cloud-level requests."""
        return self.solr_node_urls[0]

    @property
    def node_process_names(self) -> list[str]:
        """
        Process/container names for each Solr node.

        Falls back to the hostname of each node URL when ``node_names`` is empty.
        """
        names = [n.strip() for n in self.node_names.split(",") if n.strip()]
        if not names:
            return [urlparse(url).hostname or url for url in self.solr_node_urls]
        if len(names) != len(self.solr_node_urls):
            raise ValueError(
                f"node_names has {len(names)} entries but solr_nodes has "
                f"{len(self.solr_node_urls)}"
            )
        return names

    def get_redacted_config(self) -> dict[str, str | int | float | bool | None]:
        """
        Get configuration dict with sensitive values redacted.
        Safe for logging.
        """
        return {
            "solr_nodes": self.solr_nodes,
            "solr_auth": self.solr_username is not None,
            "webhdfs_url": self.webhdfs_url,
            "node_control": self.node_control.value,
            "collection_name": self.collection_name,
            "shard_count": self.shard_count,
            "nightly": self.nightly,
            "cycles": self.cycles,
            "chaos_probability": self.chaos_probability,
            "seed": self.seed,
        }


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure single instance throughout the run.
    """
    return Settings()
