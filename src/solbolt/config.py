"""
Configuration for solbolt.

Compiler and symbolic-execution settings sent to the remote service, plus
the service location. Settings persist in ``solbolt.config.yaml`` in the
working directory; ``SOLBOLT_SERVICE_URL`` overrides the saved service URL.
"""

import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from solbolt.utils.exceptions import ConfigError
from solbolt.utils.logging import get_logger

logger = get_logger("config")

CONFIG_FILENAME = "solbolt.config.yaml"
SERVICE_URL_ENV = "SOLBOLT_SERVICE_URL"
DEFAULT_SERVICE_URL = "http://127.0.0.1:5000"

SYMEXEC_STRATEGIES = ("bfs", "dfs", "naive-random", "weighted-random")


def _from_known_fields(cls, data: Dict[str, Any], section: str):
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        logger.warning("Ignoring unknown %s settings: %s", section, ", ".join(sorted(unknown)))
    return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class OptimizerDetails:
    """solc optimizer step toggles, used only when details are enabled."""
    peephole: bool = True
    inliner: bool = True
    jumpdestRemover: bool = True
    orderLiterals: bool = False
    deduplicate: bool = False
    cse: bool = False
    constantOptimizer: bool = False
    yul: bool = False


@dataclass
class CompilerSettings:
    """Compilation options, serialized with the service's wire keys."""
    version: str = "v0.8.13+commit.abaa5c0e"
    evmVersion: str = "Default"
    optimize_runs: int = 200
    enable_optimizer: bool = True
    viaIR: bool = False
    details_enabled: bool = False
    details: OptimizerDetails = field(default_factory=OptimizerDetails)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompilerSettings":
        data = dict(data or {})
        details = data.pop("details", None) or {}
        settings = _from_known_fields(cls, data, "compiler")
        settings.details = _from_known_fields(OptimizerDetails, details, "optimizer details")
        settings.validate()
        return settings

    def validate(self) -> None:
        if not isinstance(self.optimize_runs, int) or self.optimize_runs < 0:
            raise ConfigError(f"optimize_runs must be a non-negative integer, got {self.optimize_runs!r}")


@dataclass
class SymexecSettings:
    """Symbolic-execution options, serialized with the service's wire keys."""
    max_depth: int = 128
    call_depth_limit: int = 10
    strategy: str = "bfs"
    loop_bound: int = 10
    transaction_count: int = 2
    enable_onchain: bool = False
    onchain_address: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SymexecSettings":
        settings = _from_known_fields(cls, dict(data or {}), "symexec")
        settings.validate()
        return settings

    def validate(self) -> None:
        if self.strategy not in SYMEXEC_STRATEGIES:
            raise ConfigError(
                f"Unknown symbolic-execution strategy {self.strategy!r}",
                valid=list(SYMEXEC_STRATEGIES),
            )
        for name in ("max_depth", "call_depth_limit", "loop_bound", "transaction_count"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 1:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")
        if self.enable_onchain and not self.onchain_address:
            raise ConfigError("enable_onchain requires onchain_address")


@dataclass
class ServiceConfig:
    """Location of the remote compiler/symbolic-execution service."""
    url: str = DEFAULT_SERVICE_URL
    timeout: int = 30

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ServiceConfig":
        return _from_known_fields(cls, dict(data or {}), "service")


@dataclass
class SolboltConfig:
    """All persisted settings."""
    compiler: CompilerSettings = field(default_factory=CompilerSettings)
    symexec: SymexecSettings = field(default_factory=SymexecSettings)
    service: ServiceConfig = field(default_factory=ServiceConfig)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "compiler": self.compiler.to_dict(),
            "symexec": self.symexec.to_dict(),
            "service": self.service.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SolboltConfig":
        data = data or {}
        return cls(
            compiler=CompilerSettings.from_dict(data.get("compiler") or {}),
            symexec=SymexecSettings.from_dict(data.get("symexec") or {}),
            service=ServiceConfig.from_dict(data.get("service") or {}),
        )

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "SolboltConfig":
        """
        Load settings from ``path`` (default: ./solbolt.config.yaml).

        A missing default file yields the defaults; a missing explicit file
        is an error. The service URL environment variable wins over the file.
        """
        config_path = Path(path) if path else Path.cwd() / CONFIG_FILENAME
        if config_path.exists():
            try:
                with open(config_path) as f:
                    data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigError(f"Cannot read configuration: {e}", config_file=str(config_path))
            if not isinstance(data, dict):
                raise ConfigError("Configuration must be a mapping", config_file=str(config_path))
            try:
                config = cls.from_dict(data)
            except TypeError as e:
                raise ConfigError(f"Invalid configuration: {e}", config_file=str(config_path))
            logger.debug("Loaded configuration from %s", config_path)
        elif path:
            raise ConfigError(f"Configuration file not found: {config_path}", config_file=str(config_path))
        else:
            config = cls()

        env_url = os.environ.get(SERVICE_URL_ENV)
        if env_url:
            config.service.url = env_url
        return config

    def save(self, path: Optional[Union[str, Path]] = None) -> Path:
        """Write settings to ``path`` (default: ./solbolt.config.yaml)."""
        config_path = Path(path) if path else Path.cwd() / CONFIG_FILENAME
        try:
            with open(config_path, "w") as f:
                yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
        except OSError as e:
            raise ConfigError(f"Cannot write configuration: {e}", config_file=str(config_path))
        logger.info("Configuration saved to %s", config_path)
        return config_path
