"""
Configuration for diagram generation.

Settings are read from ``txseq.config.yaml`` in the working directory (or a
file given with ``--config``); command line flags override them.
"""

from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from txseq.core.reconstructor import ReconstructionOptions
from txseq.formatting.plantuml import DiagramStyle
from txseq.utils.exceptions import ConfigError
from txseq.utils.logging import logger

DEFAULT_CONFIG_FILE = "txseq.config.yaml"


@dataclass
class DiagramConfig:
    """Effective settings for one generate run."""
    show_gas: bool = False
    show_params: bool = False
    network: Optional[str] = None
    output: Optional[str] = None
    style: DiagramStyle = field(default_factory=DiagramStyle)

    @property
    def reconstruction_options(self) -> ReconstructionOptions:
        return ReconstructionOptions(show_gas=self.show_gas, show_params=self.show_params)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DiagramConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        style_data = data.get("style") or {}
        style_known = {f.name for f in fields(DiagramStyle)}
        if not isinstance(style_data, dict) or set(style_data) - style_known:
            raise ConfigError(f"Invalid style section, expected keys: {', '.join(sorted(style_known))}")

        return cls(
            show_gas=bool(data.get("show_gas", False)),
            show_params=bool(data.get("show_params", False)),
            network=data.get("network"),
            output=data.get("output"),
            style=DiagramStyle(**style_data),
        )

    def merge_args(self, args: Any) -> "DiagramConfig":
        """Apply command line flags on top of file settings."""
        if getattr(args, 'gas', False):
            self.show_gas = True
        if getattr(args, 'params', False):
            self.show_params = True
        if getattr(args, 'network', None):
            self.network = args.network
        if getattr(args, 'output', None):
            self.output = args.output
        return self

    def save(self, path: Union[str, Path] = DEFAULT_CONFIG_FILE):
        """Write the reusable settings; the per-run output path is not saved."""
        data = self.to_dict()
        data.pop("output", None)
        with open(path, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
        logger.info(f"Configuration saved to {path}")


def load_config(path: Optional[Union[str, Path]] = None) -> DiagramConfig:
    """
    Load configuration from YAML.

    Args:
        path: Explicit config file. When omitted, ``txseq.config.yaml`` in the
              current directory is used if present, otherwise defaults.

    Returns:
        DiagramConfig

    Raises:
        ConfigError: If an explicit file is missing or any file is invalid
    """
    if path is None:
        config_path = Path.cwd() / DEFAULT_CONFIG_FILE
        if not config_path.exists():
            return DiagramConfig()
    else:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}", config_file=str(config_path))

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}", config_file=str(config_path))

    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a mapping", config_file=str(config_path))

    logger.debug(f"Loaded configuration from {config_path}")
    try:
        return DiagramConfig.from_dict(data)
    except ConfigError as e:
        e.details.setdefault("config_file", str(config_path))
        raise
