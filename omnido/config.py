# OmniDo — configuration
# Override paths and defaults via config.yaml, OMNIDO_CONFIG or CLI args.

import os
import yaml
from pathlib import Path
from dataclasses import dataclass, fields
from typing import Optional

CONFIG_PATH = Path.home() / ".config" / "omnido" / "config.yaml"


@dataclass
class Config:
    """Runtime configuration for the entity store and CLI."""

    # Storage
    data_dir: str = "~/.local/share/omnido"

    # Logging
    log_level: str = "INFO"

    # First launch: install sample tasks/projects/habits/notes
    seed_defaults: bool = True

    # Where a new mind-map puts its root node
    mindmap_root_x: float = 400.0
    mindmap_root_y: float = 300.0

    # Size of the upcoming-deadlines list
    upcoming_limit: int = 10

    def resolve_paths(self):
        """Expand ~ in configured paths."""
        self.data_dir = str(Path(self.data_dir).expanduser())

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Config":
        """Load config from YAML file, falling back to defaults."""
        path = path or os.environ.get("OMNIDO_CONFIG")
        cfg_path = Path(path).expanduser() if path else CONFIG_PATH
        if cfg_path.exists():
            try:
                with open(cfg_path, "r") as f:
                    data = yaml.safe_load(f) or {}
                names = {f.name for f in fields(cls)}
                cfg = cls(**{k: v for k, v in data.items() if k in names})
            except (OSError, yaml.YAMLError, TypeError, AttributeError):
                cfg = cls()
        else:
            cfg = cls()
        cfg.resolve_paths()
        return cfg
