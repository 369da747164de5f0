from rollcall.core.config.io import load_config, read_json_file
from rollcall.core.config.models import RosterConfig

__all__ = ["RosterConfig", "load_config", "read_json_file"]
