import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from dotenv import load_dotenv

from ..constants import CONFIG_ENV_VAR, DEFAULT_CONFIG_FILENAME
from ..file_manager import FileManager, TempPathFactory
from .codec import Codec
from .headers import DEFAULT_REGISTRY, HeaderRegistry
from .models import ConfigContext

# Load environment variables from .env file
load_dotenv()


def load_yaml(path: Path) -> Dict[str, Any]:
    if path.exists():
        with open(path, "r") as f:
            return yaml.safe_load(f) or {}
    return {}


def _merge_dicts(base: Dict, update: Dict):
    """Recursively merge update dict into base dict."""
    for k, v in update.items():
        if isinstance(v, dict) and k in base and isinstance(base[k], dict):
            _merge_dicts(base[k], v)
        else:
            base[k] = v


def find_config_path(config_path: Optional[str] = None) -> Optional[Path]:
    """Locate the config file.

    Search order: explicit path, $STREAMWAVE_CONFIG, ./streamwave.yaml,
    ~/.config/streamwave/config.yaml.
    """
    if config_path:
        return Path(config_path)

    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)

    cwd_config = Path(DEFAULT_CONFIG_FILENAME)
    home_config = Path.home() / ".config" / "streamwave" / "config.yaml"
    for candidate in (cwd_config, home_config):
        if candidate.exists():
            return candidate
    return None


def load_config(config_path: Optional[str] = None) -> ConfigContext:
    """Load configuration from file and env vars."""
    path = find_config_path(config_path)
    user_config = load_yaml(path) if path else {}

    merged = ConfigContext().model_dump()
    _merge_dicts(merged, user_config)
    return ConfigContext(**merged)


def build_registry(config: ConfigContext) -> HeaderRegistry:
    """Header registry with any configured overrides applied."""
    return DEFAULT_REGISTRY.with_overrides(config.headers)


def build_codec(config: ConfigContext) -> Codec:
    temp_dir = Path(config.codec.temp_dir) if config.codec.temp_dir else None
    files = FileManager(TempPathFactory(directory=temp_dir))
    return Codec(registry=build_registry(config), file_manager=files)
