"""
Configuration management for Sportfolio
"""

import yaml
import os
import re
from pathlib import Path
from typing import Dict, Any, Optional, Union
import logging

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"
ENV_FILES = (".env.local", ".env")


def load_env_files(directory: Optional[Path] = None) -> None:
    """
    Load .env.local and .env from a directory into os.environ.

    Variables already present in the environment win.
    """
    directory = directory or Path.cwd()
    for name in ENV_FILES:
        env_path = directory / name
        if env_path.exists():
            load_dotenv(env_path, override=False)
            logger.debug(f"Loaded environment from {env_path}")


def _expand_env_vars(obj: Union[Dict, Any]) -> Union[Dict, Any]:
    """
    Recursively expand environment variables in config values.
    Supports ${VAR_NAME} syntax.
    """
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        # Replace ${VAR_NAME} with environment variable values
        pattern = r'\$\{([^}]+)\}'
        def replace_var(match):
            var_name = match.group(1)
            return os.getenv(var_name, match.group(0))  # Return original if not found
        return re.sub(pattern, replace_var, obj)
    else:
        return obj


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file

    Args:
        config_path: Path to config file. If None, uses the packaged config.yaml

    Returns:
        Configuration dictionary
    """
    load_env_files()

    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    config_path = Path(config_path)

    if not config_path.exists():
        logger.warning(f"Config file not found: {config_path}. Using defaults.")
        return _expand_env_vars(get_default_config())

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}
        logger.info(f"Loaded configuration from {config_path}")
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load config from {config_path}: {e}")
        return _expand_env_vars(get_default_config())

    # Fill sections the file leaves out
    merged = get_default_config()
    for section, values in config.items():
        if isinstance(values, dict) and isinstance(merged.get(section), dict):
            merged[section].update(values)
        else:
            merged[section] = values

    return _expand_env_vars(merged)


def get_default_config() -> Dict[str, Any]:
    """
    Get default configuration values

    Returns:
        Default configuration dictionary
    """
    return {
        'database': {
            'url': '${SPORTFOLIO_DATABASE_URL}',
            'echo': False,
            'auto_init': False,
        },
        'enrichment': {
            'provider': 'gemini',
            'batch_size': 50,
            'batch_delay_ms': 1000,
            'months_back': 24,
            'prompt': 'delta',
            'dry_run': False,
        },
        'gemini': {
            'api_key': '${GOOGLE_API_KEY}',
            'model': 'gemini-2.0-flash-lite',
            'temperature': 0.2,
            'max_output_tokens': 1024,
        },
        'claude': {
            'api_key': '${ANTHROPIC_API_KEY}',
            'model': 'claude-3-5-haiku-latest',
            'max_tokens': 1024,
        },
        'smugmug': {
            'api_key': '${SMUGMUG_API_KEY}',
            'api_secret': '${SMUGMUG_API_SECRET}',
            'access_token': '${SMUGMUG_ACCESS_TOKEN}',
            'access_token_secret': '${SMUGMUG_ACCESS_TOKEN_SECRET}',
            'nickname': '${SMUGMUG_NICKNAME}',
            'request_delay_ms': 200,
        },
        'naming': {
            'min_drift_score': 10,
            'rate_limit_ms': 500,
            'photo_sample': 100,
        },
        'cache': {
            'redis_url': '${REDIS_URL}',
            'layout_ttl': 300,
        },
        'logging': {
            'level': 'INFO',
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            'color': True,
        },
    }


def save_config(config: Dict[str, Any], config_path: Path) -> bool:
    """
    Save configuration to YAML file

    Args:
        config: Configuration dictionary to save
        config_path: Path where to save the config

    Returns:
        True if successful, False otherwise
    """
    try:
        with open(config_path, 'w') as f:
            yaml.dump(config, f, default_flow_style=False, indent=2)
        logger.info(f"Saved configuration to {config_path}")
        return True
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to save config to {config_path}: {e}")
        return False


def get_config_value(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """
    Get a nested configuration value using dot notation

    Unexpanded ${VAR} placeholders count as unset and yield the default.

    Args:
        config: Configuration dictionary
        key_path: Dot-separated key path (e.g., 'enrichment.batch_size')
        default: Default value if key not found

    Returns:
        Configuration value or default
    """
    keys = key_path.split('.')
    value = config

    try:
        for key in keys:
            value = value[key]
    except (KeyError, TypeError):
        return default

    if isinstance(value, str) and re.fullmatch(r'\$\{[^}]+\}', value):
        return default
    return value


def update_config_value(config: Dict[str, Any], key_path: str, value: Any) -> None:
    """
    Update a nested configuration value using dot notation

    Args:
        config: Configuration dictionary to update
        key_path: Dot-separated key path (e.g., 'naming.min_drift_score')
        value: New value to set
    """
    keys = key_path.split('.')
    current = config

    # Navigate to the parent of the target key
    for key in keys[:-1]:
        if key not in current:
            current[key] = {}
        current = current[key]

    # Set the final value
    current[keys[-1]] = value
