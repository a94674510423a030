import json
import os
from typing import Any


DEFAULT_CONFIG: dict[str, Any] = {
    "webhook": "",
    "footer_label": "Purge Checker",
    "footer_icon_url": "https://jogajunto.co/apple-touch-icon.png",
    "max_attempts": 3,
    "initial_wait": 1.0,
    "max_wait": 60.0,
    "timeout": 15,
    "propagation_delay": 5,
}

# Environment variables take precedence over the config file.
ENV_OVERRIDES: dict[str, tuple[str, type]] = {
    "DISCORD_WEBHOOK_URL": ("webhook", str),
    "DISCORD_EMBED_FOOTER_LABEL": ("footer_label", str),
    "DISCORD_EMBED_FOOTER_ICON_URL": ("footer_icon_url", str),
    "DISCORD_MAX_ATTEMPTS": ("max_attempts", int),
    "PURGE_PROPAGATION_DELAY": ("propagation_delay", float),
}


def load_config(path: str = "config.json") -> dict[str, Any]:
    """Load the project configuration from a JSON file and the environment.

    Behavior:
        - If the config file does not exist, it is created with defaults so
          the user knows where to put the webhook URL.
        - Missing keys fall back to :data:`DEFAULT_CONFIG`.
        - Non-empty environment variables listed in :data:`ENV_OVERRIDES`
          replace the file values.

    Notes:
        An empty webhook is not an error here. Delivery fails with
        ``ConfigurationError`` when a message is actually sent.

    Args:
        path: Path to the JSON config file.

    Returns:
        Parsed configuration dictionary.

    Raises:
        json.JSONDecodeError: If the file exists but contains invalid JSON.
        ValueError: If the file is not a JSON object, or a numeric
            environment override cannot be parsed.
        OSError: If the file cannot be read/written.
    """
    if not os.path.isfile(path):
        save_config(DEFAULT_CONFIG, path)

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    config: dict[str, Any] = {**DEFAULT_CONFIG, **data}

    for env_name, (key, cast) in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            config[key] = cast(value)

    return config


def save_config(config: dict[str, Any], path: str = "config.json") -> None:
    """Persist the given configuration to disk as pretty-printed JSON.

    Args:
        config: Configuration dictionary to write.
        path: Destination path for the JSON config file.

    Raises:
        OSError: If the file cannot be written.
        TypeError: If `config` contains non-JSON-serializable values.
    """
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=4)
