"""Input/output: configuration loading."""

from asteroidview.io.config import generate_config_yaml, load_config, parse_config

__all__ = [
    "load_config",
    "parse_config",
    "generate_config_yaml",
]
