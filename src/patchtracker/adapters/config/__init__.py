"""
Configuration Adapters - Load configuration from various sources.
"""

from .yaml_file import YamlConfigProvider

__all__ = ["YamlConfigProvider"]
