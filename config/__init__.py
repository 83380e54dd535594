"""Configuration package for the Garanti BBVA transactions check."""

from .settings import Config, ApiSettings, AppSettings, load_config, log_config, mask

__all__ = ['Config', 'ApiSettings', 'AppSettings', 'load_config', 'log_config', 'mask']
