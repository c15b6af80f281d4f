"""
Configuration package for the seminar hall booking service.
"""

from hallbook.config.settings import Settings, get_settings, settings

__all__ = ['Settings', 'get_settings', 'settings']
