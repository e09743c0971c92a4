"""
Configuration package for the hostel complaints service.
"""

from hostel_complaints.config.settings import Settings, get_settings, settings

__all__ = ['Settings', 'get_settings', 'settings']
