"""
Discovery module - gathers identity of the monitored instance.

Components:
- InstanceProber / get_info: hostname, port, version for registration
"""

from .instance import INFO_QUERY, InstanceProber, get_info

__all__ = ["INFO_QUERY", "InstanceProber", "get_info"]
