"""
UI module - Rich console interface for onboarding.

Provides:
- Progress lines
- Plan and instance display
- Error display
"""

from .console import ConsoleUI

__all__ = ["ConsoleUI"]
