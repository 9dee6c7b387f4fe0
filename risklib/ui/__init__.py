"""
User Interface components
"""

from .display import Display

__all__ = ['Display']
