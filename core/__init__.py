"""
Core Form Engine Components.

Structure:
    models/: Pure data structures (no business logic)
    logic/: Pure functions over the models (conversion, visibility, URL safety)
"""

from . import models
from . import logic

__all__ = [
    'models',
    'logic',
]
