"""
url_shortener package initializer.
"""

from . import analytics
from . import manager
from . import shortener
from . import storage

__all__ = ["analytics", "manager", "shortener", "storage"]
