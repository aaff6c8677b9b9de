"""
Recipe Costing - per-serving costs and suggested prices for menu items.
"""

from .utils.constants import APP_VERSION

__version__ = APP_VERSION
