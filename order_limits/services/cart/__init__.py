"""
Cart validation services.
"""

from .cart_validator import CartValidator

__all__ = ["CartValidator"]
