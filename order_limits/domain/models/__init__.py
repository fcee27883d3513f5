"""
Domain models for business entities.

These models represent core business concepts and are independent
of persistence and infrastructure concerns.
"""

from .cart import CartItem, ValidationResult, Violation

__all__ = ["CartItem", "Violation", "ValidationResult"]
