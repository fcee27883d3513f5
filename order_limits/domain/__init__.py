"""
Domain layer for the order limits app.

Plain dataclasses for carts, violations and validation results.
"""
