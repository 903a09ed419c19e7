"""Form validation package."""

from homeledger.validation.validator import InputValidator, ensure_valid

__all__ = ["InputValidator", "ensure_valid"]
