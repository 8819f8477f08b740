"""Trip consistency validation."""

from tripbook.validation.validator import TripValidator

__all__ = ["TripValidator"]
