"""Error handling for jitterbackoff.

- ViolationCode: Machine-readable codes for rejected settings
- ConfigViolation: Structured record of one rejected setting
- ConfigurationError: Aggregated error raised by strict construction
"""

from .errors import ConfigurationError, ConfigViolation, ViolationCode

__all__ = ["ConfigurationError", "ConfigViolation", "ViolationCode"]
