"""
Input validation for request DTOs.
"""

from .validators import (
    SecurityValidator,
    DataValidator,
    BusinessValidator,
    safe_text_validator,
    secure_url_validator,
)

__all__ = [
    "SecurityValidator",
    "DataValidator",
    "BusinessValidator",
    "safe_text_validator",
    "secure_url_validator",
]
