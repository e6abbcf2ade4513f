"""
Input validation for PostHarvest.
"""

from .validation import InputValidator, URLValidationRules, validate_post_url, validate_proxy_url

__all__ = [
    "InputValidator",
    "URLValidationRules",
    "validate_post_url",
    "validate_proxy_url",
]
