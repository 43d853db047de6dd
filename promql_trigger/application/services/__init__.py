"""
Application Services

Registration conversion and persistence of registered queries.
"""

from .registration import convert_registration, random_webhook_path
from .state_saver import StateSaver

__all__ = ["StateSaver", "convert_registration", "random_webhook_path"]
