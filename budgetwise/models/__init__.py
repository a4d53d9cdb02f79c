"""Pydantic models package.

Exports wire models for the currency endpoints.
"""

from .currency import ConversionOut, RatesOut, ErrorOut

__all__ = ["ConversionOut", "RatesOut", "ErrorOut"]
