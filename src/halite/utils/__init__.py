"""Utility modules for Halite."""

from .sanitizer import (
    add_sensitive_keys,
    is_sensitive_key,
    mask_headers,
    mask_sensitive_data,
    mask_url,
)

__all__ = [
    'add_sensitive_keys',
    'is_sensitive_key',
    'mask_headers',
    'mask_sensitive_data',
    'mask_url',
]
