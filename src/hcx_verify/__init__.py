"""Hypercomplex Verify - Structured container verification reports."""
from .logic import verify_bytes, verify_container

__all__ = ["verify_bytes", "verify_container"]
