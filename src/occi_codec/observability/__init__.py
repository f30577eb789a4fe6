"""Observability helpers for the codec."""

from .metrics import record_decode, record_decode_failure, record_render

__all__ = ["record_decode", "record_decode_failure", "record_render"]
