"""Configuration models for soltrace runs."""

from soltrace.config.models import FUNCTION_ID_SEPARATOR, TraceOptions, split_function_id

__all__ = ["FUNCTION_ID_SEPARATOR", "TraceOptions", "split_function_id"]
