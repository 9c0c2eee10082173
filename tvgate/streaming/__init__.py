"""
TVGate Streaming Module

Resolves channel URL templates into request-ready stream addresses.
"""

from tvgate.streaming.url_resolver import (
    AddressResolver,
    format_starttime,
    format_timestamp,
    resolve_template,
)

__all__ = [
    "AddressResolver",
    "format_starttime",
    "format_timestamp",
    "resolve_template",
]
