"""Lookup classification and batch ordering."""

from .outcome import Bogus, Insecure, NoData, ResolutionOutcome, Secure, SecurityLevel
from .verdict import EMPTY_MARKER, Verdict, classify, format_line
from .ordering import order_lines
from .lookup import Checker, parse_record_type

__all__ = [
    "EMPTY_MARKER",
    "Bogus",
    "Checker",
    "Insecure",
    "NoData",
    "ResolutionOutcome",
    "Secure",
    "SecurityLevel",
    "Verdict",
    "classify",
    "format_line",
    "order_lines",
    "parse_record_type",
]
