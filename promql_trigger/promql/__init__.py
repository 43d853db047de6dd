"""
PromQL Module

Identifier extraction, query sanitizing and the typed query result model.
"""

from .extractor import extract_source_ids, parse_query
from .result import Number, QueryResult, Sample, Series, decode_query_result
from .sanitizer import Sanitizer, substitute_identifiers

__all__ = [
    "Number",
    "QueryResult",
    "Sample",
    "Sanitizer",
    "Series",
    "decode_query_result",
    "extract_source_ids",
    "parse_query",
    "substitute_identifiers",
]
