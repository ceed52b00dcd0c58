"""Utility functions for askflow."""

from askflow.utils.identifiers import (
    generate_edge_id,
    generate_history_id,
    generate_query_id,
    generate_request_id,
    is_valid_query_id,
    utc_timestamp,
)

__all__ = [
    "generate_edge_id",
    "generate_history_id",
    "generate_query_id",
    "generate_request_id",
    "is_valid_query_id",
    "utc_timestamp",
]
