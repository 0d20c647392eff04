"""Backend operations that can be benchmarked."""

from .dynamodb import DynamoDBRangeQuery, build_range_query
from .http import HttpOperation

__all__ = ["DynamoDBRangeQuery", "HttpOperation", "build_range_query"]
