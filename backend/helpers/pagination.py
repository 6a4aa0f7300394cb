"""
Standardized pagination parameters for consistent API pagination.
"""

from typing import Annotated

from fastapi import Query

# Standard pagination for idea listings
PaginationSkip = Annotated[int, Query(ge=0, description="Number of records to skip")]
PaginationLimit = Annotated[
    int, Query(ge=1, le=100, description="Maximum number of records to return")
]

# Pagination for comments (many per idea); omitted means the whole thread
PaginationLimitComments = Annotated[
    int | None,
    Query(ge=1, le=500, description="Maximum number of comments to return"),
]
