import math
from typing import NamedTuple


class Page(NamedTuple):
    offset: int
    limit: int
    total_pages: int


def paginate(page: int, page_size: int, total_count: int) -> Page:
    """
    Translate a 1-based *page* and *page_size* into an SQL OFFSET/LIMIT pair
    and the number of pages needed for *total_count* rows.

    No bounds checking is done here: a page below 1 yields a negative offset.
    ``PaginationParams`` rejects such pages before they reach a query.
    """
    return Page(
        offset=(page - 1) * page_size,
        limit=page_size,
        total_pages=math.ceil(total_count / page_size) if total_count > 0 else 0,
    )
