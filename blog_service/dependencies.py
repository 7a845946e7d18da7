from fastapi import Query

from blog_service.config import settings


class PaginationParams:
    """
    Reusable FastAPI dependency that parses and validates pagination query
    parameters.

    Usage in a router::

        @router.get("/posts")
        async def list_posts(pagination: PaginationParams = Depends()):
            ...

    Attributes
    ----------
    page:
        1-based page number (minimum 1).
    page_size:
        Number of posts per page, taken from ``results_per_page`` and
        clamped to ``settings.MAX_PAGE_SIZE``.
    """

    def __init__(
        self,
        page: int = Query(
            1,
            ge=1,
            description="Page number (1-based).",
        ),
        results_per_page: int = Query(
            settings.DEFAULT_PAGE_SIZE,
            ge=1,
            description="Number of posts returned per page.",
        ),
    ) -> None:
        self.page = page
        self.page_size = min(results_per_page, settings.MAX_PAGE_SIZE)
