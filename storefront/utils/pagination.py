from sqlalchemy import func
from sqlmodel import select

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def paginate(
    *,
    session,
    query,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    max_limit: int = MAX_PAGE_SIZE,
) -> dict:
    """
    Run one page of `query`.

    `page` below 1 means the first page; `limit` is clamped to
    1..`max_limit`. The count ignores the query's ordering.
    """
    page = max(page, 1)
    limit = min(max(limit, 1), max_limit)

    total = session.exec(
        select(func.count()).select_from(query.order_by(None).subquery())
    ).one()

    rows = []
    if total:
        rows = session.exec(query.offset((page - 1) * limit).limit(limit)).all()

    return {
        "total_items": total,
        "total_pages": -(-total // limit),
        "current_page": page,
        "limit": limit,
        "results": rows,
    }
