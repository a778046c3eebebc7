"""
Blueprint helpers.
"""

from flask import current_app, request


def paginate_query(query, default_limit=None, max_limit=None):
    """Apply limit/offset pagination to a SQLAlchemy query.

    Query params:
        limit:  max items (default PAGE_DEFAULT_LIMIT, clamped to 1..PAGE_MAX_LIMIT)
        offset: starting position (default 0)

    Returns:
        (items_list, total_count)
    """
    default_limit = default_limit or current_app.config.get("PAGE_DEFAULT_LIMIT", 200)
    max_limit = max_limit or current_app.config.get("PAGE_MAX_LIMIT", 1000)
    total = query.count()
    try:
        limit = max(1, min(int(request.args.get("limit", default_limit)), max_limit))
    except (ValueError, TypeError):
        limit = default_limit
    try:
        offset = max(int(request.args.get("offset", 0)), 0)
    except (ValueError, TypeError):
        offset = 0
    items = query.limit(limit).offset(offset).all()
    return items, total
