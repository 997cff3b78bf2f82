"""Helpers for walking Protean querysets beyond a single page."""

PAGE_SIZE = 100


def fetch_all(queryset, page_size=PAGE_SIZE):
    """Return every record matched by `queryset`, reading it page by page.

    Protean querysets are capped at a default page size, so listing a whole
    collection has to follow `offset`/`limit` until `total` is reached.
    """
    records = []
    offset = 0
    while True:
        result = queryset.offset(offset).limit(page_size).all()
        records.extend(result.items)
        offset += page_size
        if offset >= result.total or not result.items:
            return records
