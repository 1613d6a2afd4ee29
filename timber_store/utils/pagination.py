from typing import NamedTuple


class Paging(NamedTuple):
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def normalize_paging(page: int, page_size: int, default_size: int = 20, max_page_size: int = 100) -> Paging:
    """Clamp request paging to page >= 1 and 1 <= page_size <= max_page_size."""
    p = page if page and page > 0 else 1
    ps = page_size if page_size and page_size > 0 else default_size
    return Paging(p, min(ps, max_page_size))
