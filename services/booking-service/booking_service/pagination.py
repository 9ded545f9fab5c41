from dataclasses import dataclass

from .errors import ValidationError


@dataclass(frozen=True)
class PageRequest:
    page: int
    size: int
    sort_by: str = "start"
    descending: bool = True

    @property
    def offset(self) -> int:
        return self.page * self.size


def make_page_request(from_: int | None, size: int | None) -> PageRequest | None:
    """
    Translate an (offset, limit) pair into a page.

    `from_` is rounded down to a whole page: from_=3, size=2 gives page 1,
    i.e. items 3-4, not 4-5.
    """
    if from_ is None or size is None:
        return None
    if size <= 0 or from_ < 0:
        raise ValidationError("size <= 0 || from < 0")
    return PageRequest(page=from_ // size, size=size)
