"""Base schema types shared across doclayer components."""

import math

from pydantic import BaseModel, Field


class PageDescriptor(BaseModel):
    """Canonical sort + pagination for a search.

    Attributes:
        sort: Field -> direction (1 ascending, -1 descending), in priority order.
        skip: Number of documents to skip.
        limit: Page size; 0 means unbounded.
    """

    sort: dict[str, int] = Field(default_factory=dict)
    skip: int = Field(default=0, ge=0)
    limit: int = Field(default=0, ge=0)

    def pages(self, count: int) -> int:
        """Number of pages needed for *count* documents (0 when unbounded)."""
        return math.ceil(count / self.limit) if self.limit > 0 else 0

    def find_options(self) -> dict:
        """Keyword arguments for the driver's ``find``."""
        options: dict = {"skip": self.skip, "limit": self.limit}
        if self.sort:
            options["sort"] = list(self.sort.items())
        return options
