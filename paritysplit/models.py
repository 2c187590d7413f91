"""Pydantic models for split results and page partitions."""

from pydantic import BaseModel, Field


class ParityPartition(BaseModel):
    """0-indexed page indices grouped by 1-indexed page parity."""

    odd: list[int] = Field(default_factory=list)
    even: list[int] = Field(default_factory=list)


class SplitResult(BaseModel):
    """Basenames of the documents produced by one split."""

    oddFile: str | None = None
    evenFile: str | None = None
    pageCount: int = 0
