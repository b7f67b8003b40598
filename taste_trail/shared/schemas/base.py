import math
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire; both spellings accepted on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, total_pages=math.ceil(total / limit) if limit else 0)


def page_offset(page: int, limit: int) -> int:
    return (max(page, 1) - 1) * limit


def paginated(key: str, items: Any, page: int, limit: int, total: int, **extra) -> Dict[str, Any]:
    return {key: items, "pagination": Pagination.build(page, limit, total), **extra}
