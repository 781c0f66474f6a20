"""Pydantic request/response schemas for rl_companion.

All responses are wrapped in ApiResponse at the router layer.
"""

from pydantic import BaseModel, Field

from src.rl_companion.domain.models import MAX_NAME_LENGTH, Companion


class AddCompanionRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)


class RenameCompanionRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)


class CompanionItem(BaseModel):
    id: str
    name: str
    created_at: str | None  # ISO8601 string

    @classmethod
    def from_domain(cls, companion: Companion) -> "CompanionItem":
        return cls(
            id=companion.id,
            name=companion.name,
            created_at=companion.created_at.isoformat() if companion.created_at else None,
        )


class CompanionListResponse(BaseModel):
    items: list[CompanionItem]
    total: int
