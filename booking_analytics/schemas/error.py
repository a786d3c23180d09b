from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    error: str
    message: str | None = None
    required: list[str] | None = None
    allowed: list[str] | None = None
    received: Any = None

    def to_content(self) -> dict[str, Any]:
        # `received` may legitimately be an empty mapping, so only drop unset fields.
        return self.model_dump(exclude_unset=True)
