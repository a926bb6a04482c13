"""Request rewriter options as authored in the document."""
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RewriterOptions(BaseModel):
    """A named, ordered list of request-mutation instructions.

    Each instruction is ``[scope, verb, *args]``, e.g.
    ``["header", "set", "Cache-Control", "max-age=60"]``.
    """
    model_config = ConfigDict(extra="forbid", coerce_numbers_to_str=True)

    instructions: List[List[str]] = Field(default_factory=list)
    name: str = Field(default="", exclude=True)

    @field_validator("instructions")
    @classmethod
    def _instruction_shape(cls, value: List[List[str]]) -> List[List[str]]:
        for i, instruction in enumerate(value):
            if len(instruction) < 2:
                raise ValueError(f"instruction {i} must have at least a scope and a verb")
        return value

    def clone(self) -> "RewriterOptions":
        return self.model_copy(deep=True)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()
