"""Shared base class for every wire-facing model.

Python attributes are snake_case; the JSON wire format is camelCase.  Both
spellings are accepted on input, and ``to_wire()`` always emits aliases.
"""

import uuid
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def new_id() -> str:
    """Fresh opaque id for a client-side entity (section, question, ...)."""
    return uuid.uuid4().hex


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """JSON-compatible dict using the camelCase wire names."""
        return self.model_dump(mode="json", by_alias=True)
