# product_manager/schemas/command_schema.py
from typing import Any, Dict

from pydantic import BaseModel, Field

from product_manager.services.controller import Command, CommandType


class CommandIn(BaseModel):
    type: CommandType
    payload: Dict[str, Any] = Field(default_factory=dict)

    def to_command(self) -> Command:
        return Command(type=self.type, payload=dict(self.payload))
