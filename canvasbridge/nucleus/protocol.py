# canvasbridge/nucleus/protocol.py
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, Literal, Optional


CommandName = Literal[
    "create_shape",
    "create_shapes",
    "clear",
    "get_shapes",
    "undo",
    "redo",
    "zoom_to_fit",
    "delete_selected",
]


class CommandEnvelope(BaseModel):
    """
    The message sent from the bridge to the renderer.

    `id` is assigned by the bridge and is echoed back in the reply. `command`
    is deliberately a plain string: the renderer is the authority on which
    commands exist, so names outside of `CommandName` are still forwarded.
    """

    id: int = Field(..., description="Bridge-assigned request identifier.")
    command: str = Field(..., description="The name of the command to execute.")
    params: Dict[str, Any] = Field(default_factory=dict, description="Command-specific parameters.")


class ReplyEnvelope(BaseModel):
    """
    The message sent from the renderer back to the bridge.

    A renderer signals an application-level failure either with an `error`
    field or with an `{"error": ...}` result; both are delivered to the
    caller as a normal result.
    """

    id: int = Field(..., description="The id of the command envelope being answered.")
    result: Any = Field(None, description="The command's result payload.")
    error: Optional[str] = Field(None, description="An application-level error message.")

    @property
    def payload(self) -> Any:
        if self.error is not None:
            return {"error": self.error}
        return self.result


class CommandRequest(BaseModel):
    """The body of an inbound HTTP command call."""

    command: str
    params: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("params", mode="before")
    @classmethod
    def _null_params_are_empty(cls, value: Any) -> Any:
        return {} if value is None else value
