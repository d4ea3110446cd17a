"""Wire contract for messages sent to a running monoterm instance.

Every message is a single JSON object on its own line, externally tagged by
the variant name::

    {"CreateWindow": {"cwd": "/tmp"}}
    {"Config": {"window_id": 1, "options": ["font.size=12"], "reset": false}}
    {"Takeover": {"window_id": 1, "msg": "image:/tmp/cat.png"}}
"""

from __future__ import annotations

from typing import Annotated, Any, ClassVar

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
)

from monoterm.ipc.errors import MalformedMessageError


class IpcConfig(BaseModel):
    """Configuration delta pushed to one window, or to all windows."""

    window_id: int | None = Field(
        default=None,
        description="Target window; None broadcasts to every window",
    )
    options: list[str] = Field(
        default_factory=list,
        description="Config overrides in 'key.path=value' form",
    )
    reset: bool = Field(
        default=False,
        description="Clear overrides previously applied over IPC",
    )

    model_config = ConfigDict(extra="forbid", strict=True)


class Takeover(BaseModel):
    """Request to take over an existing window with rendered content."""

    window_id: int = Field(description="Window whose surface is taken over")
    msg: str = Field(description="Takeover payload, e.g. 'image:/abs/path.png'")

    model_config = ConfigDict(extra="forbid", strict=True)


class _Envelope(BaseModel):
    # Wire names are validation and serialization aliases only; constructors
    # take the field names.
    tag: ClassVar[str]

    model_config = ConfigDict(extra="forbid", strict=True, populate_by_name=True)


class CreateWindow(_Envelope):
    """Open a new window; ``options`` are forwarded verbatim."""

    tag: ClassVar[str] = "CreateWindow"

    options: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("CreateWindow"),
        serialization_alias="CreateWindow",
    )


class ConfigUpdate(_Envelope):
    tag: ClassVar[str] = "Config"

    config: IpcConfig = Field(
        validation_alias=AliasChoices("Config"), serialization_alias="Config"
    )

    @property
    def window_id(self) -> int | None:
        return self.config.window_id


class TakeoverRequest(_Envelope):
    tag: ClassVar[str] = "Takeover"

    takeover: Takeover = Field(
        validation_alias=AliasChoices("Takeover"), serialization_alias="Takeover"
    )

    @property
    def window_id(self) -> int:
        return self.takeover.window_id


def _message_tag(value: Any) -> str | None:
    """Return the variant tag of a raw wire object or a message instance."""
    if isinstance(value, _Envelope):
        return value.tag
    if isinstance(value, dict) and len(value) == 1:
        (tag,) = value
        return tag if isinstance(tag, str) else None
    return None


SocketMessage = Annotated[
    Annotated[CreateWindow, Tag(CreateWindow.tag)]
    | Annotated[ConfigUpdate, Tag(ConfigUpdate.tag)]
    | Annotated[TakeoverRequest, Tag(TakeoverRequest.tag)],
    Discriminator(_message_tag),
]

_MESSAGE_ADAPTER: TypeAdapter[SocketMessage] = TypeAdapter(SocketMessage)

MESSAGE_TAGS = frozenset({CreateWindow.tag, ConfigUpdate.tag, TakeoverRequest.tag})


def encode_message(message: CreateWindow | ConfigUpdate | TakeoverRequest) -> bytes:
    """Serialise *message* as compact JSON, without the line terminator."""
    return message.model_dump_json(by_alias=True).encode("utf-8")


def decode_message(data: str | bytes) -> CreateWindow | ConfigUpdate | TakeoverRequest:
    """Parse one line received on the socket.

    Raises:
        MalformedMessageError: The line is not JSON, names no known variant,
            or the variant's fields do not match the contract.
    """
    try:
        return _MESSAGE_ADAPTER.validate_json(data)
    except ValueError as exc:
        raise MalformedMessageError(str(exc)) from exc


__all__ = [
    "MESSAGE_TAGS",
    "ConfigUpdate",
    "CreateWindow",
    "IpcConfig",
    "SocketMessage",
    "Takeover",
    "TakeoverRequest",
    "decode_message",
    "encode_message",
]
