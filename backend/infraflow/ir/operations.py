"""
Operation IR - the closed set of graph mutations an LLM may request.

Every payload coming back from the model is parsed into one of these six
variants, discriminated by ``type``. Field names use the camelCase aliases
of the wire format; Python code reads the snake_case attributes.
"""

from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from .spec import FlowType, TierType


# Required identifiers: whitespace is stripped before the emptiness check
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# ---- Variant payloads ----

class ReplaceData(_WireModel):
    new_type: NonEmptyStr = Field(alias="newType")
    label: Optional[str] = None
    description: Optional[str] = None
    preserve_connections: bool = Field(default=True, alias="preserveConnections")


class AddData(_WireModel):
    label: Optional[str] = None
    description: Optional[str] = None
    tier: Optional[TierType] = None
    after_node: Optional[str] = Field(default=None, alias="afterNode")
    before_node: Optional[str] = Field(default=None, alias="beforeNode")
    between_nodes: Optional[Tuple[str, str]] = Field(default=None, alias="betweenNodes")


class ModifyData(_WireModel):
    label: Optional[str] = None
    description: Optional[str] = None
    tier: Optional[TierType] = None


class ConnectData(_WireModel):
    source: NonEmptyStr
    target: NonEmptyStr
    flow_type: Optional[FlowType] = Field(default=None, alias="flowType")
    label: Optional[str] = None


class DisconnectData(_WireModel):
    source: NonEmptyStr
    target: NonEmptyStr


# ---- Operations ----

class ReplaceOperation(_WireModel):
    type: Literal["replace"]
    target: NonEmptyStr
    data: ReplaceData


class AddOperation(_WireModel):
    type: Literal["add"]
    target: NonEmptyStr                     # component kind to add
    data: AddData = Field(default_factory=AddData)


class RemoveOperation(_WireModel):
    type: Literal["remove"]
    target: NonEmptyStr


class ModifyOperation(_WireModel):
    type: Literal["modify"]
    target: NonEmptyStr
    data: ModifyData


class ConnectOperation(_WireModel):
    type: Literal["connect"]
    data: ConnectData


class DisconnectOperation(_WireModel):
    type: Literal["disconnect"]
    data: DisconnectData


Operation = Annotated[
    Union[
        ReplaceOperation,
        AddOperation,
        RemoveOperation,
        ModifyOperation,
        ConnectOperation,
        DisconnectOperation,
    ],
    Field(discriminator="type"),
]

OPERATION_TYPES = ("replace", "add", "remove", "modify", "connect", "disconnect")


# ---- Root response ----

class OperationBatch(_WireModel):
    reasoning: NonEmptyStr
    operations: List[Operation] = Field(min_length=1)
