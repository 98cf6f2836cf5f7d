from typing import Any, Dict, List, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from thebrain_mcp.core.exceptions import ProtocolError

ModelT = TypeVar("ModelT", bound=BaseModel)

DEFAULT_SEARCH_LIMIT = 10


# --- JSON-RPC messages ---

class JsonRpcRequest(BaseModel):
    jsonrpc: Literal["2.0"]
    id: Any = None
    method: str
    params: Optional[Dict[str, Any]] = None


class ToolCallParams(BaseModel):
    name: Optional[str] = None
    arguments: Optional[Dict[str, Any]] = None


class ReadResourceParams(BaseModel):
    uri: Optional[str] = None


# --- Tool inputs ---

class SearchThoughtsInput(BaseModel):
    query: str = Field(..., min_length=1)
    limit: int = Field(default=DEFAULT_SEARCH_LIMIT, ge=1)

    @field_validator("limit", mode="before")
    @classmethod
    def _null_limit_means_default(cls, value: Any) -> Any:
        return DEFAULT_SEARCH_LIMIT if value is None else value


class ThoughtIdInput(BaseModel):
    thought_id: str = Field(..., min_length=1)


class CreateThoughtInput(BaseModel):
    name: str = Field(..., min_length=1)
    notes: Optional[str] = None
    parent_id: Optional[str] = None


class UpdateThoughtInput(BaseModel):
    """thought_id plus any fields to forward to the API unchanged."""
    model_config = ConfigDict(extra="allow")

    thought_id: str = Field(..., min_length=1)

    def update_fields(self) -> Dict[str, Any]:
        """All supplied fields except thought_id, with nulls dropped."""
        extra = self.model_extra or {}
        return {k: v for k, v in extra.items() if v is not None}


# --- Tool results ---

class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    content: List[TextContent]

    @classmethod
    def from_texts(cls, *texts: str) -> "ToolResult":
        return cls(content=[TextContent(text=t) for t in texts])


def validate_arguments(model: Type[ModelT], arguments: Dict[str, Any]) -> ModelT:
    """
    Validate tool arguments, converting pydantic errors into ProtocolError.

    A missing, null or empty required field yields "<field> is required";
    any other problem yields "Invalid argument '<field>': <reason>".
    """
    try:
        return model.model_validate(arguments)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "arguments"
        if first["type"] in ("missing", "string_too_short") or first.get("input") is None:
            raise ProtocolError(f"{field} is required") from exc
        raise ProtocolError(f"Invalid argument '{field}': {first['msg']}") from exc
