from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    field_validator,
)


class CliRequest(BaseModel):
    """Options shared by every request that runs the CLI with a prompt."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    sandbox: StrictBool = Field(default=False, description="Run the CLI in sandbox mode")
    yolo: StrictBool = Field(default=False, description="Auto-accept every CLI confirmation")
    model: StrictStr | None = Field(default=None, description="Model name forwarded to the CLI")
    working_directory: StrictStr | None = Field(default=None, alias="workingDirectory")
    api_key: StrictStr | None = Field(default=None, alias="apiKey", repr=False)

    @field_validator("model", "working_directory", "api_key")
    @classmethod
    def empty_as_none(cls, v: str | None) -> str | None:
        return v or None


class ChatRequest(CliRequest):
    """Canonical generation request, whichever wire encoding produced it."""

    prompt: StrictStr = Field(..., min_length=1, description="Prompt passed to the CLI")

    @field_validator("prompt")
    @classmethod
    def prompt_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Prompt is required")
        return v


class SearchRequest(CliRequest):
    """Web search run through the CLI."""

    query: StrictStr = Field(..., min_length=1, description="Search query")
    limit: StrictInt | None = Field(default=None, ge=1, description="Maximum number of sources")
    raw: StrictBool = Field(default=False, description="Ask for a JSON summary with sources")

    @field_validator("query")
    @classmethod
    def query_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Query is required")
        return v


class CommandRequest(BaseModel):
    """Raw command line submitted to the command endpoint."""

    command: StrictStr = Field(..., min_length=1, description="Full CLI command line")
