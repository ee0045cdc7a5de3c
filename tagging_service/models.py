"""
TabTagger v1 - Tagging Service Pydantic Models

Data model for analysis requests and results, plus API request/response models.
"""

from enum import Enum
from typing import Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator


TabId = Union[int, str]


class ProviderKind(str, Enum):
    """Known LLM provider backends"""
    OPENAI = "openai"
    GEMINI = "gemini"
    CLAUDE = "claude"
    OLLAMA = "ollama"
    CUSTOM = "custom"


class ErrorKind(str, Enum):
    """Caller-visible failure categories of an analysis"""
    CONFIG = "config"
    NETWORK = "network"
    CONTENT = "content"
    CANCELLED = "cancelled"
    INTERNAL = "internal"


class TabDescriptor(BaseModel):
    """A browser tab as supplied for analysis"""
    model_config = ConfigDict(frozen=True)

    id: TabId = Field(..., description="Opaque tab handle owned by the caller")
    title: str = Field(default="", description="Page title")
    url: str = Field(default="", description="Page URL")
    content: str = Field(default="", description="Extracted page text")
    description: str = Field(default="", description="Page meta description")


class ProviderConfig(BaseModel):
    """
    Provider selection and credentials for one analysis call.

    `kind` is kept as free text so an unknown provider is reported by the
    orchestrator rather than rejected while the request is being built.
    """
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "kind": "ollama",
                "endpoint": "http://localhost:11434",
                "model": "llama3.1",
            }
        },
    )

    kind: str = Field(..., description="openai, gemini, claude, ollama or custom")
    api_key: Optional[str] = Field(None, alias="apiKey", description="Provider credential")
    endpoint: Optional[str] = Field(None, description="Base URL (ollama) or full URL (custom)")
    model: Optional[str] = Field(None, description="Model identifier")

    @field_validator("kind", mode="before")
    @classmethod
    def normalize_kind(cls, value):
        if isinstance(value, Enum):
            value = value.value
        return str(value).strip().lower()

    def __repr__(self) -> str:
        # Keep credentials out of logs and tracebacks
        key = "***" if self.api_key else None
        return (
            f"ProviderConfig(kind={self.kind!r}, api_key={key!r}, "
            f"endpoint={self.endpoint!r}, model={self.model!r})"
        )

    __str__ = __repr__


class AnalysisRequest(BaseModel):
    """Request model for /analyze: ordered tabs plus the provider to use"""
    tabs: list[TabDescriptor] = Field(default_factory=list, description="Tabs in prompt order")
    config: ProviderConfig = Field(..., description="Provider selection")


class TagSuggestion(BaseModel):
    """Proposed tags for exactly one tab"""
    model_config = ConfigDict(populate_by_name=True)

    tab_id: TabId = Field(..., alias="tabId", description="Copied from TabDescriptor.id")
    tags: list[str] = Field(default_factory=list, description="Suggested tags")


class AnalysisResult(BaseModel):
    """Outcome of one analysis; failures carry an error kind and message"""
    model_config = ConfigDict(populate_by_name=True)

    ok: bool = Field(..., description="Whether the provider call succeeded")
    suggestions: list[TagSuggestion] = Field(default_factory=list)
    error_kind: Optional[ErrorKind] = Field(None, alias="errorKind")
    message: Optional[str] = Field(None, description="Human-readable failure message")

    @classmethod
    def success(cls, suggestions: list[TagSuggestion]) -> "AnalysisResult":
        return cls(ok=True, suggestions=suggestions)

    @classmethod
    def failure(cls, error_kind: ErrorKind, message: str) -> "AnalysisResult":
        return cls(ok=False, suggestions=[], error_kind=error_kind, message=message)


class RawTab(BaseModel):
    """A tab as handed over by tab enumeration, before content extraction"""
    id: TabId
    title: str = ""
    url: str = ""


class ExtractedContent(BaseModel):
    """Result of asking the content source about one page"""
    success: bool = False
    title: Optional[str] = None
    description: str = ""
    content: str = ""


class ModelInfo(BaseModel):
    """One selectable model reported by a provider"""
    id: str
    name: str


class AnalyzeTabsRequest(BaseModel):
    """Request model for /analyze_tabs endpoint"""
    tabs: list[RawTab] = Field(default_factory=list)
    config: ProviderConfig
    fetch_content: bool = Field(default=True, description="Fetch page content before analysis")


class ErrorResponse(BaseModel):
    """Error response model"""
    model_config = ConfigDict(populate_by_name=True)

    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Detailed error information")
    error_kind: Optional[ErrorKind] = Field(None, alias="errorKind", description="Failure category")
    status: Optional[int] = Field(None, description="Upstream HTTP status, if any")


class HealthResponse(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Service version")
    default_provider: str = Field(..., description="Provider configured in the environment")
