"""Pydantic v2 schemas for address resolution I/O."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# Administrative levels, broadest first
ADMIN_LEVELS = ("province", "regency_city", "district", "village")

# Record fields in CSV column order
RECORD_FIELDS = ADMIN_LEVELS + ("postal_code",)

AdminLevel = Literal["province", "regency_city", "district", "village"]


class AddressRecord(BaseModel):
    """One gazetteer row. Immutable after loading."""

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "province": "DKI Jakarta",
                "regency_city": "Jakarta Pusat",
                "district": "Tanah Abang",
                "village": "Kebon Melati",
                "postal_code": "10120",
            }
        },
    )

    province: str = ""
    regency_city: str = ""
    district: str = ""
    village: str = ""
    postal_code: str = ""

    def get(self, field: str) -> str:
        return getattr(self, field)


class ExtractedComponents(BaseModel):
    """Candidate tokens pulled out of the address text by the extractor."""

    model_config = ConfigDict(frozen=True)

    province: str | None = None
    regency_city: str | None = None
    district: str | None = None
    village: str | None = None
    postal_code: str | None = None
    detail: str = ""

    def levels(self) -> list[str]:
        """Administrative levels that were extracted, broadest first."""
        return [level for level in ADMIN_LEVELS if getattr(self, level)]


class MatchResult(BaseModel):
    """Values resolved from the gazetteer. Unset fields are None."""

    model_config = ConfigDict(frozen=True)

    province: str | None = None
    regency_city: str | None = None
    district: str | None = None
    village: str | None = None
    postal_code: str | None = None


class ParsedAddress(BaseModel):
    """Final per-field view: matched value, else extracted value, else None."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "original": "Jl. Kebon Melati No. 5, Tanah Abang, Jakarta Pusat 10120",
                "normalized": "jalan kebon melati no 5 tanah abang jakarta pusat 10120",
                "province": "DKI Jakarta",
                "regency_city": "Jakarta Pusat",
                "district": "Tanah Abang",
                "village": "Kebon Melati",
                "postal_code": "10120",
                "detail": "jalan no 5",
            }
        },
    )

    original: str = Field(default="", description="Input address, trimmed")
    normalized: str = Field(default="", description="Normalized and corrected text")
    province: str | None = None
    regency_city: str | None = None
    district: str | None = None
    village: str | None = None
    postal_code: str | None = None
    detail: str = Field(default="", description="Tokens not used by any component")


class Suggestion(BaseModel):
    """A gazetteer name that looks like an unmatched extracted token."""

    model_config = ConfigDict(frozen=True)

    field: AdminLevel
    value: str
    similarity: float = Field(..., ge=0.0, le=1.0)


class CorrectionHint(BaseModel):
    """A learned correction that applies to an extracted token."""

    model_config = ConfigDict(frozen=True)

    original: str
    suggested: str


class ResolveResult(BaseModel):
    """Outcome of resolving one address."""

    success: bool = Field(default=False, description="confidence above the success bar")
    parsed: ParsedAddress = Field(default_factory=ParsedAddress)
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    suggestions: list[Suggestion] = Field(default_factory=list)
    corrections: list[CorrectionHint] = Field(default_factory=list)
    extracted: ExtractedComponents | None = None
    matched: MatchResult | None = None
    error: str | None = None


class LearningStats(BaseModel):
    """Read-only counts of the learning state and gazetteer."""

    learned_words: int = 0
    address_patterns: int = 0
    corrections: int = 0
    gazetteer_size: int = 0


class LearningSnapshot(BaseModel):
    """Serializable copy of the learning state."""

    word_frequency: dict[str, int] | None = None
    pattern_frequency: dict[str, int] | None = None
    corrections: dict[str, str] | None = None
    exported_at: datetime | None = None


class ResolveRequest(BaseModel):
    """Request schema for resolving an address."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {"address": "Kebon Melati Tanah Abang Jakarta Pusat 10120"}
        },
    )

    address: str = Field(..., min_length=1, max_length=500, description="Address to resolve")


class BatchResolveRequest(BaseModel):
    """Request schema for batch resolution."""

    addresses: list[str] = Field(..., min_length=1, max_length=100, description="List of addresses")


class ResolveResponse(BaseModel):
    """Response schema for a single resolution."""

    success: bool = Field(default=True, description="Whether resolution succeeded")
    result: ResolveResult | None = Field(None, description="Resolution result")
    error: str | None = Field(None, description="Error message if failed")
    inference_time_ms: float = Field(..., description="Resolution time in milliseconds")


class BatchResolveResponse(BaseModel):
    """Response schema for batch resolution."""

    success: bool = Field(default=True)
    results: list[ResolveResult] = Field(default_factory=list)
    total_inference_time_ms: float = Field(..., description="Total resolution time")
    avg_inference_time_ms: float = Field(..., description="Average per-address time")


class SettingsRequest(BaseModel):
    """Runtime toggles. Omitted fields are left unchanged."""

    learning_enabled: bool | None = None
    fuzzy_match_threshold: float | None = None


class SettingsResponse(BaseModel):
    learning_enabled: bool
    fuzzy_match_threshold: float


class GazetteerUploadRequest(BaseModel):
    """Reference table as CSV text, header row first."""

    csv: str = Field(..., min_length=1)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(default="healthy")
    gazetteer_loaded: bool = Field(default=False)
    gazetteer_size: int = Field(default=0)
    version: str = Field(default="1.0.0")
