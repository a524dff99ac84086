"""Pydantic schemas for request/response validation."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def normalize_language(lang: str) -> str:
    """Normalize a language name or code for storage."""
    return lang.strip().lower()


# ============== Record Create Schemas ==============


class TranscriptionCreate(BaseModel):
    """Request to store a transcription result."""

    audio_id: int = Field(0, ge=0, description="Audio file the text was transcribed from (0 = none)")
    text: str = Field(..., description="Transcribed text (stored encrypted)")
    language: str = Field(..., min_length=1, max_length=32)
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    method: Literal["batch", "streaming"] = "batch"
    audio_url: Optional[str] = Field(None, description="URL for playing the original audio")

    @field_validator("language")
    @classmethod
    def normalize_lang(cls, v: str) -> str:
        return normalize_language(v)


class TranslationCreate(BaseModel):
    """Request to store a translation result."""

    transcription_id: int = Field(0, ge=0, description="Source transcription (0 = none)")
    source_language: str = Field(..., min_length=1, max_length=32)
    target_language: str = Field(..., min_length=1, max_length=32)
    original_text: str
    translated_text: str
    audio_url: Optional[str] = Field(None, description="URL for playing the translated text")

    @field_validator("source_language", "target_language")
    @classmethod
    def normalize_lang(cls, v: str) -> str:
        return normalize_language(v)


class SpeechToSpeechCreate(BaseModel):
    """Request to store a speech-to-speech translation."""

    translation_id: int = Field(0, ge=0, description="Related translation (0 = none)")
    source_language: str = Field(..., min_length=1, max_length=32)
    target_language: str = Field(..., min_length=1, max_length=32)
    original_audio_url: str
    transcribed_text: str
    translated_text: str
    synthesized_audio_url: str

    @field_validator("source_language", "target_language")
    @classmethod
    def normalize_lang(cls, v: str) -> str:
        return normalize_language(v)


class StreamingSessionStart(BaseModel):
    """Request to open a streaming transcription session."""

    source_language: str = Field(..., min_length=1, max_length=32)

    @field_validator("source_language")
    @classmethod
    def normalize_lang(cls, v: str) -> str:
        return normalize_language(v)


class StreamingSessionUpdate(BaseModel):
    """Final results for a streaming session."""

    final_text: str
    average_confidence: float = Field(0.0, ge=0.0, le=1.0)
    audio_url: str = ""


class TextToSpeechCreate(BaseModel):
    """Request to store a text-to-speech result."""

    original_text: str
    language: str = Field(..., min_length=1, max_length=32)
    audio_url: str
    voice_type: str = Field("NEUTRAL", max_length=32)

    @field_validator("language")
    @classmethod
    def normalize_lang(cls, v: str) -> str:
        return normalize_language(v)


class UserProfileUpdate(BaseModel):
    """Request to create or update the caller's profile."""

    email: str = Field(..., min_length=3, max_length=255)
    display_name: str = Field("", max_length=255)


# ============== Record Response Schemas ==============


class RecordCreatedResponse(BaseModel):
    """Id assigned to a newly stored record."""

    id: int


class StreamingSessionStartResponse(RecordCreatedResponse):
    """Ids for a newly opened streaming session."""

    session_id: str
    start_time: int


class AudioFileResponse(BaseModel):
    """Audio file metadata (payload not included)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    filename: str
    language: str
    upload_time: int
    duration_seconds: float
    file_path: str
    content_type: Optional[str] = None
    audio_url: Optional[str] = None


class TranscriptionResponse(BaseModel):
    """A transcription; text is ciphertext unless decrypted."""

    id: int
    audio_id: int
    text: str
    encrypted: bool
    confidence: float
    language: str
    method: str
    created_at: int
    audio_url: Optional[str] = None


class TranslationResponse(BaseModel):
    """A translation; texts are ciphertext unless decrypted."""

    id: int
    transcription_id: int
    source_language: str
    target_language: str
    original_text: str
    translated_text: str
    character_count: int = 0
    encrypted: bool
    created_at: int
    audio_url: Optional[str] = None


class SpeechToSpeechResponse(BaseModel):
    """A speech-to-speech record; texts are ciphertext unless decrypted."""

    id: int
    translation_id: int
    source_language: str
    target_language: str
    original_audio_url: str
    transcribed_text: str
    translated_text: str
    encrypted: bool
    synthesized_audio_url: str
    created_at: int


class StreamingSessionResponse(BaseModel):
    """A streaming session; final_text is ciphertext unless decrypted."""

    id: int
    session_id: str
    start_time: int
    end_time: int
    finalized: bool
    final_text: str
    encrypted: bool
    source_language: str
    confidence_avg: float
    audio_url: str


class TextToSpeechResponse(BaseModel):
    """A text-to-speech record; text is ciphertext unless decrypted."""

    id: int
    original_text: str
    encrypted: bool
    language: str
    voice_type: str
    audio_url: str
    created_at: int


class ActivityLogResponse(BaseModel):
    """One activity log entry."""

    id: int
    action_type: str
    title: str
    related_id: int
    description: str
    timestamp: int


class UserProfileResponse(BaseModel):
    """Profile of the caller."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    email: str
    display_name: str
    created_at: int


# ============== Statistics Schemas ==============


class UserStats(BaseModel):
    """Per-collection record counts for one user."""

    audio_files: int = 0
    transcriptions: int = 0
    translations: int = 0
    speech_to_speech: int = 0
    streaming_sessions: int = 0


class UsageTotals(BaseModel):
    """Aggregate usage for one user, computed without decrypting content."""

    audio_seconds: float = 0.0
    streaming_seconds: float = 0.0
    finalized_streaming_sessions: int = 0
    text_to_speech_requests: int = 0
    characters_translated: int = 0


# ============== API Key Schemas ==============


ApiScope = Literal["read", "write"]


class ApiKeyCreate(BaseModel):
    """Request to create a new API key."""

    name: str = Field(..., min_length=1, max_length=100)
    user_id: str = Field(..., min_length=1, max_length=128)
    scopes: list[ApiScope] = Field(default=["read", "write"])
    rate_limit_per_minute: int = Field(60, ge=1, le=10000)
    expires_in_days: Optional[int] = Field(None, ge=1, le=365)


class ApiKeyResponse(BaseModel):
    """Response after creating an API key (only time full key is shown)."""

    id: str
    api_key: str  # Full key, shown only once
    key_prefix: str
    name: str
    user_id: str
    scopes: list[str]
    rate_limit_per_minute: int
    created_at: datetime
    expires_at: Optional[datetime] = None


class ApiKeyInfo(BaseModel):
    """API key info (without full key)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    key_prefix: str
    name: str
    user_id: str
    scopes: list[str]
    rate_limit_per_minute: int
    is_active: bool
    created_at: datetime
    expires_at: Optional[datetime] = None


# ============== Health & Misc Schemas ==============


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    database: str
    encryption: str


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    detail: Optional[str] = None
