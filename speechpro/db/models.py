"""Database models for the SpeechPro record store."""

import enum
from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy import (
    JSON,
    BigInteger,
    DateTime,
    Enum,
    Float,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from speechpro.db.session import Base


class ActionType(str, enum.Enum):
    """Kinds of user actions recorded in the activity log."""

    UPLOAD = "upload"
    TRANSCRIBE = "transcribe"
    TRANSLATE = "translate"
    S2S = "s2s"
    STREAMING = "streaming"
    TTS = "tts"


class TranscriptionMethod(str, enum.Enum):
    """How a transcription was produced."""

    BATCH = "batch"
    STREAMING = "streaming"


class UserProfile(Base):
    """Profile data for an authenticated user."""

    __tablename__ = "user_profiles"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    display_name: Mapped[str] = mapped_column(String(255), default="")
    created_at: Mapped[int] = mapped_column(BigInteger)  # epoch ms


class AudioFile(Base):
    """An uploaded audio file. The payload is base64 then encrypted."""

    __tablename__ = "audio_files"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    user_id: Mapped[str] = mapped_column(String(128), index=True)
    filename: Mapped[str] = mapped_column(String(255))
    language: Mapped[str] = mapped_column(String(32), default="auto")
    upload_time: Mapped[int] = mapped_column(BigInteger)
    duration_seconds: Mapped[float] = mapped_column(Float, default=0.0)
    file_path: Mapped[str] = mapped_column(Text)
    content_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    data: Mapped[str] = mapped_column(Text)  # Encrypted
    audio_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Transcription(Base):
    """Text transcribed from an audio file."""

    __tablename__ = "transcriptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    audio_id: Mapped[int] = mapped_column(Integer, index=True)  # audio_files.id, not enforced
    user_id: Mapped[str] = mapped_column(String(128), index=True)
    transcribed_text: Mapped[str] = mapped_column(Text)  # Encrypted
    confidence: Mapped[float] = mapped_column(Float, default=0.0)
    language: Mapped[str] = mapped_column(String(32))
    method: Mapped[TranscriptionMethod] = mapped_column(
        Enum(TranscriptionMethod), default=TranscriptionMethod.BATCH
    )
    created_at: Mapped[int] = mapped_column(BigInteger)
    audio_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Translation(Base):
    """A translated text, optionally derived from a transcription."""

    __tablename__ = "translations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    transcription_id: Mapped[int] = mapped_column(Integer, index=True, default=0)  # 0 = none
    user_id: Mapped[str] = mapped_column(String(128), index=True)
    source_language: Mapped[str] = mapped_column(String(32))
    target_language: Mapped[str] = mapped_column(String(32))
    original_text: Mapped[str] = mapped_column(Text)  # Encrypted
    translated_text: Mapped[str] = mapped_column(Text)  # Encrypted
    character_count: Mapped[int] = mapped_column(Integer, default=0)  # len(original_text)
    created_at: Mapped[int] = mapped_column(BigInteger)
    audio_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class SpeechToSpeech(Base):
    """Transcription, translation and synthesis captured as one record."""

    __tablename__ = "speech_to_speech"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    translation_id: Mapped[int] = mapped_column(Integer, index=True, default=0)  # 0 = none
    user_id: Mapped[str] = mapped_column(String(128), index=True)
    source_language: Mapped[str] = mapped_column(String(32))
    target_language: Mapped[str] = mapped_column(String(32))
    original_audio_url: Mapped[str] = mapped_column(Text)
    transcribed_text: Mapped[str] = mapped_column(Text)  # Encrypted
    translated_text: Mapped[str] = mapped_column(Text)  # Encrypted
    synthesized_audio_url: Mapped[str] = mapped_column(Text)
    created_at: Mapped[int] = mapped_column(BigInteger)


class StreamingSession(Base):
    """A real-time transcription session, finalized once."""

    __tablename__ = "streaming_sessions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    user_id: Mapped[str] = mapped_column(String(128), index=True)
    session_id: Mapped[str] = mapped_column(
        String(36), index=True, default=lambda: str(uuid4())
    )
    start_time: Mapped[int] = mapped_column(BigInteger)
    end_time: Mapped[int] = mapped_column(BigInteger, default=0)  # 0 while in progress
    final_text: Mapped[str] = mapped_column(Text, default="")  # Encrypted once finalized
    source_language: Mapped[str] = mapped_column(String(32))
    confidence_avg: Mapped[float] = mapped_column(Float, default=0.0)
    audio_url: Mapped[str] = mapped_column(Text, default="")


class TextToSpeech(Base):
    """Synthesized speech generated from user text."""

    __tablename__ = "text_to_speech"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    user_id: Mapped[str] = mapped_column(String(128), index=True)
    original_text: Mapped[str] = mapped_column(Text)  # Encrypted
    language: Mapped[str] = mapped_column(String(32))
    voice_type: Mapped[str] = mapped_column(String(32), default="NEUTRAL")
    audio_url: Mapped[str] = mapped_column(Text)
    created_at: Mapped[int] = mapped_column(BigInteger)


class ActivityLog(Base):
    """Append-only log of user actions, one entry per successful save."""

    __tablename__ = "activity_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    user_id: Mapped[str] = mapped_column(String(128), index=True)
    action_type: Mapped[ActionType] = mapped_column(Enum(ActionType), index=True)
    related_id: Mapped[int] = mapped_column(Integer)
    description: Mapped[str] = mapped_column(Text, default="")
    timestamp: Mapped[int] = mapped_column(BigInteger)


class ApiKey(Base):
    """API keys for authentication, each bound to one user."""

    __tablename__ = "api_keys"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid4())
    )
    key_hash: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    key_prefix: Mapped[str] = mapped_column(String(12), index=True)  # "ask_" + 8 chars
    name: Mapped[str] = mapped_column(String(100))
    user_id: Mapped[str] = mapped_column(String(128), index=True)
    scopes: Mapped[list] = mapped_column(JSON, default=list)  # ["read", "write"]
    rate_limit_per_minute: Mapped[int] = mapped_column(Integer, default=60)
    is_active: Mapped[bool] = mapped_column(default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


# Collections counted by RecordStore.get_user_stats, in output order.
STAT_COLLECTIONS = {
    "audio_files": AudioFile,
    "transcriptions": Transcription,
    "translations": Translation,
    "speech_to_speech": SpeechToSpeech,
    "streaming_sessions": StreamingSession,
}
