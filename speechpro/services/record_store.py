"""Encrypted per-user record store."""

import asyncio
import base64
import inspect
import logging
import time
from functools import lru_cache
from typing import Any, Awaitable, Optional, TypeVar, Union
from uuid import uuid4

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from speechpro.config import get_settings
from speechpro.db.models import (
    STAT_COLLECTIONS,
    ActionType,
    ActivityLog,
    AudioFile,
    SpeechToSpeech,
    StreamingSession,
    TextToSpeech,
    Transcription,
    TranscriptionMethod,
    Translation,
    UserProfile,
)
from speechpro.schemas.schemas import (
    ActivityLogResponse,
    SpeechToSpeechResponse,
    StreamingSessionResponse,
    TextToSpeechResponse,
    TranscriptionResponse,
    TranslationResponse,
    UsageTotals,
    UserStats,
)
from speechpro.services.encryption import FieldCipher
from speechpro.services.exceptions import (
    FileReadError,
    RecordConflict,
    RecordNotFound,
    RecordStoreError,
    StorageTimeout,
    StorageUnavailable,
)
from speechpro.services.sequence import IdSequence

logger = logging.getLogger(__name__)

T = TypeVar("T")


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


class RecordStore:
    """
    Stores per-user speech records with sensitive text encrypted at rest.

    Every save assigns the next id of its collection, commits the record and
    then appends one activity log entry. The log append is committed
    separately and is best-effort: if it fails the saved record stays.
    Encrypted fields are returned as ciphertext by the list/get methods and
    only turned into plaintext by the *_to_response converters.
    """

    def __init__(
        self,
        cipher: FieldCipher,
        timeout: Optional[float] = None,
        sequence: Optional[IdSequence] = None,
    ):
        self.cipher = cipher
        self._timeout = timeout
        self._sequence = sequence or IdSequence()

    # ============== Internals ==============

    async def _run(self, operation: Awaitable[T]) -> T:
        """Await a storage call, bounded by the timeout, wrapping DB errors."""
        try:
            return await asyncio.wait_for(operation, timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise StorageTimeout(
                f"Storage call exceeded {self._timeout} seconds"
            ) from e
        except IntegrityError as e:
            raise RecordConflict(f"Conflicting record: {e.orig}") from e
        except SQLAlchemyError as e:
            raise StorageUnavailable(f"Storage unavailable: {e}") from e

    async def _insert(self, db: AsyncSession, model, **values) -> int:
        """Assign the next id for the model's table and commit one row."""
        record_id = await self._sequence.next_id(db, model)
        db.add(model(id=record_id, **values))
        await db.commit()
        return record_id

    async def _save(
        self,
        db: AsyncSession,
        model,
        action_type: ActionType,
        description: str,
        **values,
    ) -> int:
        """Write a record, then log the action against it."""
        try:
            record_id = await self._run(self._insert(db, model, **values))
        except RecordStoreError:
            await db.rollback()
            raise
        logger.info(
            f"Saved {model.__tablename__} record {record_id} for user {values['user_id']}"
        )
        await self._log_action(db, values["user_id"], action_type, record_id, description)
        return record_id

    async def _log_action(
        self,
        db: AsyncSession,
        user_id: str,
        action_type: ActionType,
        related_id: int,
        description: str,
    ) -> Optional[int]:
        """Append an activity log entry; failures are logged, not raised."""
        try:
            return await self._run(
                self._insert(
                    db,
                    ActivityLog,
                    user_id=user_id,
                    action_type=action_type,
                    related_id=related_id,
                    description=description,
                    timestamp=now_ms(),
                )
            )
        except (StorageUnavailable, RecordConflict) as e:
            await db.rollback()
            logger.warning(
                f"Activity log append failed for {action_type.value} {related_id}: {e}"
            )
            return None

    def _reveal(self, value: str, decrypt: bool) -> str:
        """Return plaintext for an encrypted field when asked to."""
        if not decrypt or not value:
            return value
        return self.cipher.decrypt(value)

    @staticmethod
    async def _read_file(file: Any) -> bytes:
        """Read a sync or async file handle to completion."""
        try:
            content = file.read()
            if inspect.isawaitable(content):
                content = await content
        except (OSError, ValueError) as e:
            raise FileReadError(f"Failed to read audio file: {e}") from e

        if isinstance(content, str):
            content = content.encode("utf-8")
        if not isinstance(content, (bytes, bytearray)):
            raise FileReadError("Audio file did not yield bytes")
        return bytes(content)

    # ============== Save Operations ==============

    async def save_audio_file(
        self,
        db: AsyncSession,
        file: Any,
        user_id: str,
        language: str = "auto",
        duration_seconds: float = 0.0,
        content_type: Optional[str] = None,
        audio_url: Optional[str] = None,
    ) -> int:
        """
        Store an uploaded audio file.

        The whole file is read into memory, base64-encoded and encrypted
        before it is written.

        Args:
            db: Database session
            file: Handle with a sync or async read() (e.g. UploadFile)
            user_id: Owner of the record
            language: Spoken language, "auto" when unknown
            duration_seconds: Audio length, 0 when unknown
            content_type: MIME type of the upload
            audio_url: Playback URL for the audio, if the client has one

        Returns:
            The new audio file id
        """
        content = await self._read_file(file)
        filename = getattr(file, "filename", None) or getattr(file, "name", None) or "audio"
        encrypted = self.cipher.encrypt(base64.b64encode(content).decode("ascii"))

        record_id = await self._run(self._sequence.next_id(db, AudioFile))
        record = AudioFile(
            id=record_id,
            user_id=user_id,
            filename=str(filename),
            language=language,
            upload_time=now_ms(),
            duration_seconds=duration_seconds,
            file_path=f"users/{user_id}/audio/{record_id}",
            content_type=content_type,
            data=encrypted,
            audio_url=audio_url,
        )
        db.add(record)
        try:
            await self._run(db.commit())
        except RecordStoreError:
            await db.rollback()
            raise

        logger.info(f"Saved audio file {record_id} ({len(content)} bytes) for user {user_id}")
        await self._log_action(
            db, user_id, ActionType.UPLOAD, record_id, f"Uploaded audio file: {filename}"
        )
        return record_id

    async def save_transcription(
        self,
        db: AsyncSession,
        audio_id: int,
        user_id: str,
        text: str,
        language: str,
        confidence: float,
        method: Union[TranscriptionMethod, str] = TranscriptionMethod.BATCH,
        audio_url: Optional[str] = None,
    ) -> int:
        """Store a transcription of an audio file."""
        return await self._save(
            db,
            Transcription,
            ActionType.TRANSCRIBE,
            f"Transcribed audio {audio_id}",
            audio_id=audio_id,
            user_id=user_id,
            transcribed_text=self.cipher.encrypt(text),
            confidence=confidence,
            language=language,
            method=TranscriptionMethod(method),
            created_at=now_ms(),
            audio_url=audio_url,
        )

    async def save_translation(
        self,
        db: AsyncSession,
        transcription_id: int,
        user_id: str,
        source_language: str,
        target_language: str,
        original_text: str,
        translated_text: str,
        audio_url: Optional[str] = None,
    ) -> int:
        """Store a translation; both texts are encrypted independently."""
        return await self._save(
            db,
            Translation,
            ActionType.TRANSLATE,
            f"Translated text from {source_language} to {target_language}",
            transcription_id=transcription_id,
            user_id=user_id,
            source_language=source_language,
            target_language=target_language,
            original_text=self.cipher.encrypt(original_text),
            translated_text=self.cipher.encrypt(translated_text),
            character_count=len(original_text),
            created_at=now_ms(),
            audio_url=audio_url,
        )

    async def save_speech_to_speech(
        self,
        db: AsyncSession,
        translation_id: int,
        user_id: str,
        source_language: str,
        target_language: str,
        original_audio_url: str,
        transcribed_text: str,
        translated_text: str,
        synthesized_audio_url: str,
    ) -> int:
        """Store a speech-to-speech translation."""
        return await self._save(
            db,
            SpeechToSpeech,
            ActionType.S2S,
            "Completed speech-to-speech translation",
            translation_id=translation_id,
            user_id=user_id,
            source_language=source_language,
            target_language=target_language,
            original_audio_url=original_audio_url,
            transcribed_text=self.cipher.encrypt(transcribed_text),
            translated_text=self.cipher.encrypt(translated_text),
            synthesized_audio_url=synthesized_audio_url,
            created_at=now_ms(),
        )

    async def start_streaming_session(
        self, db: AsyncSession, user_id: str, source_language: str
    ) -> int:
        """Open a streaming session with a fresh random session id."""
        return await self._save(
            db,
            StreamingSession,
            ActionType.STREAMING,
            "Started streaming session",
            user_id=user_id,
            session_id=str(uuid4()),
            start_time=now_ms(),
            end_time=0,
            final_text="",
            source_language=source_language,
            confidence_avg=0.0,
            audio_url="",
        )

    async def update_streaming_session(
        self,
        db: AsyncSession,
        stream_id: int,
        final_text: str,
        average_confidence: float,
        audio_url: str,
        user_id: Optional[str] = None,
    ) -> StreamingSession:
        """
        Finalize a streaming session with its results.

        Replaces the text, confidence and audio URL and stamps end_time.
        Repeating a call with the same arguments leaves the record as it is.
        No activity log entry is written.

        Raises:
            RecordNotFound: No session with this id (for this user, if given)
        """
        session = await self.get_streaming_session(db, stream_id, user_id)

        if (
            session.end_time
            and session.confidence_avg == average_confidence
            and session.audio_url == audio_url
            and self._reveal(session.final_text, True) == final_text
        ):
            return session

        session.final_text = self.cipher.encrypt(final_text)
        session.confidence_avg = average_confidence
        session.audio_url = audio_url
        session.end_time = max(now_ms(), session.start_time + 1)
        try:
            await self._run(db.commit())
        except RecordStoreError:
            await db.rollback()
            raise

        logger.info(f"Finalized streaming session {stream_id}")
        return session

    async def save_text_to_speech(
        self,
        db: AsyncSession,
        user_id: str,
        original_text: str,
        language: str,
        audio_url: str,
        voice_type: str = "NEUTRAL",
    ) -> int:
        """Store a text-to-speech result."""
        return await self._save(
            db,
            TextToSpeech,
            ActionType.TTS,
            "Generated speech for text",
            user_id=user_id,
            original_text=self.cipher.encrypt(original_text),
            language=language,
            voice_type=voice_type,
            audio_url=audio_url,
            created_at=now_ms(),
        )

    # ============== User Profiles ==============

    async def save_user(
        self, db: AsyncSession, user_id: str, email: str, display_name: str = ""
    ) -> UserProfile:
        """Create or update a user profile, keeping its creation time."""
        profile = await self._run(db.get(UserProfile, user_id))
        if profile is None:
            profile = UserProfile(user_id=user_id, created_at=now_ms())
            db.add(profile)
        profile.email = email
        profile.display_name = display_name
        try:
            await self._run(db.commit())
        except RecordStoreError:
            await db.rollback()
            raise
        return profile

    async def get_user(self, db: AsyncSession, user_id: str) -> Optional[UserProfile]:
        """Get a user profile."""
        return await self._run(db.get(UserProfile, user_id))

    # ============== Queries ==============

    async def _scan(self, db: AsyncSession, query) -> list:
        result = await self._run(db.execute(query))
        return list(result.scalars().all())

    async def list_audio_files(self, db: AsyncSession, user_id: str) -> list[AudioFile]:
        """Audio files of a user, newest first."""
        return await self._scan(
            db,
            select(AudioFile)
            .where(AudioFile.user_id == user_id)
            .order_by(AudioFile.upload_time.desc(), AudioFile.id.desc()),
        )

    async def get_audio_file(self, db: AsyncSession, audio_id: int, user_id: str) -> AudioFile:
        """Get one of the user's audio files, payload still encrypted."""
        record = await self._run(db.get(AudioFile, audio_id))
        if record is None or record.user_id != user_id:
            raise RecordNotFound("audio_files", audio_id)
        return record

    def decrypt_audio(self, record: AudioFile) -> bytes:
        """Decrypt and decode the stored bytes of an audio file."""
        return base64.b64decode(self.cipher.decrypt(record.data))

    async def get_audio_payload(self, db: AsyncSession, audio_id: int, user_id: str) -> bytes:
        """Fetch and decrypt the stored bytes of an audio file."""
        return self.decrypt_audio(await self.get_audio_file(db, audio_id, user_id))

    async def list_transcriptions(
        self, db: AsyncSession, user_id: str, audio_id: Optional[int] = None
    ) -> list[Transcription]:
        """Transcriptions of a user, optionally for one audio file."""
        query = select(Transcription).where(Transcription.user_id == user_id)
        if audio_id is not None:
            query = query.where(Transcription.audio_id == audio_id)
        return await self._scan(
            db, query.order_by(Transcription.created_at.desc(), Transcription.id.desc())
        )

    async def list_translations(
        self, db: AsyncSession, user_id: str, transcription_id: Optional[int] = None
    ) -> list[Translation]:
        """Translations of a user, optionally for one transcription."""
        query = select(Translation).where(Translation.user_id == user_id)
        if transcription_id is not None:
            query = query.where(Translation.transcription_id == transcription_id)
        return await self._scan(
            db, query.order_by(Translation.created_at.desc(), Translation.id.desc())
        )

    async def list_speech_to_speech(
        self, db: AsyncSession, user_id: str, translation_id: Optional[int] = None
    ) -> list[SpeechToSpeech]:
        """Speech-to-speech records of a user, optionally for one translation."""
        query = select(SpeechToSpeech).where(SpeechToSpeech.user_id == user_id)
        if translation_id is not None:
            query = query.where(SpeechToSpeech.translation_id == translation_id)
        return await self._scan(
            db, query.order_by(SpeechToSpeech.created_at.desc(), SpeechToSpeech.id.desc())
        )

    async def list_streaming_sessions(
        self, db: AsyncSession, user_id: str
    ) -> list[StreamingSession]:
        """Streaming sessions of a user, newest first."""
        return await self._scan(
            db,
            select(StreamingSession)
            .where(StreamingSession.user_id == user_id)
            .order_by(StreamingSession.start_time.desc(), StreamingSession.id.desc()),
        )

    async def get_streaming_session(
        self, db: AsyncSession, stream_id: int, user_id: Optional[str] = None
    ) -> StreamingSession:
        """Get a streaming session by id, scoped to a user when given."""
        session = await self._run(db.get(StreamingSession, stream_id))
        if session is None or (user_id is not None and session.user_id != user_id):
            raise RecordNotFound("streaming_sessions", stream_id)
        return session

    async def get_streaming_session_by_session_id(
        self, db: AsyncSession, session_id: str, user_id: str
    ) -> StreamingSession:
        """Look up a streaming session by its random session id."""
        result = await self._run(
            db.execute(
                select(StreamingSession).where(
                    StreamingSession.session_id == session_id,
                    StreamingSession.user_id == user_id,
                )
            )
        )
        session = result.scalar_one_or_none()
        if session is None:
            raise RecordNotFound("streaming_sessions", session_id)
        return session

    async def list_text_to_speech(self, db: AsyncSession, user_id: str) -> list[TextToSpeech]:
        """Text-to-speech records of a user, newest first."""
        return await self._scan(
            db,
            select(TextToSpeech)
            .where(TextToSpeech.user_id == user_id)
            .order_by(TextToSpeech.created_at.desc(), TextToSpeech.id.desc()),
        )

    async def get_user_history(
        self,
        db: AsyncSession,
        user_id: str,
        limit: Optional[int] = None,
        action_type: Optional[ActionType] = None,
    ) -> list[ActivityLog]:
        """
        Activity log of a user, most recent first.

        Entries written in the same millisecond are ordered by log id, so
        the later write still comes first.
        """
        query = select(ActivityLog).where(ActivityLog.user_id == user_id)
        if action_type is not None:
            query = query.where(ActivityLog.action_type == ActionType(action_type))
        query = query.order_by(ActivityLog.timestamp.desc(), ActivityLog.id.desc())
        if limit:
            query = query.limit(limit)
        return await self._scan(db, query)

    # ============== Statistics ==============

    async def get_user_stats(self, db: AsyncSession, user_id: str) -> UserStats:
        """Count the user's records in each collection."""
        counts = [
            select(func.count())
            .select_from(model)
            .where(model.user_id == user_id)
            .scalar_subquery()
            .label(name)
            for name, model in STAT_COLLECTIONS.items()
        ]
        result = await self._run(db.execute(select(*counts)))
        row = result.one()
        return UserStats(**{name: getattr(row, name) or 0 for name in STAT_COLLECTIONS})

    async def get_usage_totals(self, db: AsyncSession, user_id: str) -> UsageTotals:
        """Sum audio time, streaming time and translated characters for a user."""
        audio_seconds = (
            select(func.coalesce(func.sum(AudioFile.duration_seconds), 0.0))
            .where(AudioFile.user_id == user_id)
            .scalar_subquery()
        )
        streaming_ms = (
            select(
                func.coalesce(
                    func.sum(StreamingSession.end_time - StreamingSession.start_time), 0
                )
            )
            .where(StreamingSession.user_id == user_id, StreamingSession.end_time > 0)
            .scalar_subquery()
        )
        finalized = (
            select(func.count())
            .select_from(StreamingSession)
            .where(StreamingSession.user_id == user_id, StreamingSession.end_time > 0)
            .scalar_subquery()
        )
        tts = (
            select(func.count())
            .select_from(TextToSpeech)
            .where(TextToSpeech.user_id == user_id)
            .scalar_subquery()
        )
        characters = (
            select(func.coalesce(func.sum(Translation.character_count), 0))
            .where(Translation.user_id == user_id)
            .scalar_subquery()
        )
        result = await self._run(
            db.execute(
                select(
                    audio_seconds.label("audio_seconds"),
                    streaming_ms.label("streaming_ms"),
                    finalized.label("finalized"),
                    tts.label("tts"),
                    characters.label("characters"),
                )
            )
        )
        row = result.one()
        return UsageTotals(
            audio_seconds=float(row.audio_seconds or 0),
            streaming_seconds=(row.streaming_ms or 0) / 1000,
            finalized_streaming_sessions=row.finalized or 0,
            text_to_speech_requests=row.tts or 0,
            characters_translated=row.characters or 0,
        )

    # ============== Response Conversion ==============

    def transcription_to_response(
        self, record: Transcription, decrypt: bool = False
    ) -> TranscriptionResponse:
        """Convert a Transcription row, decrypting its text on request."""
        return TranscriptionResponse(
            id=record.id,
            audio_id=record.audio_id,
            text=self._reveal(record.transcribed_text, decrypt),
            encrypted=not decrypt,
            confidence=record.confidence,
            language=record.language,
            method=record.method.value,
            created_at=record.created_at,
            audio_url=record.audio_url,
        )

    def translation_to_response(
        self, record: Translation, decrypt: bool = False
    ) -> TranslationResponse:
        """Convert a Translation row, decrypting its texts on request."""
        return TranslationResponse(
            id=record.id,
            transcription_id=record.transcription_id,
            source_language=record.source_language,
            target_language=record.target_language,
            original_text=self._reveal(record.original_text, decrypt),
            translated_text=self._reveal(record.translated_text, decrypt),
            character_count=record.character_count or 0,
            encrypted=not decrypt,
            created_at=record.created_at,
            audio_url=record.audio_url,
        )

    def speech_to_speech_to_response(
        self, record: SpeechToSpeech, decrypt: bool = False
    ) -> SpeechToSpeechResponse:
        """Convert a SpeechToSpeech row, decrypting its texts on request."""
        return SpeechToSpeechResponse(
            id=record.id,
            translation_id=record.translation_id,
            source_language=record.source_language,
            target_language=record.target_language,
            original_audio_url=record.original_audio_url,
            transcribed_text=self._reveal(record.transcribed_text, decrypt),
            translated_text=self._reveal(record.translated_text, decrypt),
            encrypted=not decrypt,
            synthesized_audio_url=record.synthesized_audio_url,
            created_at=record.created_at,
        )

    def streaming_session_to_response(
        self, record: StreamingSession, decrypt: bool = False
    ) -> StreamingSessionResponse:
        """Convert a StreamingSession row, decrypting its text on request."""
        return StreamingSessionResponse(
            id=record.id,
            session_id=record.session_id,
            start_time=record.start_time,
            end_time=record.end_time,
            finalized=record.end_time > 0,
            final_text=self._reveal(record.final_text, decrypt),
            encrypted=not decrypt and bool(record.final_text),
            source_language=record.source_language,
            confidence_avg=record.confidence_avg,
            audio_url=record.audio_url or "",
        )

    def text_to_speech_to_response(
        self, record: TextToSpeech, decrypt: bool = False
    ) -> TextToSpeechResponse:
        """Convert a TextToSpeech row, decrypting its text on request."""
        return TextToSpeechResponse(
            id=record.id,
            original_text=self._reveal(record.original_text, decrypt),
            encrypted=not decrypt,
            language=record.language,
            voice_type=record.voice_type,
            audio_url=record.audio_url,
            created_at=record.created_at,
        )

    def activity_to_response(self, entry: ActivityLog) -> ActivityLogResponse:
        """Convert an ActivityLog row."""
        action = entry.action_type.value
        return ActivityLogResponse(
            id=entry.id,
            action_type=action,
            title=get_settings().action_labels.get(action, action),
            related_id=entry.related_id,
            description=entry.description,
            timestamp=entry.timestamp,
        )


@lru_cache
def get_record_store() -> RecordStore:
    """Get the shared record store."""
    settings = get_settings()
    return RecordStore(
        cipher=FieldCipher.from_settings(settings),
        timeout=settings.storage_timeout_seconds,
    )
