"""
Database Schema Reference
=========================

This file provides a quick reference for all database tables and columns.
For actual SQLAlchemy models, see: speechpro/db/models.py

All record timestamps are epoch milliseconds (BIGINT). Record ids are
assigned by the application (MAX(id) + 1 per table), never by the database.
Columns marked ENCRYPTED hold Fernet tokens, not plaintext.

"""

# ============================================================================
# USER_PROFILES - Profile data for a user
# ============================================================================
#
# | Column       | Type          | Constraints                |
# |--------------|---------------|----------------------------|
# | user_id      | VARCHAR(128)  | PRIMARY KEY                |
# | email        | VARCHAR(255)  | NOT NULL, UNIQUE, INDEX    |
# | display_name | VARCHAR(255)  | NOT NULL, DEFAULT ''       |
# | created_at   | BIGINT        | NOT NULL                   |


# ============================================================================
# AUDIO_FILES - Uploaded audio
# ============================================================================
#
# | Column           | Type          | Constraints                          |
# |------------------|---------------|--------------------------------------|
# | id               | INTEGER       | PRIMARY KEY                          |
# | user_id          | VARCHAR(128)  | NOT NULL, INDEX                      |
# | filename         | VARCHAR(255)  | NOT NULL                             |
# | language         | VARCHAR(32)   | NOT NULL, DEFAULT 'auto'             |
# | upload_time      | BIGINT        | NOT NULL                             |
# | duration_seconds | FLOAT         | NOT NULL, DEFAULT 0                  |
# | file_path        | TEXT          | NOT NULL (users/{user}/audio/{id})   |
# | content_type     | VARCHAR(100)  | NULLABLE                             |
# | data             | TEXT          | NOT NULL, ENCRYPTED (base64 payload) |
# | audio_url        | TEXT          | NULLABLE                             |


# ============================================================================
# TRANSCRIPTIONS
# ============================================================================
#
# | Column           | Type                      | Constraints             |
# |------------------|---------------------------|-------------------------|
# | id               | INTEGER                   | PRIMARY KEY             |
# | audio_id         | INTEGER                   | NOT NULL, INDEX         |
# | user_id          | VARCHAR(128)              | NOT NULL, INDEX         |
# | transcribed_text | TEXT                      | NOT NULL, ENCRYPTED     |
# | confidence       | FLOAT                     | NOT NULL (0..1)         |
# | language         | VARCHAR(32)               | NOT NULL                |
# | method           | ENUM(TranscriptionMethod) | NOT NULL                |
# | created_at       | BIGINT                    | NOT NULL                |
# | audio_url        | TEXT                      | NULLABLE                |
#
# Enums:
#   TranscriptionMethod: 'batch' | 'streaming'


# ============================================================================
# TRANSLATIONS
# ============================================================================
#
# | Column           | Type          | Constraints                  |
# |------------------|---------------|------------------------------|
# | id               | INTEGER       | PRIMARY KEY                  |
# | transcription_id | INTEGER       | NOT NULL, INDEX (0 = none)   |
# | user_id          | VARCHAR(128)  | NOT NULL, INDEX              |
# | source_language  | VARCHAR(32)   | NOT NULL                     |
# | target_language  | VARCHAR(32)   | NOT NULL                     |
# | original_text    | TEXT          | NOT NULL, ENCRYPTED          |
# | translated_text  | TEXT          | NOT NULL, ENCRYPTED          |
# | character_count  | INTEGER       | NOT NULL, DEFAULT 0 (plain)  |
# | created_at       | BIGINT        | NOT NULL                     |
# | audio_url        | TEXT          | NULLABLE                     |


# ============================================================================
# SPEECH_TO_SPEECH
# ============================================================================
#
# | Column                | Type          | Constraints                |
# |-----------------------|---------------|----------------------------|
# | id                    | INTEGER       | PRIMARY KEY                |
# | translation_id        | INTEGER       | NOT NULL, INDEX (0 = none) |
# | user_id               | VARCHAR(128)  | NOT NULL, INDEX            |
# | source_language       | VARCHAR(32)   | NOT NULL                   |
# | target_language       | VARCHAR(32)   | NOT NULL                   |
# | original_audio_url    | TEXT          | NOT NULL                   |
# | transcribed_text      | TEXT          | NOT NULL, ENCRYPTED        |
# | translated_text       | TEXT          | NOT NULL, ENCRYPTED        |
# | synthesized_audio_url | TEXT          | NOT NULL                   |
# | created_at            | BIGINT        | NOT NULL                   |


# ============================================================================
# STREAMING_SESSIONS - Real-time transcription sessions
# ============================================================================
#
# | Column          | Type          | Constraints                          |
# |-----------------|---------------|--------------------------------------|
# | id              | INTEGER       | PRIMARY KEY                          |
# | user_id         | VARCHAR(128)  | NOT NULL, INDEX                      |
# | session_id      | VARCHAR(36)   | NOT NULL, INDEX (uuid4)              |
# | start_time      | BIGINT        | NOT NULL                             |
# | end_time        | BIGINT        | NOT NULL, DEFAULT 0 (0 = in progress)|
# | final_text      | TEXT          | NOT NULL, ENCRYPTED once finalized   |
# | source_language | VARCHAR(32)   | NOT NULL                             |
# | confidence_avg  | FLOAT         | NOT NULL, DEFAULT 0                  |
# | audio_url       | TEXT          | NOT NULL, DEFAULT ''                 |


# ============================================================================
# TEXT_TO_SPEECH
# ============================================================================
#
# | Column        | Type          | Constraints                  |
# |---------------|---------------|------------------------------|
# | id            | INTEGER       | PRIMARY KEY                  |
# | user_id       | VARCHAR(128)  | NOT NULL, INDEX              |
# | original_text | TEXT          | NOT NULL, ENCRYPTED          |
# | language      | VARCHAR(32)   | NOT NULL                     |
# | voice_type    | VARCHAR(32)   | NOT NULL, DEFAULT 'NEUTRAL'  |
# | audio_url     | TEXT          | NOT NULL                     |
# | created_at    | BIGINT        | NOT NULL                     |


# ============================================================================
# ACTIVITY_LOGS - One entry per successful save
# ============================================================================
#
# | Column      | Type              | Constraints                    |
# |-------------|-------------------|--------------------------------|
# | id          | INTEGER           | PRIMARY KEY                    |
# | user_id     | VARCHAR(128)      | NOT NULL, INDEX                |
# | action_type | ENUM(ActionType)  | NOT NULL, INDEX                |
# | related_id  | INTEGER           | NOT NULL (id of saved record)  |
# | description | TEXT              | NOT NULL                       |
# | timestamp   | BIGINT            | NOT NULL                       |
#
# Enums:
#   ActionType: 'upload' | 'transcribe' | 'translate' | 's2s' | 'streaming' | 'tts'
#
# Streaming finalization does not add an entry.


# ============================================================================
# API_KEYS - Stores API keys for authentication
# ============================================================================
#
# | Column                | Type              | Constraints                    |
# |-----------------------|-------------------|--------------------------------|
# | id                    | VARCHAR(36)       | PRIMARY KEY (uuid4)            |
# | key_hash              | VARCHAR(255)      | NOT NULL, UNIQUE, INDEX        |
# | key_prefix            | VARCHAR(12)       | NOT NULL, INDEX                |
# | name                  | VARCHAR(100)      | NOT NULL                       |
# | user_id               | VARCHAR(128)      | NOT NULL, INDEX                |
# | scopes                | JSON              | ['read', 'write']              |
# | rate_limit_per_minute | INTEGER           | NOT NULL, DEFAULT 60           |
# | is_active             | BOOLEAN           | NOT NULL, DEFAULT TRUE         |
# | created_at            | TIMESTAMP(TZ)     | NOT NULL, DEFAULT now()        |
# | expires_at            | TIMESTAMP(TZ)     | NULLABLE                       |


# ============================================================================
# REFERENCES (Text)
# ============================================================================
#
# Cross-record references are plain integers and are not enforced.
#
#  audio_files.id ◄── transcriptions.audio_id
#  transcriptions.id ◄── translations.transcription_id
#  translations.id ◄── speech_to_speech.translation_id
#  <any record>.id ◄── activity_logs.related_id (table given by action_type)
#  api_keys.user_id ── user_id on every other table
