"""Initial migration

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

RECORD_TABLES = ('audio_files', 'transcriptions', 'translations', 'speech_to_speech',
                 'streaming_sessions', 'text_to_speech', 'activity_logs')


def upgrade() -> None:
    # Create user_profiles table
    op.create_table(
        'user_profiles',
        sa.Column('user_id', sa.String(128), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('display_name', sa.String(255), nullable=False, server_default=''),
        sa.Column('created_at', sa.BigInteger(), nullable=False),
    )
    op.create_index('ix_user_profiles_email', 'user_profiles', ['email'], unique=True)

    # Create audio_files table
    op.create_table(
        'audio_files',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('user_id', sa.String(128), nullable=False),
        sa.Column('filename', sa.String(255), nullable=False),
        sa.Column('language', sa.String(32), nullable=False, server_default='auto'),
        sa.Column('upload_time', sa.BigInteger(), nullable=False),
        sa.Column('duration_seconds', sa.Float(), nullable=False, server_default='0'),
        sa.Column('file_path', sa.Text(), nullable=False),
        sa.Column('content_type', sa.String(100), nullable=True),
        sa.Column('data', sa.Text(), nullable=False),
        sa.Column('audio_url', sa.Text(), nullable=True),
    )

    # Create transcriptions table
    op.create_table(
        'transcriptions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('audio_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(128), nullable=False),
        sa.Column('transcribed_text', sa.Text(), nullable=False),
        sa.Column('confidence', sa.Float(), nullable=False, server_default='0'),
        sa.Column('language', sa.String(32), nullable=False),
        sa.Column('method', sa.Enum('BATCH', 'STREAMING', name='transcriptionmethod'), nullable=False),
        sa.Column('created_at', sa.BigInteger(), nullable=False),
        sa.Column('audio_url', sa.Text(), nullable=True),
    )

    # Create translations table
    op.create_table(
        'translations',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('transcription_id', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('user_id', sa.String(128), nullable=False),
        sa.Column('source_language', sa.String(32), nullable=False),
        sa.Column('target_language', sa.String(32), nullable=False),
        sa.Column('original_text', sa.Text(), nullable=False),
        sa.Column('translated_text', sa.Text(), nullable=False),
        sa.Column('character_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.BigInteger(), nullable=False),
        sa.Column('audio_url', sa.Text(), nullable=True),
    )

    # Create speech_to_speech table
    op.create_table(
        'speech_to_speech',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('translation_id', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('user_id', sa.String(128), nullable=False),
        sa.Column('source_language', sa.String(32), nullable=False),
        sa.Column('target_language', sa.String(32), nullable=False),
        sa.Column('original_audio_url', sa.Text(), nullable=False),
        sa.Column('transcribed_text', sa.Text(), nullable=False),
        sa.Column('translated_text', sa.Text(), nullable=False),
        sa.Column('synthesized_audio_url', sa.Text(), nullable=False),
        sa.Column('created_at', sa.BigInteger(), nullable=False),
    )

    # Create streaming_sessions table
    op.create_table(
        'streaming_sessions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('user_id', sa.String(128), nullable=False),
        sa.Column('session_id', sa.String(36), nullable=False),
        sa.Column('start_time', sa.BigInteger(), nullable=False),
        sa.Column('end_time', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('final_text', sa.Text(), nullable=False, server_default=''),
        sa.Column('source_language', sa.String(32), nullable=False),
        sa.Column('confidence_avg', sa.Float(), nullable=False, server_default='0'),
        sa.Column('audio_url', sa.Text(), nullable=False, server_default=''),
    )

    # Create text_to_speech table
    op.create_table(
        'text_to_speech',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('user_id', sa.String(128), nullable=False),
        sa.Column('original_text', sa.Text(), nullable=False),
        sa.Column('language', sa.String(32), nullable=False),
        sa.Column('voice_type', sa.String(32), nullable=False, server_default='NEUTRAL'),
        sa.Column('audio_url', sa.Text(), nullable=False),
        sa.Column('created_at', sa.BigInteger(), nullable=False),
    )

    # Create activity_logs table
    op.create_table(
        'activity_logs',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('user_id', sa.String(128), nullable=False),
        sa.Column(
            'action_type',
            sa.Enum('UPLOAD', 'TRANSCRIBE', 'TRANSLATE', 'S2S', 'STREAMING', 'TTS', name='actiontype'),
            nullable=False,
        ),
        sa.Column('related_id', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('timestamp', sa.BigInteger(), nullable=False),
    )

    # Create api_keys table
    op.create_table(
        'api_keys',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('key_hash', sa.String(255), nullable=False),
        sa.Column('key_prefix', sa.String(12), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('user_id', sa.String(128), nullable=False),
        sa.Column('scopes', sa.JSON(), nullable=True),
        sa.Column('rate_limit_per_minute', sa.Integer(), nullable=False, server_default='60'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
    )

    # Create indexes
    for table in RECORD_TABLES:
        op.create_index(f'ix_{table}_user_id', table, ['user_id'])
    op.create_index('ix_transcriptions_audio_id', 'transcriptions', ['audio_id'])
    op.create_index('ix_translations_transcription_id', 'translations', ['transcription_id'])
    op.create_index('ix_speech_to_speech_translation_id', 'speech_to_speech', ['translation_id'])
    op.create_index('ix_streaming_sessions_session_id', 'streaming_sessions', ['session_id'])
    op.create_index('ix_activity_logs_action_type', 'activity_logs', ['action_type'])
    op.create_index('ix_api_keys_key_hash', 'api_keys', ['key_hash'], unique=True)
    op.create_index('ix_api_keys_key_prefix', 'api_keys', ['key_prefix'])
    op.create_index('ix_api_keys_user_id', 'api_keys', ['user_id'])


def downgrade() -> None:
    op.drop_table('api_keys')
    for table in reversed(RECORD_TABLES):
        op.drop_table(table)
    op.drop_table('user_profiles')
    op.execute('DROP TYPE IF EXISTS actiontype')
    op.execute('DROP TYPE IF EXISTS transcriptionmethod')
