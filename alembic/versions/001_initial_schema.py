"""initial schema: users, sessions, passkeys, challenges, email codes, auth events

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

EVENT_TYPES = (
    'login_success', 'login_failed', 'logout', 'register', 'password_reset',
    'mfa_totp_enabled', 'mfa_totp_disabled', 'mfa_totp_verified', 'mfa_totp_failed',
    'mfa_email_enabled', 'mfa_email_disabled', 'mfa_email_sent', 'mfa_email_verified', 'mfa_email_failed',
    'passkey_registered', 'passkey_deleted', 'passkey_auth_success', 'passkey_auth_failed',
)


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('username', sa.String(150), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('totp_secret', sa.String(64), nullable=True),
        sa.Column('totp_enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('email_mfa_enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at_utc', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table(
        'sessions',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('mfa_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('expires_at_utc', sa.DateTime(timezone=True), nullable=False),
        sa.Column('user_agent', sa.String(512), nullable=True),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('created_at_utc', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_sessions_user_id', 'sessions', ['user_id'])
    op.create_index('ix_sessions_expires_at_utc', 'sessions', ['expires_at_utc'])

    op.create_table(
        'passkey_credentials',
        sa.Column('id', sa.String(512), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('public_key', sa.Text(), nullable=False),
        sa.Column('counter', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('transports', sa.JSON(), nullable=True),
        sa.Column('device_type', sa.String(32), nullable=True),
        sa.Column('backed_up', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('friendly_name', sa.String(255), nullable=True),
        sa.Column('created_at_utc', sa.DateTime(timezone=True), nullable=False),
        sa.Column('last_used_at_utc', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_passkey_credentials_user_id', 'passkey_credentials', ['user_id'])

    op.create_table(
        'webauthn_challenges',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=True),
        sa.Column('request_token', sa.String(64), nullable=False),
        sa.Column('challenge', sa.String(128), nullable=False),
        sa.Column('purpose', sa.Enum('REGISTRATION', 'AUTHENTICATION', name='challengepurpose'), nullable=False),
        sa.Column('expires_at_utc', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at_utc', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_webauthn_challenges_user_id', 'webauthn_challenges', ['user_id'])
    op.create_index('ix_webauthn_challenges_request_token', 'webauthn_challenges', ['request_token'], unique=True)

    op.create_table(
        'email_codes',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('code', sa.String(6), nullable=False),
        sa.Column('expires_at_utc', sa.DateTime(timezone=True), nullable=False),
        sa.Column('used', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at_utc', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_email_codes_user_id', 'email_codes', ['user_id'])

    op.create_table(
        'auth_events',
        sa.Column('id', sa.String(36), nullable=False),
        sa.Column('user_id', sa.String(36), nullable=True),
        sa.Column('event_type', sa.Enum(*EVENT_TYPES, name='autheventtype'), nullable=False),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('created_at_utc', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_auth_events_user_id', 'auth_events', ['user_id'])
    op.create_index('ix_auth_events_created_at_utc', 'auth_events', ['created_at_utc'])


def downgrade() -> None:
    op.drop_index('ix_auth_events_created_at_utc', table_name='auth_events')
    op.drop_index('ix_auth_events_user_id', table_name='auth_events')
    op.drop_table('auth_events')
    op.drop_index('ix_email_codes_user_id', table_name='email_codes')
    op.drop_table('email_codes')
    op.drop_index('ix_webauthn_challenges_request_token', table_name='webauthn_challenges')
    op.drop_index('ix_webauthn_challenges_user_id', table_name='webauthn_challenges')
    op.drop_table('webauthn_challenges')
    op.drop_index('ix_passkey_credentials_user_id', table_name='passkey_credentials')
    op.drop_table('passkey_credentials')
    op.drop_index('ix_sessions_expires_at_utc', table_name='sessions')
    op.drop_index('ix_sessions_user_id', table_name='sessions')
    op.drop_table('sessions')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_table('users')
