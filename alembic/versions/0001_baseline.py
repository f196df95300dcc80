"""Baseline migration - families, members, feed and messaging

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-19

Portable across SQLite and PostgreSQL: ids are generated by the
application, timestamps are set by the application.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column('id', sa.String(36), primary_key=True)


def _timestamp(name: str) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False)


def _user_fk(name: str = 'user_id') -> sa.Column:
    return sa.Column(
        name,
        sa.String(36),
        sa.ForeignKey('users.id', ondelete='CASCADE'),
        nullable=False,
    )


def upgrade() -> None:
    """Create all tables."""

    # ==========================================================================
    # Families & users
    # ==========================================================================
    op.create_table(
        'families',
        _id(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
    )

    op.create_table(
        'users',
        _id(),
        sa.Column(
            'family_id',
            sa.String(36),
            sa.ForeignKey('families.id', ondelete='RESTRICT'),
            nullable=False,
        ),
        sa.Column('email', sa.String(320), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('avatar', sa.String(500), nullable=True),
        sa.Column('role', sa.String(20), nullable=False, server_default=sa.text("'member'")),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.CheckConstraint("role IN ('admin', 'member')", name='ck_users_role_valid'),
    )
    op.create_index('idx_users_family_id', 'users', ['family_id'])

    # ==========================================================================
    # Feed
    # ==========================================================================
    op.create_table(
        'posts',
        _id(),
        _user_fk(),
        sa.Column(
            'family_id',
            sa.String(36),
            sa.ForeignKey('families.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(500), nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
    )
    op.create_index('idx_posts_family_created', 'posts', ['family_id', 'created_at'])
    op.create_index('idx_posts_user_id', 'posts', ['user_id'])

    op.create_table(
        'likes',
        _id(),
        _user_fk(),
        sa.Column(
            'post_id',
            sa.String(36),
            sa.ForeignKey('posts.id', ondelete='CASCADE'),
            nullable=False,
        ),
        _timestamp('created_at'),
        sa.UniqueConstraint('user_id', 'post_id', name='uq_likes_user_post'),
    )
    op.create_index('idx_likes_post_id', 'likes', ['post_id'])

    op.create_table(
        'comments',
        _id(),
        _user_fk(),
        sa.Column(
            'post_id',
            sa.String(36),
            sa.ForeignKey('posts.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('content', sa.Text(), nullable=False),
        _timestamp('created_at'),
        _timestamp('updated_at'),
    )
    op.create_index('idx_comments_post_created', 'comments', ['post_id', 'created_at'])

    # ==========================================================================
    # Messaging
    # ==========================================================================
    op.create_table(
        'messages',
        _id(),
        _user_fk('sender_id'),
        _user_fk('recipient_id'),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp('created_at'),
    )
    op.create_index('idx_messages_recipient_unread', 'messages', ['recipient_id', 'is_read'])
    op.create_index('idx_messages_pair', 'messages', ['sender_id', 'recipient_id'])

    op.create_table(
        'notifications',
        _id(),
        _user_fk(),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp('created_at'),
    )
    op.create_index(
        'idx_notif_user_unread', 'notifications', ['user_id', 'is_read', 'created_at']
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('notifications')
    op.drop_table('messages')
    op.drop_table('comments')
    op.drop_table('likes')
    op.drop_table('posts')
    op.drop_table('users')
    op.drop_table('families')
