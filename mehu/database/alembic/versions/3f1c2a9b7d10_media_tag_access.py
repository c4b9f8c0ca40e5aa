"""media, tag and access

Revision ID: 3f1c2a9b7d10
Revises:
Create Date: 2026-10-19 09:12:41.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f1c2a9b7d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'media',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('date_created', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('file_reference', sa.Text(), nullable=False),
        sa.Column('media_kind', sa.Enum('photo', 'animated_gif', 'video_loop', name='media_kind',
                                        native_enum=False, length=32), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_media')),
        sa.UniqueConstraint('file_reference', 'media_kind', name='uq_media_file_reference_kind'),
    )
    op.create_table(
        'tag',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('date_created', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('media_id', sa.Integer(), nullable=False),
        sa.Column('tag_text', sa.Text(), nullable=False),
        sa.Column('counter', sa.Integer(), server_default=sa.text('0'), nullable=False),
        sa.CheckConstraint('counter >= 0', name=op.f('ck_tag_counter_non_negative')),
        sa.ForeignKeyConstraint(['media_id'], ['media.id'],
                                name=op.f('fk_tag_media_id_media'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_tag')),
        sa.UniqueConstraint('media_id', 'tag_text', name='uq_tag_media_tag_text'),
    )
    op.create_index('ix_tag_tag_text', 'tag', ['tag_text'], unique=False)
    op.create_table(
        'access',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('date_created', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('media_id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.BigInteger(), nullable=False),
        sa.Column('owner_kind', sa.Enum('user', 'group', name='owner_kind',
                                        native_enum=False, length=16), nullable=False),
        sa.ForeignKeyConstraint(['media_id'], ['media.id'],
                                name=op.f('fk_access_media_id_media'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_access')),
        sa.UniqueConstraint('media_id', 'owner_id', name='uq_access_media_owner'),
    )


def downgrade() -> None:
    op.drop_table('access')
    op.drop_index('ix_tag_tag_text', table_name='tag')
    op.drop_table('tag')
    op.drop_table('media')
