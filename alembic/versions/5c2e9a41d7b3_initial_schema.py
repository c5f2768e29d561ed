"""initial_schema

Revision ID: 5c2e9a41d7b3
Revises:
Create Date: 2026-10-19 10:12:03.418264

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5c2e9a41d7b3'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(with_created: bool = True):
    columns = []
    if with_created:
        columns.append(sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False))
    columns.append(sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False))
    return columns


def upgrade() -> None:
    op.create_table(
        'galleries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('slug', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_main', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('folder_name', sa.String(), nullable=False),
        sa.Column('display_order', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('folder_name'),
    )
    op.create_index(op.f('ix_galleries_id'), 'galleries', ['id'], unique=False)
    op.create_index(op.f('ix_galleries_slug'), 'galleries', ['slug'], unique=True)
    op.create_index(op.f('ix_galleries_display_order'), 'galleries', ['display_order'], unique=False)
    # Only one gallery may be flagged as main
    op.create_index(
        'uq_galleries_single_main',
        'galleries',
        ['is_main'],
        unique=True,
        sqlite_where=sa.text('is_main = 1'),
        postgresql_where=sa.text('is_main'),
    )

    op.create_table(
        'paintings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('gallery_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('technique', sa.String(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('dimensions', sa.String(), nullable=True),
        sa.Column('medium', sa.String(), nullable=True),
        sa.Column('image_filename', sa.String(), nullable=False),
        sa.Column('thumbnail_filename', sa.String(), nullable=False),
        sa.Column('display_order', sa.Integer(), nullable=False),
        sa.Column('is_visible', sa.Boolean(), server_default=sa.true(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['gallery_id'], ['galleries.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_paintings_id'), 'paintings', ['id'], unique=False)
    op.create_index(op.f('ix_paintings_gallery_id'), 'paintings', ['gallery_id'], unique=False)
    op.create_index(op.f('ix_paintings_display_order'), 'paintings', ['display_order'], unique=False)

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('google_id', sa.String(), nullable=True),
        sa.Column('reset_token', sa.String(), nullable=True),
        sa.Column('reset_token_expires', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table(
        'resume_content',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('section_key', sa.String(), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('section_order', sa.Integer(), nullable=False),
        *_timestamps(with_created=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_resume_content_id'), 'resume_content', ['id'], unique=False)
    op.create_index(op.f('ix_resume_content_section_key'), 'resume_content', ['section_key'], unique=True)

    op.create_table(
        'timeline_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('date_range', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('items', sa.Text(), nullable=True),
        sa.Column('display_order', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_timeline_entries_id'), 'timeline_entries', ['id'], unique=False)
    op.create_index(op.f('ix_timeline_entries_display_order'), 'timeline_entries', ['display_order'], unique=False)

    op.create_table(
        'expertise_areas',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('icon', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('display_order', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_expertise_areas_id'), 'expertise_areas', ['id'], unique=False)
    op.create_index(op.f('ix_expertise_areas_display_order'), 'expertise_areas', ['display_order'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_expertise_areas_display_order'), table_name='expertise_areas')
    op.drop_index(op.f('ix_expertise_areas_id'), table_name='expertise_areas')
    op.drop_table('expertise_areas')

    op.drop_index(op.f('ix_timeline_entries_display_order'), table_name='timeline_entries')
    op.drop_index(op.f('ix_timeline_entries_id'), table_name='timeline_entries')
    op.drop_table('timeline_entries')

    op.drop_index(op.f('ix_resume_content_section_key'), table_name='resume_content')
    op.drop_index(op.f('ix_resume_content_id'), table_name='resume_content')
    op.drop_table('resume_content')

    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_index(op.f('ix_users_id'), table_name='users')
    op.drop_table('users')

    op.drop_index(op.f('ix_paintings_display_order'), table_name='paintings')
    op.drop_index(op.f('ix_paintings_gallery_id'), table_name='paintings')
    op.drop_index(op.f('ix_paintings_id'), table_name='paintings')
    op.drop_table('paintings')

    op.drop_index('uq_galleries_single_main', table_name='galleries')
    op.drop_index(op.f('ix_galleries_display_order'), table_name='galleries')
    op.drop_index(op.f('ix_galleries_slug'), table_name='galleries')
    op.drop_index(op.f('ix_galleries_id'), table_name='galleries')
    op.drop_table('galleries')
