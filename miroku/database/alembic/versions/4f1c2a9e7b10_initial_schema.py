"""initial schema: movies, people, credits, tags, watch logs

Revision ID: 4f1c2a9e7b10
Revises:
Create Date: 2026-10-19 10:12:41.208113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from miroku.common.settings import get_settings

# revision identifiers, used by Alembic.
revision: str = '4f1c2a9e7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

SCHEMA = get_settings().db_schema

JSON = sa.JSON().with_variant(postgresql.JSONB(astext_type=sa.Text()), 'postgresql')


def _ref(table: str) -> str:
    return f"{SCHEMA}.{table}.id" if SCHEMA else f"{table}.id"


def _service_columns():
    return [
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('date_created', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('last_updated', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('data_origin', sa.Text(), nullable=True),
        sa.Column('meta_data', JSON, nullable=True),
    ]


def upgrade() -> None:
    credit_role = sa.Enum('director', 'writer', 'cast', name='credit_role')
    watch_method = sa.Enum('theater', 'tv', 'streaming', 'bluray_dvd', 'other', name='watch_method')
    watch_score = sa.Enum('bad', 'neutral', 'good', name='watch_score')

    # 1) movies
    op.create_table(
        'movie',
        *_service_columns(),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('external_ref', sa.Integer(), nullable=True),
        sa.Column('snapshot_title', sa.Text(), nullable=True),
        sa.Column('snapshot_poster_ref', sa.Text(), nullable=True),
        sa.Column('snapshot_release_date', sa.String(length=10), nullable=True),
        sa.Column('snapshot_countries', JSON, nullable=True),
        sa.Column('override_title', sa.Text(), nullable=True),
        sa.Column('override_poster_ref', sa.Text(), nullable=True),
        sa.Column('override_release_date', sa.String(length=10), nullable=True),
        sa.Column('override_countries', JSON, nullable=True),
        sa.Column('watch_count', sa.Integer(), server_default=sa.text('0'), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_movie')),
        sa.UniqueConstraint('owner_id', 'external_ref', name='uq_movie_owner_external_ref'),
        schema=SCHEMA
    )
    op.create_index('ix_movie_owner_id', 'movie', ['owner_id'], unique=False, schema=SCHEMA)
    op.create_index('ix_movie_owner_created', 'movie', ['owner_id', 'date_created'], unique=False, schema=SCHEMA)

    # 2) people (self-referencing tombstone pointer)
    op.create_table(
        'people',
        *_service_columns(),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('external_id', sa.Integer(), nullable=True),
        sa.Column('display_name', sa.String(length=255), nullable=False),
        sa.Column('merged_into_id', sa.Uuid(), nullable=True),
        sa.ForeignKeyConstraint(['merged_into_id'], [_ref('people')],
                                name=op.f('fk_people_merged_into_id_people')),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_people')),
        schema=SCHEMA
    )
    op.create_index('ix_people_owner_id', 'people', ['owner_id'], unique=False, schema=SCHEMA)
    op.create_index('ix_people_owner_external', 'people', ['owner_id', 'external_id'], unique=False, schema=SCHEMA)
    op.create_index('ix_people_owner_display_name', 'people', ['owner_id', 'display_name'], unique=False, schema=SCHEMA)
    op.create_index('ix_people_merged_into_id', 'people', ['merged_into_id'], unique=False, schema=SCHEMA)

    # 3) credits
    op.create_table(
        'credit',
        *_service_columns(),
        sa.Column('movie_id', sa.Uuid(), nullable=False),
        sa.Column('person_id', sa.Uuid(), nullable=False),
        sa.Column('role', credit_role, nullable=False),
        sa.Column('cast_order', sa.Integer(), nullable=True),
        sa.Column('seq', sa.Integer(), server_default=sa.text('0'), nullable=False),
        sa.ForeignKeyConstraint(['movie_id'], [_ref('movie')],
                                name=op.f('fk_credit_movie_id_movie'), ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['person_id'], [_ref('people')],
                                name=op.f('fk_credit_person_id_people'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_credit')),
        sa.UniqueConstraint('movie_id', 'role', 'person_id', name='uq_credit_movie_role_person'),
        schema=SCHEMA
    )
    op.create_index('ix_credit_movie_role', 'credit', ['movie_id', 'role'], unique=False, schema=SCHEMA)
    op.create_index('ix_credit_person_id', 'credit', ['person_id'], unique=False, schema=SCHEMA)

    # 4) tags
    op.create_table(
        'tag',
        *_service_columns(),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=128), nullable=False),
        sa.Column('color', sa.String(length=16), nullable=True),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_tag')),
        sa.UniqueConstraint('owner_id', 'name', name='uq_tag_owner_name'),
        schema=SCHEMA
    )
    op.create_index('ix_tag_owner_id', 'tag', ['owner_id'], unique=False, schema=SCHEMA)
    op.create_table(
        'movie_tag',
        sa.Column('movie_id', sa.Uuid(), nullable=False),
        sa.Column('tag_id', sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(['movie_id'], [_ref('movie')],
                                name=op.f('fk_movie_tag_movie_id_movie'), ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tag_id'], [_ref('tag')],
                                name=op.f('fk_movie_tag_tag_id_tag'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('movie_id', 'tag_id', name=op.f('pk_movie_tag')),
        sa.UniqueConstraint('movie_id', 'tag_id', name='uq_movie_tag_movie_tag'),
        schema=SCHEMA
    )
    op.create_index('ix_movie_tag_tag_id', 'movie_tag', ['tag_id'], unique=False, schema=SCHEMA)

    # 5) watch logs
    op.create_table(
        'watch_log',
        *_service_columns(),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('movie_id', sa.Uuid(), nullable=False),
        sa.Column('watched_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('watch_method', watch_method, nullable=False),
        sa.Column('score', watch_score, nullable=True),
        sa.Column('memo', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['movie_id'], [_ref('movie')],
                                name=op.f('fk_watch_log_movie_id_movie'), ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name=op.f('pk_watch_log')),
        schema=SCHEMA
    )
    op.create_index('ix_watch_log_owner_watched_at', 'watch_log', ['owner_id', 'watched_at'], unique=False, schema=SCHEMA)
    op.create_index('ix_watch_log_movie_id', 'watch_log', ['movie_id'], unique=False, schema=SCHEMA)


def downgrade() -> None:
    op.drop_table('watch_log', schema=SCHEMA)
    op.drop_table('movie_tag', schema=SCHEMA)
    op.drop_table('tag', schema=SCHEMA)
    op.drop_table('credit', schema=SCHEMA)
    op.drop_table('people', schema=SCHEMA)
    op.drop_table('movie', schema=SCHEMA)
    bind = op.get_bind()
    for name in ('watch_score', 'watch_method', 'credit_role'):
        sa.Enum(name=name).drop(bind, checkfirst=True)
