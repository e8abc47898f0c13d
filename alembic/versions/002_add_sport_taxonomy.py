"""Add sport taxonomy and search filter columns

Revision ID: 002
Revises: 001
Create Date: 2025-10-22 14:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None


FILTER_COLUMNS = [
    ('sport_type', sa.String(50)),
    ('photo_category', sa.String(50)),
    ('play_type', sa.String(50)),
    ('action_type', sa.String(100)),
    ('action_intensity', sa.String(20)),
    ('composition', sa.String(50)),
    ('time_of_day', sa.String(50)),
    ('emotion', sa.String(50)),
    ('sharpness', sa.Float()),
    ('composition_score', sa.Float()),
    ('exposure_accuracy', sa.Float()),
    ('emotional_impact', sa.Float()),
    ('collection_slug', sa.String(100)),
    ('ai_provider', sa.String(50)),
    ('ai_cost', sa.Float()),
    ('enriched_at', sa.DateTime()),
]


def upgrade() -> None:
    """Add the first-pass enrichment columns and their indexes."""
    with op.batch_alter_table('photo_metadata') as batch_op:
        for name, type_ in FILTER_COLUMNS:
            batch_op.add_column(sa.Column(name, type_, nullable=True))

    op.create_index('idx_sport_type', 'photo_metadata', ['sport_type'])
    op.create_index('idx_photo_category', 'photo_metadata', ['photo_category'])
    op.create_index('idx_category_emotion', 'photo_metadata', ['photo_category', 'emotion'])
    op.create_index('ix_photo_metadata_collection_slug', 'photo_metadata', ['collection_slug'])


def downgrade() -> None:
    """Remove the first-pass enrichment columns."""
    op.drop_index('ix_photo_metadata_collection_slug', table_name='photo_metadata')
    op.drop_index('idx_category_emotion', table_name='photo_metadata')
    op.drop_index('idx_photo_category', table_name='photo_metadata')
    op.drop_index('idx_sport_type', table_name='photo_metadata')

    with op.batch_alter_table('photo_metadata') as batch_op:
        for name, _ in reversed(FILTER_COLUMNS):
            batch_op.drop_column(name)
