"""Schema v2: two-bucket model

Adds lighting and color temperature to the search filters, game timing,
athlete and event links plus AI confidence to the internal metadata, and
range checks on every score.

Revision ID: 003
Revises: 002
Create Date: 2025-10-27 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '003'
down_revision = '002'
branch_labels = None
depends_on = None


SCORE_CHECKS = [
    ('ck_sharpness_range', 'sharpness IS NULL OR (sharpness >= 0 AND sharpness <= 10)'),
    ('ck_composition_score_range',
     'composition_score IS NULL OR (composition_score >= 0 AND composition_score <= 10)'),
    ('ck_exposure_accuracy_range',
     'exposure_accuracy IS NULL OR (exposure_accuracy >= 0 AND exposure_accuracy <= 10)'),
    ('ck_emotional_impact_range',
     'emotional_impact IS NULL OR (emotional_impact >= 0 AND emotional_impact <= 10)'),
    ('ck_ai_confidence_range', 'ai_confidence IS NULL OR (ai_confidence >= 0 AND ai_confidence <= 1)'),
    ('ck_ai_cost_positive', 'ai_cost IS NULL OR ai_cost >= 0'),
]


def upgrade() -> None:
    """Add the schema v2 columns, indexes and score range checks."""
    with op.batch_alter_table('photo_metadata') as batch_op:
        # Bucket 1: user-facing filters
        batch_op.add_column(sa.Column('lighting', sa.String(50), nullable=True))
        batch_op.add_column(sa.Column('color_temperature', sa.String(20), nullable=True))

        # Bucket 2: internal story metadata
        batch_op.add_column(sa.Column('time_in_game', sa.String(20), nullable=True))
        batch_op.add_column(sa.Column('athlete_id', sa.String(100), nullable=True))
        batch_op.add_column(sa.Column('event_id', sa.String(64), nullable=True))
        batch_op.add_column(sa.Column('ai_confidence', sa.Float(), nullable=True))

        for name, condition in SCORE_CHECKS:
            batch_op.create_check_constraint(name, condition)

    op.create_index('idx_photo_lighting', 'photo_metadata', ['lighting'])
    op.create_index('idx_photo_action_aesthetic', 'photo_metadata',
                    ['play_type', 'time_of_day', 'composition', 'lighting'])


def downgrade() -> None:
    """Remove the schema v2 additions."""
    op.drop_index('idx_photo_action_aesthetic', table_name='photo_metadata')
    op.drop_index('idx_photo_lighting', table_name='photo_metadata')

    with op.batch_alter_table('photo_metadata') as batch_op:
        for name, _ in reversed(SCORE_CHECKS):
            batch_op.drop_constraint(name, type_='check')
        for column in ('ai_confidence', 'event_id', 'athlete_id', 'time_in_game',
                       'color_temperature', 'lighting'):
            batch_op.drop_column(column)
