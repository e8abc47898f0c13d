"""Create the photo_metadata table

Revision ID: 001
Revises: 
Create Date: 2025-10-20 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create the flat photo_metadata table with identity, URLs and dates."""

    op.create_table(
        'photo_metadata',
        sa.Column('photo_id', sa.String(64), nullable=False),
        sa.Column('image_key', sa.String(64), nullable=False),

        # Image URLs
        sa.Column('image_url', sa.Text(), nullable=False),
        sa.Column('thumbnail_url', sa.Text(), nullable=True),
        sa.Column('original_url', sa.Text(), nullable=True),

        # Descriptive
        sa.Column('title', sa.Text(), nullable=True),
        sa.Column('caption', sa.Text(), nullable=True),
        sa.Column('keywords', sa.JSON().with_variant(JSONB, 'postgresql'), nullable=True),

        # Album association
        sa.Column('album_key', sa.String(64), nullable=True),
        sa.Column('album_name', sa.Text(), nullable=True),

        # Timestamps
        sa.Column('photo_date', sa.DateTime(), nullable=True),
        sa.Column('upload_date', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=True),

        sa.PrimaryKeyConstraint('photo_id'),
        sa.UniqueConstraint('image_key'),
    )

    op.create_index('ix_photo_metadata_album_key', 'photo_metadata', ['album_key'])
    op.create_index('idx_photo_date', 'photo_metadata', ['photo_date'])


def downgrade() -> None:
    """Drop the photo_metadata table."""
    op.drop_index('idx_photo_date', table_name='photo_metadata')
    op.drop_index('ix_photo_metadata_album_key', table_name='photo_metadata')
    op.drop_table('photo_metadata')
