"""Add the albums_summary materialized view

PostgreSQL only. Other backends derive album summaries from photo_metadata
at query time. The core columns follow AlbumManager.albums_summary: every
photo with an album_key counts, the primary sport breaks ties alphabetically
and the cover is the highest emotional_impact photo, newest first.

Revision ID: 004
Revises: 003
Create Date: 2025-10-28 16:00:00.000000

"""
from alembic import op

# revision identifiers, used by Alembic.
revision = '004'
down_revision = '003'
branch_labels = None
depends_on = None


ALBUMS_SUMMARY_SQL = """
CREATE MATERIALIZED VIEW albums_summary AS
SELECT
  p.album_key,
  (ARRAY_AGG(p.album_name ORDER BY p.photo_date ASC NULLS FIRST, p.photo_id ASC)
    FILTER (WHERE p.album_name IS NOT NULL))[1] AS album_name,
  COUNT(*) AS photo_count,
  (SELECT s.sport_type
     FROM photo_metadata s
    WHERE s.album_key = p.album_key AND s.sport_type IS NOT NULL
    GROUP BY s.sport_type
    ORDER BY COUNT(*) DESC, s.sport_type ASC
    LIMIT 1) AS primary_sport,
  MIN(p.photo_date) AS earliest_date,
  MAX(p.photo_date) AS latest_date,
  (ARRAY_AGG(p.photo_id ORDER BY COALESCE(p.emotional_impact, -1) DESC,
                                 p.photo_date DESC NULLS LAST, p.photo_id ASC))[1] AS cover_photo_id,
  (ARRAY_AGG(COALESCE(p.thumbnail_url, p.image_url)
             ORDER BY COALESCE(p.emotional_impact, -1) DESC,
                      p.photo_date DESC NULLS LAST, p.photo_id ASC))[1] AS cover_image_url,
  COUNT(*) FILTER (WHERE p.enriched_at IS NOT NULL) AS enriched_count,
  ARRAY_AGG(DISTINCT p.sport_type)
    FILTER (WHERE p.sport_type IS NOT NULL AND p.sport_type != 'unknown') AS sports,
  ARRAY_AGG(DISTINCT p.photo_category)
    FILTER (WHERE p.photo_category IS NOT NULL AND p.photo_category != 'unknown') AS categories,
  COUNT(*) FILTER (WHERE p.sharpness >= 7) AS portfolio_count,
  ROUND(AVG(p.sharpness)::numeric, 2) AS avg_quality_score,
  MAX(p.upload_date) AS last_upload_date,
  MAX(p.enriched_at) AS last_enriched_at
FROM photo_metadata p
WHERE p.album_key IS NOT NULL
GROUP BY p.album_key
"""

REFRESH_FUNCTION_SQL = """
CREATE OR REPLACE FUNCTION refresh_albums_summary()
RETURNS void
LANGUAGE plpgsql
AS $$
BEGIN
  REFRESH MATERIALIZED VIEW CONCURRENTLY albums_summary;
END;
$$
"""


def _is_postgres() -> bool:
    return op.get_bind().dialect.name == 'postgresql'


def upgrade() -> None:
    """Create albums_summary, its indexes and refresh_albums_summary()."""
    if not _is_postgres():
        return

    op.execute(ALBUMS_SUMMARY_SQL)
    # CONCURRENTLY refresh needs a unique index
    op.execute("CREATE UNIQUE INDEX idx_albums_summary_album_key ON albums_summary(album_key)")
    op.execute("CREATE INDEX idx_albums_summary_photo_count ON albums_summary(photo_count DESC)")
    op.execute("CREATE INDEX idx_albums_summary_latest_date ON albums_summary(latest_date DESC)")
    op.execute("CREATE INDEX idx_albums_summary_primary_sport ON albums_summary(primary_sport)")
    op.execute(REFRESH_FUNCTION_SQL)


def downgrade() -> None:
    """Drop refresh_albums_summary() and albums_summary."""
    if not _is_postgres():
        return

    op.execute("DROP FUNCTION IF EXISTS refresh_albums_summary()")
    op.execute("DROP MATERIALIZED VIEW IF EXISTS albums_summary CASCADE")
