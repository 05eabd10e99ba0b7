"""initial schema: users, brands, analysis_runs, generated_docs

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-10-18 10:00:00.000000
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = '1a2b3c4d5e6f'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    op.create_table('users',
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=255), nullable=False),
        sa.Column('display_name', sa.String(length=100), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('is_verified', sa.Boolean(), nullable=True),
        sa.Column('google_refresh_token', sa.LargeBinary(), nullable=True),
        sa.Column('google_email', sa.String(length=255), nullable=True),
        sa.Column('google_connected_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('id', sa.UUID(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table('brands',
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('source_url', sa.String(length=2048), nullable=False),
        sa.Column('name', sa.Text(), nullable=True),
        sa.Column('scrape_status', sa.String(length=20), nullable=False),
        sa.Column('scraped_content', sa.Text(), nullable=True),
        sa.Column('scraped_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('scrape_error', sa.Text(), nullable=True),
        sa.Column('is_own_brand', sa.Boolean(), nullable=True),
        sa.Column('id', sa.UUID(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_brands_user_id', 'brands', ['user_id'])

    op.create_table('analysis_runs',
        sa.Column('brand_id', sa.UUID(), nullable=False),
        sa.Column('analyzer_type', sa.String(length=50), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('raw_analysis', sa.Text(), nullable=True),
        sa.Column('parsed_data', postgresql.JSONB(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('retry_count', sa.Integer(), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('id', sa.UUID(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['brand_id'], ['brands.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('brand_id', 'analyzer_type', name='uq_analysis_runs_brand_analyzer'),
    )
    op.create_index('ix_analysis_runs_brand_id', 'analysis_runs', ['brand_id'])

    op.create_table('generated_docs',
        sa.Column('brand_id', sa.UUID(), nullable=False),
        sa.Column('template_id', sa.String(length=50), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('content', postgresql.JSONB(), nullable=True),
        sa.Column('content_markdown', sa.Text(), nullable=True),
        sa.Column('source_data', postgresql.JSONB(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('google_doc_id', sa.String(length=255), nullable=True),
        sa.Column('google_doc_url', sa.String(length=500), nullable=True),
        sa.Column('google_exported_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('id', sa.UUID(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['brand_id'], ['brands.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_generated_docs_brand_id', 'generated_docs', ['brand_id'])
    op.create_index('ix_generated_docs_brand_template', 'generated_docs', ['brand_id', 'template_id'])


def downgrade() -> None:
    op.drop_index('ix_generated_docs_brand_template', table_name='generated_docs')
    op.drop_index('ix_generated_docs_brand_id', table_name='generated_docs')
    op.drop_table('generated_docs')
    op.drop_index('ix_analysis_runs_brand_id', table_name='analysis_runs')
    op.drop_table('analysis_runs')
    op.drop_index('ix_brands_user_id', table_name='brands')
    op.drop_table('brands')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
