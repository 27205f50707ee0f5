"""Create cycles and cycle_days tables

Revision ID: 002
Revises: 001
Create Date: 2025-10-20 09:40:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None


def upgrade():
    """Create cycles and their daily entries (BBT stored in Fahrenheit)."""
    op.create_table('cycles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('cycle_number', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_cycles_user_active', 'cycles', ['user_id', 'is_active'])

    op.create_table('cycle_days',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('cycle_id', sa.Integer(), nullable=False),
        sa.Column('day_number', sa.Integer(), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('day_of_week', sa.String(length=10), nullable=False),
        sa.Column('bbt', sa.Float(), nullable=True),
        sa.Column('bbt_time', sa.String(length=5), nullable=True),
        sa.Column('exclude_from_interpretation', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('had_intercourse', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('cervical_appearance', sa.String(length=10), nullable=True),
        sa.Column('cervical_sensation', sa.String(length=10), nullable=True),
        sa.Column('menstrual_flow', sa.String(length=12), nullable=True),
        sa.Column('opk_result', sa.String(length=10), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['cycle_id'], ['cycles.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('cycle_id', 'day_number', name='uq_cycle_days_cycle_day_number')
    )
    op.create_index('ix_cycle_days_cycle_id', 'cycle_days', ['cycle_id'])
    op.create_index('idx_cycle_days_cycle_date', 'cycle_days', ['cycle_id', 'date'])


def downgrade():
    op.drop_index('idx_cycle_days_cycle_date', table_name='cycle_days')
    op.drop_index('ix_cycle_days_cycle_id', table_name='cycle_days')
    op.drop_table('cycle_days')

    op.drop_index('idx_cycles_user_active', table_name='cycles')
    op.drop_table('cycles')
