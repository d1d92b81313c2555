"""add SM-2 scheduling columns to words

Revision ID: 9b3e5d8a6c21
Revises: 4f1a9c2b7d10
Create Date: 2026-10-14 21:37:08.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '9b3e5d8a6c21'
down_revision: Union[str, Sequence[str], None] = '4f1a9c2b7d10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add review_duration, ease_factor and repetition to words.

    Existing rows get ease 2.5 so their first review starts from a sane seed.
    """
    op.add_column('words', sa.Column('review_duration', sa.Integer(), nullable=True, server_default='0'))
    op.add_column('words', sa.Column('ease_factor', sa.Float(), nullable=True, server_default='2.5'))
    op.add_column('words', sa.Column('repetition', sa.Integer(), nullable=True, server_default='0'))


def downgrade() -> None:
    """Remove the SM-2 scheduling columns."""
    with op.batch_alter_table('words') as batch_op:
        batch_op.drop_column('repetition')
        batch_op.drop_column('ease_factor')
        batch_op.drop_column('review_duration')
