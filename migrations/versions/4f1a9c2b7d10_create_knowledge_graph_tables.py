"""create words, sentences and word_sentence tables

Revision ID: 4f1a9c2b7d10
Revises:
Create Date: 2026-10-12 10:04:31.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4f1a9c2b7d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the word/sentence graph."""
    op.create_table('sentences',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('text')
    )

    op.create_table('words',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('text', sa.String(), nullable=False),
        sa.Column('count', sa.Integer(), nullable=True, server_default='1'),
        sa.Column('frequency_rank', sa.Integer(), nullable=False),
        sa.Column('reviewed', sa.Boolean(), nullable=True, server_default='0'),
        sa.Column('next_review_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('text')
    )

    op.create_table('word_sentence',
        sa.Column('word_id', sa.Integer(), nullable=False),
        sa.Column('sentence_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['word_id'], ['words.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['sentence_id'], ['sentences.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('word_id', 'sentence_id')
    )
    op.create_index('word_index', 'word_sentence', ['word_id'])
    op.create_index('sentence_index', 'word_sentence', ['sentence_id'])


def downgrade() -> None:
    """Drop the word/sentence graph."""
    op.drop_index('sentence_index', table_name='word_sentence')
    op.drop_index('word_index', table_name='word_sentence')
    op.drop_table('word_sentence')
    op.drop_table('words')
    op.drop_table('sentences')
