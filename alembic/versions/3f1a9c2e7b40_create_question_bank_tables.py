"""create_question_bank_tables

Revision ID: 3f1a9c2e7b40
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c2e7b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

QUESTION_TYPES = ['单选题', '多选题', '判断题', '填空题', '简答题']

# Los nombres siguen qbank.db.base.NAMING_CONVENTION


def upgrade() -> None:
    """Upgrade schema."""
    question_types = op.create_table(
        'question_types',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('type_name', sa.String(50), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_question_types'),
        sa.UniqueConstraint('type_name', name='uq_question_types_type_name'),
    )

    op.create_table(
        'sources',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('source_name', sa.String(255), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_sources'),
        sa.UniqueConstraint('source_name', name='uq_sources_source_name'),
    )

    op.create_table(
        'tags',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tag_name', sa.String(100), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_tags'),
        sa.UniqueConstraint('tag_name', name='uq_tags_tag_name'),
    )

    op.create_table(
        'questions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('type_id', sa.Integer(), nullable=False),
        sa.Column('stem', sa.Text(), nullable=False),
        sa.Column('answer', sa.Text(), nullable=True),
        sa.Column('explanation', sa.Text(), nullable=True),
        sa.Column('source_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_questions'),
        sa.ForeignKeyConstraint(
            ['type_id'], ['question_types.id'],
            name='fk_questions_type_id_question_types', ondelete='RESTRICT',
        ),
        sa.ForeignKeyConstraint(
            ['source_id'], ['sources.id'],
            name='fk_questions_source_id_sources', ondelete='RESTRICT',
        ),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_questions_type_id', 'questions', ['type_id'])
    op.create_index('ix_questions_source_id', 'questions', ['source_id'])
    op.create_index('ix_questions_created_at', 'questions', ['created_at'])

    op.create_table(
        'options',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('question_id', sa.Integer(), nullable=False),
        sa.Column('opt_label', sa.String(10), nullable=False),
        sa.Column('opt_content', sa.Text(), nullable=False),
        sa.Column('is_correct', sa.Boolean(), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_options'),
        sa.ForeignKeyConstraint(
            ['question_id'], ['questions.id'],
            name='fk_options_question_id_questions', ondelete='CASCADE',
        ),
        sa.UniqueConstraint('question_id', 'opt_label', name='uq_options_question_label'),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_options_question_id', 'options', ['question_id'])

    op.create_table(
        'question_tags',
        sa.Column('question_id', sa.Integer(), nullable=False),
        sa.Column('tag_id', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('question_id', 'tag_id', name='pk_question_tags'),
        sa.ForeignKeyConstraint(
            ['question_id'], ['questions.id'],
            name='fk_question_tags_question_id_questions', ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['tag_id'], ['tags.id'],
            name='fk_question_tags_tag_id_tags', ondelete='RESTRICT',
        ),
    )
    op.create_index('ix_question_tags_tag_id', 'question_tags', ['tag_id'])

    op.create_table(
        'materials',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('source_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint('id', name='pk_materials'),
        sa.ForeignKeyConstraint(
            ['source_id'], ['sources.id'],
            name='fk_materials_source_id_sources', ondelete='SET NULL',
        ),
        sqlite_autoincrement=True,
    )
    op.create_index('ix_materials_source_id', 'materials', ['source_id'])

    op.create_table(
        'material_questions',
        sa.Column('material_id', sa.Integer(), nullable=False),
        sa.Column('question_id', sa.Integer(), nullable=False),
        sa.Column('sub_no', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('material_id', 'question_id', name='pk_material_questions'),
        sa.ForeignKeyConstraint(
            ['material_id'], ['materials.id'],
            name='fk_material_questions_material_id_materials', ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['question_id'], ['questions.id'],
            name='fk_material_questions_question_id_questions', ondelete='CASCADE',
        ),
    )
    op.create_index('ix_material_questions_question_id', 'material_questions', ['question_id'])

    # Tipos de pregunta iniciales
    op.bulk_insert(question_types, [{'type_name': name} for name in QUESTION_TYPES])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_material_questions_question_id', table_name='material_questions')
    op.drop_table('material_questions')
    op.drop_index('ix_materials_source_id', table_name='materials')
    op.drop_table('materials')
    op.drop_index('ix_question_tags_tag_id', table_name='question_tags')
    op.drop_table('question_tags')
    op.drop_index('ix_options_question_id', table_name='options')
    op.drop_table('options')
    op.drop_index('ix_questions_created_at', table_name='questions')
    op.drop_index('ix_questions_source_id', table_name='questions')
    op.drop_index('ix_questions_type_id', table_name='questions')
    op.drop_table('questions')
    op.drop_table('tags')
    op.drop_table('sources')
    op.drop_table('question_types')
