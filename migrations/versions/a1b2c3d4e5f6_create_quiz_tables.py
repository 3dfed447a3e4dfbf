"""create_quiz_tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19 10:12:41.208113

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = 'a1b2c3d4e5f6'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    """사용자, 교육 게시물, 문제, 결과, 주관식 답변, 재시험, 오답 복습 테이블 생성"""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='manager'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)

    op.create_table(
        'educational_posts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('content', sa.Text(), nullable=False, server_default=''),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_educational_posts_category'), 'educational_posts', ['category'], unique=False)

    op.create_table(
        'test_questions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('sub_category', sa.String(length=100), nullable=True),
        sa.Column('question', sa.Text(), nullable=False),
        sa.Column(
            'question_image_urls',
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column('question_type', sa.String(length=20), nullable=False, server_default='multiple_choice'),
        sa.Column('options', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('correct_answer', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('grading_criteria', sa.Text(), nullable=True),
        sa.Column('model_answer', sa.Text(), nullable=True),
        sa.Column('max_score', sa.Integer(), nullable=False, server_default='10'),
        sa.Column('related_post_id', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('max_score > 0', name='ck_test_questions_max_score_positive'),
        sa.CheckConstraint(
            "question_type IN ('multiple_choice', 'subjective')",
            name='ck_test_questions_question_type',
        ),
        sa.ForeignKeyConstraint(['related_post_id'], ['educational_posts.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_test_questions_category'), 'test_questions', ['category'], unique=False)
    op.create_index(op.f('ix_test_questions_related_post_id'), 'test_questions', ['related_post_id'], unique=False)

    op.create_table(
        'test_results',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('correct_count', sa.Integer(), nullable=False),
        sa.Column('total_count', sa.Integer(), nullable=False),
        sa.Column(
            'category_scores',
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column('test_date', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('score >= 0 AND score <= 100', name='ck_test_results_score_range'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_test_results_user_id'), 'test_results', ['user_id'], unique=False)
    op.create_index(op.f('ix_test_results_test_date'), 'test_results', ['test_date'], unique=False)

    op.create_table(
        'subjective_answers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('question_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('test_result_id', sa.Integer(), nullable=True),
        sa.Column('answer_text', sa.Text(), nullable=True),
        sa.Column('image_url', sa.Text(), nullable=True),
        sa.Column('ai_score', sa.Float(), nullable=True),
        sa.Column('ai_feedback', sa.Text(), nullable=True),
        sa.Column('ai_graded_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('admin_score', sa.Float(), nullable=True),
        sa.Column('admin_feedback', sa.Text(), nullable=True),
        sa.Column('admin_reviewer_id', sa.Integer(), nullable=True),
        sa.Column('admin_reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('final_score', sa.Float(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('pending', 'ai_graded', 'admin_reviewed')",
            name='ck_subjective_answers_status',
        ),
        sa.ForeignKeyConstraint(['question_id'], ['test_questions.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['test_result_id'], ['test_results.id'], ),
        sa.ForeignKeyConstraint(['admin_reviewer_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_subjective_answers_question_id'), 'subjective_answers', ['question_id'], unique=False)
    op.create_index(op.f('ix_subjective_answers_user_id'), 'subjective_answers', ['user_id'], unique=False)
    op.create_index(op.f('ix_subjective_answers_test_result_id'), 'subjective_answers', ['test_result_id'], unique=False)
    op.create_index(op.f('ix_subjective_answers_status'), 'subjective_answers', ['status'], unique=False)

    op.create_table(
        'retest_assignments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('admin_id', sa.Integer(), nullable=False),
        sa.Column('manager_id', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('question_ids', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("status IN ('pending', 'completed')", name='ck_retest_assignments_status'),
        sa.ForeignKeyConstraint(['admin_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['manager_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_retest_assignments_manager_id'), 'retest_assignments', ['manager_id'], unique=False)
    op.create_index(op.f('ix_retest_assignments_status'), 'retest_assignments', ['status'], unique=False)

    op.create_table(
        'wrong_answer_reviews',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('test_result_id', sa.Integer(), nullable=False),
        sa.Column('question_id', sa.Integer(), nullable=False),
        sa.Column('original_answer', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('review_answer', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('is_correct_on_review', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['test_result_id'], ['test_results.id'], ),
        sa.ForeignKeyConstraint(['question_id'], ['test_questions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_wrong_answer_reviews_user_id'), 'wrong_answer_reviews', ['user_id'], unique=False)
    op.create_index(
        op.f('ix_wrong_answer_reviews_test_result_id'), 'wrong_answer_reviews', ['test_result_id'], unique=False
    )


def downgrade() -> None:
    """전체 테이블 제거 (생성 역순)"""
    op.drop_index(op.f('ix_wrong_answer_reviews_test_result_id'), table_name='wrong_answer_reviews')
    op.drop_index(op.f('ix_wrong_answer_reviews_user_id'), table_name='wrong_answer_reviews')
    op.drop_table('wrong_answer_reviews')

    op.drop_index(op.f('ix_retest_assignments_status'), table_name='retest_assignments')
    op.drop_index(op.f('ix_retest_assignments_manager_id'), table_name='retest_assignments')
    op.drop_table('retest_assignments')

    op.drop_index(op.f('ix_subjective_answers_status'), table_name='subjective_answers')
    op.drop_index(op.f('ix_subjective_answers_test_result_id'), table_name='subjective_answers')
    op.drop_index(op.f('ix_subjective_answers_user_id'), table_name='subjective_answers')
    op.drop_index(op.f('ix_subjective_answers_question_id'), table_name='subjective_answers')
    op.drop_table('subjective_answers')

    op.drop_index(op.f('ix_test_results_test_date'), table_name='test_results')
    op.drop_index(op.f('ix_test_results_user_id'), table_name='test_results')
    op.drop_table('test_results')

    op.drop_index(op.f('ix_test_questions_related_post_id'), table_name='test_questions')
    op.drop_index(op.f('ix_test_questions_category'), table_name='test_questions')
    op.drop_table('test_questions')

    op.drop_index(op.f('ix_educational_posts_category'), table_name='educational_posts')
    op.drop_table('educational_posts')

    op.drop_index(op.f('ix_users_username'), table_name='users')
    op.drop_table('users')
