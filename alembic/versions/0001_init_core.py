"""courses, surveys, questions, responses, answers

Revision ID: 0001_init_core
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = '0001_init_core'
down_revision = None
branch_labels = None
depends_on = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade():
    op.create_table(
        'courses',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('admin_id', sa.String(), nullable=False, index=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('objectives', sa.Text(), nullable=True),
        sa.Column('content', sa.Text(), nullable=True),
        sa.Column('instructor', sa.String(), nullable=True),
        sa.Column('training_start_date', sa.Date(), nullable=True),
        sa.Column('training_end_date', sa.Date(), nullable=True),
        sa.Column('target_participants', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        'surveys',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('course_id', sa.Uuid(), sa.ForeignKey('courses.id'), nullable=True, index=True),
        sa.Column('admin_id', sa.String(), nullable=False, index=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='draft', index=True),
        sa.Column('unique_code', sa.String(16), nullable=False, unique=True, index=True),
        sa.Column('scale_type', sa.Integer(), nullable=False, server_default='5'),
        sa.Column('is_anonymous', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('ai_summary', sa.Text(), nullable=True),
        sa.Column('ai_insights', JSONType, nullable=True),
        sa.Column('ai_recommendations', JSONType, nullable=True),
        sa.Column('ai_analyzed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('closed_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("status IN ('draft','active','closed')", name='ck_surveys_status'),
        sa.CheckConstraint("scale_type IN (5,7,9,10)", name='ck_surveys_scale_type'),
    )

    op.create_table(
        'questions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('survey_id', sa.Uuid(), sa.ForeignKey('surveys.id'), nullable=False, index=True),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('category', sa.String(), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('order_num', sa.Integer(), nullable=False),
        sa.Column('is_required', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("type IN ('choice','text')", name='ck_questions_type'),
    )

    op.create_table(
        'responses',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('survey_id', sa.Uuid(), sa.ForeignKey('surveys.id'), nullable=False, index=True),
        sa.Column('session_id', sa.String(64), nullable=False),
        sa.Column('respondent_name', sa.String(), nullable=True),
        sa.Column('device_info', JSONType, nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), index=True),
        sa.UniqueConstraint('survey_id', 'session_id', name='uq_responses_survey_session'),
    )

    op.create_table(
        'answers',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('response_id', sa.Uuid(), sa.ForeignKey('responses.id'), nullable=False, index=True),
        sa.Column('question_id', sa.Uuid(), sa.ForeignKey('questions.id'), nullable=False, index=True),
        sa.Column('score_value', sa.Integer(), nullable=True),
        sa.Column('text_value', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "(score_value IS NULL) <> (text_value IS NULL)", name='ck_answers_one_value'
        ),
    )


def downgrade():
    op.drop_table('answers')
    op.drop_table('responses')
    op.drop_table('questions')
    op.drop_table('surveys')
    op.drop_table('courses')
