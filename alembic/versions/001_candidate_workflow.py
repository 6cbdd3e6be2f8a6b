"""Create candidate workflow tables

Revision ID: 001_candidate_workflow
Revises: 
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_candidate_workflow'
down_revision = None
branch_labels = None
depends_on = None


def _id_column() -> sa.Column:
    return sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=True)


def _created_at() -> sa.Column:
    return sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())


def _updated_at() -> sa.Column:
    return sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())


def upgrade() -> None:
    """Create interviews, responses, assessments, workflow, ATS and outbox tables."""
    op.create_table(
        'interviews',
        _id_column(),
        sa.Column('organization_id', sa.String(length=64), nullable=True),
        sa.Column('user_id', sa.String(length=64), nullable=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_interviews_organization_id', 'interviews', ['organization_id'])

    op.create_table(
        'responses',
        _id_column(),
        sa.Column('interview_id', sa.BigInteger(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('candidate_status', sa.String(length=50), nullable=False),
        sa.Column('status_version', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.Column('tab_switch_count', sa.Integer(), nullable=True),
        sa.Column('analytics', sa.JSON(), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('is_analysed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_ended', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_viewed', sa.Boolean(), nullable=False, server_default=sa.false()),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(['interview_id'], ['interviews.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_responses_interview_id', 'responses', ['interview_id'])
    op.create_index('ix_responses_email', 'responses', ['email'])
    op.create_index('ix_responses_candidate_status', 'responses', ['candidate_status'])
    op.create_index('idx_responses_interview_status', 'responses', ['interview_id', 'candidate_status'])

    op.create_table(
        'candidate_profiles',
        _id_column(),
        sa.Column('response_id', sa.BigInteger(), nullable=False),
        sa.Column('resume_url', sa.String(length=1024), nullable=True),
        sa.Column('linkedin_url', sa.String(length=1024), nullable=True),
        sa.Column('github_url', sa.String(length=1024), nullable=True),
        sa.Column('portfolio_url', sa.String(length=1024), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('expected_salary', sa.String(length=100), nullable=True),
        sa.Column('notice_period', sa.String(length=100), nullable=True),
        sa.Column('skills', sa.JSON(), nullable=True),
        sa.Column('experience_years', sa.Integer(), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('education', sa.JSON(), nullable=True),
        sa.Column('work_experience', sa.JSON(), nullable=True),
        sa.Column('ai_generated_summary', sa.Text(), nullable=True),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(['response_id'], ['responses.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('response_id'),
    )

    op.create_table(
        'skill_assessments',
        _id_column(),
        sa.Column('interview_id', sa.BigInteger(), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('assessment_type', sa.String(length=50), nullable=False),
        sa.Column('difficulty_level', sa.String(length=50), nullable=False),
        sa.Column('time_limit', sa.Integer(), nullable=True),
        sa.Column('passing_score', sa.Float(), nullable=False, server_default='70'),
        sa.Column('instructions', sa.Text(), nullable=True),
        sa.Column('evaluation_criteria', sa.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(['interview_id'], ['interviews.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_skill_assessments_interview_id', 'skill_assessments', ['interview_id'])

    op.create_table(
        'candidate_assessments',
        _id_column(),
        sa.Column('response_id', sa.BigInteger(), nullable=False),
        sa.Column('skill_assessment_id', sa.BigInteger(), nullable=False),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('score', sa.Float(), nullable=True),
        sa.Column('max_score', sa.Float(), nullable=True),
        sa.Column('passed', sa.Boolean(), nullable=True),
        sa.Column('submission_data', sa.JSON(), nullable=True),
        sa.Column('evaluation_details', sa.JSON(), nullable=True),
        sa.Column('time_spent', sa.Integer(), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(['response_id'], ['responses.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['skill_assessment_id'], ['skill_assessments.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('skill_assessment_id', 'response_id', name='uq_candidate_assessment_pair'),
    )
    op.create_index('ix_candidate_assessments_response_id', 'candidate_assessments', ['response_id'])
    op.create_index('ix_candidate_assessments_skill_assessment_id', 'candidate_assessments', ['skill_assessment_id'])

    op.create_table(
        'candidate_status_history',
        _id_column(),
        sa.Column('response_id', sa.BigInteger(), nullable=False),
        sa.Column('previous_status', sa.String(length=50), nullable=True),
        sa.Column('new_status', sa.String(length=50), nullable=False),
        sa.Column('changed_by', sa.String(length=64), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('is_automatic', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('changed_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['response_id'], ['responses.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_candidate_status_history_response_id', 'candidate_status_history', ['response_id'])
    op.create_index('idx_status_history_response_changed', 'candidate_status_history', ['response_id', 'changed_at'])

    op.create_table(
        'status_change_requests',
        _id_column(),
        sa.Column('response_id', sa.BigInteger(), nullable=False),
        sa.Column('from_status', sa.String(length=50), nullable=False),
        sa.Column('to_status', sa.String(length=50), nullable=False),
        sa.Column('requested_by', sa.String(length=64), nullable=False),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=False),
        sa.Column('reviewed_by', sa.String(length=64), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('review_comments', sa.Text(), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(['response_id'], ['responses.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_status_change_requests_response_id', 'status_change_requests', ['response_id'])
    op.create_index('ix_status_change_requests_status', 'status_change_requests', ['status'])

    op.create_table(
        'status_change_approvals',
        _id_column(),
        sa.Column('request_id', sa.BigInteger(), nullable=False),
        sa.Column('approved_by', sa.String(length=64), nullable=False),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['request_id'], ['status_change_requests.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_status_change_approvals_request_id', 'status_change_approvals', ['request_id'])

    op.create_table(
        'ats_integrations',
        _id_column(),
        sa.Column('organization_id', sa.String(length=64), nullable=False),
        sa.Column('provider', sa.String(length=50), nullable=False),
        sa.Column('api_key', sa.Text(), nullable=True),
        sa.Column('api_secret', sa.Text(), nullable=True),
        sa.Column('api_url', sa.String(length=1024), nullable=True),
        sa.Column('webhook_url', sa.String(length=1024), nullable=True),
        sa.Column('configuration', sa.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        _created_at(),
        _updated_at(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_ats_integrations_organization_id', 'ats_integrations', ['organization_id'])
    op.create_index('ix_ats_integrations_provider', 'ats_integrations', ['provider'])
    op.create_index('idx_ats_integrations_org_active', 'ats_integrations', ['organization_id', 'is_active'])

    op.create_table(
        'ats_sync_logs',
        _id_column(),
        sa.Column('ats_integration_id', sa.BigInteger(), nullable=False),
        sa.Column('response_id', sa.BigInteger(), nullable=False),
        sa.Column('sync_type', sa.String(length=50), nullable=False),
        sa.Column('status', sa.String(length=50), nullable=False),
        sa.Column('request_data', sa.JSON(), nullable=True),
        sa.Column('response_data', sa.JSON(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        _created_at(),
        sa.ForeignKeyConstraint(['ats_integration_id'], ['ats_integrations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['response_id'], ['responses.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_ats_sync_logs_ats_integration_id', 'ats_sync_logs', ['ats_integration_id'])
    op.create_index('ix_ats_sync_logs_response_id', 'ats_sync_logs', ['response_id'])
    op.create_index('ix_ats_sync_logs_status', 'ats_sync_logs', ['status'])

    op.create_table(
        'domain_events',
        _id_column(),
        sa.Column('event_type', sa.String(length=100), nullable=False),
        sa.Column('aggregate_id', sa.BigInteger(), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(length=50), nullable=False),
        sa.Column('attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_error', sa.Text(), nullable=True),
        sa.Column('completed_handlers', sa.JSON(), nullable=True),
        _created_at(),
        sa.Column('claimed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_domain_events_event_type', 'domain_events', ['event_type'])
    op.create_index('ix_domain_events_status', 'domain_events', ['status'])


def downgrade() -> None:
    """Drop candidate workflow tables."""
    op.drop_index('ix_domain_events_status', table_name='domain_events')
    op.drop_index('ix_domain_events_event_type', table_name='domain_events')
    op.drop_table('domain_events')
    op.drop_table('ats_sync_logs')
    op.drop_table('ats_integrations')
    op.drop_table('status_change_approvals')
    op.drop_table('status_change_requests')
    op.drop_table('candidate_status_history')
    op.drop_table('candidate_assessments')
    op.drop_table('skill_assessments')
    op.drop_table('candidate_profiles')
    op.drop_table('responses')
    op.drop_table('interviews')
