"""create assessment session tables

Revision ID: 7c2e9d41b0a3
Revises:
Create Date: 2026-10-19 09:12:44.318502

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '7c2e9d41b0a3'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

json_type = sa.JSON().with_variant(postgresql.JSONB(), 'postgresql')

assessment_status = sa.Enum('draft', 'published', 'archived', name='assessmentstatusenum')
session_status = sa.Enum('in_progress', 'completed', 'timed_out', name='sessionstatusenum')


def upgrade() -> None:
    op.create_table('organizations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('slug', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_organizations_id'), 'organizations', ['id'], unique=False)
    op.create_index(op.f('ix_organizations_slug'), 'organizations', ['slug'], unique=True)

    op.create_table('profiles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('email_notifications', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_profiles_id'), 'profiles', ['id'], unique=False)
    op.create_index(op.f('ix_profiles_email'), 'profiles', ['email'], unique=True)

    op.create_table('decks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['org_id'], ['organizations.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_decks_id'), 'decks', ['id'], unique=False)
    op.create_index(op.f('ix_decks_org_id'), 'decks', ['org_id'], unique=False)

    op.create_table('cards',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('deck_id', sa.Integer(), nullable=False),
        sa.Column('stem', sa.String(), nullable=False),
        sa.Column('options', json_type, nullable=False),
        sa.Column('correct_index', sa.Integer(), nullable=False),
        sa.Column('explanation', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['deck_id'], ['decks.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_cards_id'), 'cards', ['id'], unique=False)
    op.create_index(op.f('ix_cards_deck_id'), 'cards', ['deck_id'], unique=False)

    op.create_table('assessments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.Integer(), nullable=False),
        sa.Column('deck_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('time_limit_minutes', sa.Integer(), nullable=False),
        sa.Column('pass_score', sa.Integer(), nullable=False),
        sa.Column('question_count', sa.Integer(), nullable=False),
        sa.Column('shuffle_questions', sa.Boolean(), nullable=False),
        sa.Column('max_attempts', sa.Integer(), nullable=True),
        sa.Column('cooldown_minutes', sa.Integer(), nullable=True),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('access_code', sa.String(), nullable=True),
        sa.Column('status', assessment_status, nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['created_by'], ['profiles.id'], ),
        sa.ForeignKeyConstraint(['deck_id'], ['decks.id'], ),
        sa.ForeignKeyConstraint(['org_id'], ['organizations.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_assessments_id'), 'assessments', ['id'], unique=False)
    op.create_index(op.f('ix_assessments_org_id'), 'assessments', ['org_id'], unique=False)
    op.create_index(op.f('ix_assessments_title'), 'assessments', ['title'], unique=False)

    op.create_table('assessment_sessions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('assessment_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('question_order', json_type, nullable=False),
        sa.Column('status', session_status, nullable=False),
        sa.Column('started_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('time_remaining_seconds', sa.Integer(), nullable=True),
        sa.Column('score', sa.Integer(), nullable=True),
        sa.Column('passed', sa.Boolean(), nullable=True),
        sa.Column('tab_switch_count', sa.Integer(), nullable=False),
        sa.Column('tab_switch_log', json_type, nullable=True),
        sa.Column('ip_address', sa.String(), nullable=True),
        sa.Column('certificate_url', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['assessment_id'], ['assessments.id'], ),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_assessment_sessions_id'), 'assessment_sessions', ['id'], unique=False)
    op.create_index(op.f('ix_assessment_sessions_user_id'), 'assessment_sessions', ['user_id'], unique=False)
    op.create_index('ix_assessment_sessions_assessment_status', 'assessment_sessions', ['assessment_id', 'status'], unique=False)
    op.create_index(
        'uq_assessment_sessions_one_in_progress',
        'assessment_sessions',
        ['assessment_id', 'user_id'],
        unique=True,
        postgresql_where=sa.text("status = 'in_progress'"),
        sqlite_where=sa.text("status = 'in_progress'"),
    )

    op.create_table('assessment_answers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.Integer(), nullable=False),
        sa.Column('question_id', sa.Integer(), nullable=False),
        sa.Column('selected_index', sa.Integer(), nullable=True),
        sa.Column('is_correct', sa.Boolean(), nullable=True),
        sa.Column('answered_at', sa.DateTime(), nullable=True),
        sa.Column('time_spent_seconds', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['question_id'], ['cards.id'], ),
        sa.ForeignKeyConstraint(['session_id'], ['assessment_sessions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('session_id', 'question_id', name='uq_assessment_answers_session_question')
    )
    op.create_index(op.f('ix_assessment_answers_id'), 'assessment_answers', ['id'], unique=False)
    op.create_index(op.f('ix_assessment_answers_session_id'), 'assessment_answers', ['session_id'], unique=False)

    op.create_table('skill_domains',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['org_id'], ['organizations.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_skill_domains_id'), 'skill_domains', ['id'], unique=False)
    op.create_index(op.f('ix_skill_domains_org_id'), 'skill_domains', ['org_id'], unique=False)

    op.create_table('deck_skill_mappings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('deck_id', sa.Integer(), nullable=False),
        sa.Column('skill_domain_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['deck_id'], ['decks.id'], ),
        sa.ForeignKeyConstraint(['skill_domain_id'], ['skill_domains.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('deck_id', 'skill_domain_id', name='uq_deck_skill_mappings_deck_domain')
    )
    op.create_index(op.f('ix_deck_skill_mappings_id'), 'deck_skill_mappings', ['id'], unique=False)

    op.create_table('employee_skill_scores',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('org_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('skill_domain_id', sa.Integer(), nullable=False),
        sa.Column('score', sa.Float(), nullable=False),
        sa.Column('assessments_taken', sa.Integer(), nullable=False),
        sa.Column('last_assessed_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['org_id'], ['organizations.id'], ),
        sa.ForeignKeyConstraint(['skill_domain_id'], ['skill_domains.id'], ),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('org_id', 'user_id', 'skill_domain_id', name='uq_employee_skill_scores_org_user_domain')
    )
    op.create_index(op.f('ix_employee_skill_scores_id'), 'employee_skill_scores', ['id'], unique=False)
    op.create_index(op.f('ix_employee_skill_scores_user_id'), 'employee_skill_scores', ['user_id'], unique=False)

    op.create_table('certificates',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('serial', sa.String(), nullable=False),
        sa.Column('session_id', sa.Integer(), nullable=False),
        sa.Column('issued_at', sa.DateTime(), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['session_id'], ['assessment_sessions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('serial'),
        sa.UniqueConstraint('session_id')
    )
    op.create_index(op.f('ix_certificates_id'), 'certificates', ['id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_certificates_id'), table_name='certificates')
    op.drop_table('certificates')
    op.drop_index(op.f('ix_employee_skill_scores_user_id'), table_name='employee_skill_scores')
    op.drop_index(op.f('ix_employee_skill_scores_id'), table_name='employee_skill_scores')
    op.drop_table('employee_skill_scores')
    op.drop_index(op.f('ix_deck_skill_mappings_id'), table_name='deck_skill_mappings')
    op.drop_table('deck_skill_mappings')
    op.drop_index(op.f('ix_skill_domains_org_id'), table_name='skill_domains')
    op.drop_index(op.f('ix_skill_domains_id'), table_name='skill_domains')
    op.drop_table('skill_domains')
    op.drop_index(op.f('ix_assessment_answers_session_id'), table_name='assessment_answers')
    op.drop_index(op.f('ix_assessment_answers_id'), table_name='assessment_answers')
    op.drop_table('assessment_answers')
    op.drop_index('uq_assessment_sessions_one_in_progress', table_name='assessment_sessions')
    op.drop_index('ix_assessment_sessions_assessment_status', table_name='assessment_sessions')
    op.drop_index(op.f('ix_assessment_sessions_user_id'), table_name='assessment_sessions')
    op.drop_index(op.f('ix_assessment_sessions_id'), table_name='assessment_sessions')
    op.drop_table('assessment_sessions')
    op.drop_index(op.f('ix_assessments_title'), table_name='assessments')
    op.drop_index(op.f('ix_assessments_org_id'), table_name='assessments')
    op.drop_index(op.f('ix_assessments_id'), table_name='assessments')
    op.drop_table('assessments')
    op.drop_index(op.f('ix_cards_deck_id'), table_name='cards')
    op.drop_index(op.f('ix_cards_id'), table_name='cards')
    op.drop_table('cards')
    op.drop_index(op.f('ix_decks_org_id'), table_name='decks')
    op.drop_index(op.f('ix_decks_id'), table_name='decks')
    op.drop_table('decks')
    op.drop_index(op.f('ix_profiles_email'), table_name='profiles')
    op.drop_index(op.f('ix_profiles_id'), table_name='profiles')
    op.drop_table('profiles')
    op.drop_index(op.f('ix_organizations_slug'), table_name='organizations')
    op.drop_index(op.f('ix_organizations_id'), table_name='organizations')
    op.drop_table('organizations')
    session_status.drop(op.get_bind(), checkfirst=True)
    assessment_status.drop(op.get_bind(), checkfirst=True)
