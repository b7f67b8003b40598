# migrations/versions/001_initial_schema.py

"""Initial schema

Revision ID: 001
Revises:
Create Date: 2024-06-01 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    # Users
    op.create_table('auth_users',
                    sa.Column('id', sa.String(), nullable=False),
                    sa.Column('email', sa.String(length=255), nullable=False),
                    sa.Column('password_hash', sa.String(length=255), nullable=False),
                    sa.Column('name', sa.String(length=100), nullable=False),
                    sa.Column('role', sa.String(length=20), server_default='USER', nullable=False),
                    sa.Column('verified', sa.Boolean(), server_default='false', nullable=False),
                    sa.Column('avatar', sa.String(), nullable=True),
                    *_timestamps(),
                    sa.PrimaryKeyConstraint('id'),
                    )
    op.create_index('ix_auth_users_email', 'auth_users', ['email'], unique=True)
    op.create_index('ix_auth_users_role', 'auth_users', ['role'])
    op.create_index('ix_auth_users_created_at', 'auth_users', ['created_at'])

    op.create_table('auth_profiles',
                    sa.Column('id', sa.String(), nullable=False),
                    sa.Column('user_id', sa.String(), nullable=False),
                    sa.Column('bio', sa.Text(), nullable=True),
                    sa.Column('location', sa.String(length=200), nullable=True),
                    sa.Column('phone', sa.String(length=30), nullable=True),
                    sa.Column('dietary_prefs', sa.JSON(), server_default='[]', nullable=False),
                    sa.Column('social_links', sa.JSON(), server_default='{}', nullable=False),
                    sa.Column('follower_count', sa.Integer(), server_default='0', nullable=False),
                    *_timestamps(),
                    sa.ForeignKeyConstraint(['user_id'], ['auth_users.id'], ondelete='CASCADE'),
                    sa.PrimaryKeyConstraint('id'),
                    )
    op.create_index('ix_auth_profiles_user_id', 'auth_profiles', ['user_id'], unique=True)
    op.create_index('ix_auth_profiles_created_at', 'auth_profiles', ['created_at'])

    op.create_table('auth_sessions',
                    sa.Column('id', sa.String(), nullable=False),
                    sa.Column('user_id', sa.String(), nullable=False),
                    sa.Column('refresh_token', sa.String(length=512), nullable=False),
                    sa.Column('expires_at', sa.DateTime(), nullable=False),
                    sa.Column('created_at', sa.DateTime(), nullable=False),
                    sa.ForeignKeyConstraint(['user_id'], ['auth_users.id'], ondelete='CASCADE'),
                    sa.PrimaryKeyConstraint('id'),
                    sa.UniqueConstraint('refresh_token'),
                    )
    op.create_index('ix_auth_sessions_user_id', 'auth_sessions', ['user_id'])
    op.create_index('ix_auth_sessions_expires_at', 'auth_sessions', ['expires_at'])

    # Follows
    op.create_table('social_follows',
                    sa.Column('id', sa.String(), nullable=False),
                    sa.Column('follower_id', sa.String(), nullable=False),
                    sa.Column('following_id', sa.String(), nullable=False),
                    sa.Column('created_at', sa.DateTime(), nullable=False),
                    sa.ForeignKeyConstraint(['follower_id'], ['auth_users.id'], ondelete='CASCADE'),
                    sa.ForeignKeyConstraint(['following_id'], ['auth_users.id'], ondelete='CASCADE'),
                    sa.PrimaryKeyConstraint('id'),
                    sa.UniqueConstraint('follower_id', 'following_id', name='uq_follow_pair'),
                    sa.CheckConstraint('follower_id <> following_id', name='ck_follow_not_self'),
                    )
    op.create_index('ix_social_follows_follower_id', 'social_follows', ['follower_id'])
    op.create_index('ix_social_follows_following_id', 'social_follows', ['following_id'])

    # Restaurants
    op.create_table('restaurants',
                    sa.Column('id', sa.String(), nullable=False),
                    sa.Column('name', sa.String(length=100), nullable=False),
                    sa.Column('description', sa.Text(), nullable=False),
                    sa.Column('address', sa.String(length=300), nullable=False),
                    sa.Column('latitude', sa.Float(), nullable=False),
                    sa.Column('longitude', sa.Float(), nullable=False),
                    sa.Column('price_range', sa.Integer(), server_default='2', nullable=False),
                    sa.Column('categories', sa.JSON(), server_default='[]', nullable=False),
                    sa.Column('amenities', sa.JSON(), server_default='[]', nullable=False),
                    sa.Column('images', sa.JSON(), server_default='[]', nullable=False),
                    sa.Column('opening_hours', sa.JSON(), server_default='{}', nullable=False),
                    sa.Column('phone', sa.String(length=30), nullable=True),
                    sa.Column('website', sa.String(length=300), nullable=True),
                    sa.Column('owner_id', sa.String(), nullable=True),
                    sa.Column('created_by', sa.String(), nullable=True),
                    sa.Column('verified', sa.Boolean(), server_default='false', nullable=False),
                    *_timestamps(),
                    sa.ForeignKeyConstraint(['owner_id'], ['auth_users.id'], ondelete='SET NULL'),
                    sa.ForeignKeyConstraint(['created_by'], ['auth_users.id'], ondelete='SET NULL'),
                    sa.PrimaryKeyConstraint('id'),
                    )
    op.create_index('ix_restaurants_name', 'restaurants', ['name'], unique=True)
    op.create_index('ix_restaurants_owner_id', 'restaurants', ['owner_id'])
    op.create_index('ix_restaurants_lat_lng', 'restaurants', ['latitude', 'longitude'])
    op.create_index('ix_restaurants_created_at', 'restaurants', ['created_at'])

    # Reviews
    op.create_table('reviews',
                    sa.Column('id', sa.String(), nullable=False),
                    sa.Column('user_id', sa.String(), nullable=False),
                    sa.Column('restaurant_id', sa.String(), nullable=False),
                    sa.Column('rating', sa.Integer(), nullable=False),
                    sa.Column('title', sa.String(length=100), nullable=True),
                    sa.Column('content', sa.Text(), nullable=False),
                    sa.Column('visit_date', sa.DateTime(), nullable=True),
                    sa.Column('price_per_person', sa.Float(), nullable=True),
                    sa.Column('dishes', sa.JSON(), server_default='[]', nullable=False),
                    sa.Column('images', sa.JSON(), server_default='[]', nullable=False),
                    sa.Column('is_hidden', sa.Boolean(), server_default='false', nullable=False),
                    sa.Column('is_promoted', sa.Boolean(), server_default='false', nullable=False),
                    sa.Column('sentiment', sa.String(length=20), nullable=True),
                    sa.Column('tags', sa.JSON(), server_default='[]', nullable=False),
                    *_timestamps(),
                    sa.ForeignKeyConstraint(['user_id'], ['auth_users.id'], ondelete='CASCADE'),
                    sa.ForeignKeyConstraint(['restaurant_id'], ['restaurants.id'], ondelete='CASCADE'),
                    sa.PrimaryKeyConstraint('id'),
                    sa.UniqueConstraint('user_id', 'restaurant_id', name='uq_review_user_restaurant'),
                    )
    op.create_index('ix_reviews_user_id', 'reviews', ['user_id'])
    op.create_index('ix_reviews_restaurant_id', 'reviews', ['restaurant_id'])
    op.create_index('ix_reviews_is_hidden', 'reviews', ['is_hidden'])
    op.create_index('ix_reviews_created_at', 'reviews', ['created_at'])

    op.create_table('review_comments',
                    sa.Column('id', sa.String(), nullable=False),
                    sa.Column('review_id', sa.String(), nullable=False),
                    sa.Column('user_id', sa.String(), nullable=False),
                    sa.Column('parent_id', sa.String(), nullable=True),
                    sa.Column('content', sa.Text(), nullable=False),
                    sa.Column('is_hidden', sa.Boolean(), server_default='false', nullable=False),
                    *_timestamps(),
                    sa.ForeignKeyConstraint(['review_id'], ['reviews.id'], ondelete='CASCADE'),
                    sa.ForeignKeyConstraint(['user_id'], ['auth_users.id'], ondelete='CASCADE'),
                    sa.ForeignKeyConstraint(['parent_id'], ['review_comments.id'], ondelete='CASCADE'),
                    sa.PrimaryKeyConstraint('id'),
                    )
    op.create_index('ix_review_comments_review_id', 'review_comments', ['review_id'])
    op.create_index('ix_review_comments_user_id', 'review_comments', ['user_id'])
    op.create_index('ix_review_comments_parent_id', 'review_comments', ['parent_id'])
    op.create_index('ix_review_comments_created_at', 'review_comments', ['created_at'])

    op.create_table('review_likes',
                    sa.Column('id', sa.String(), nullable=False),
                    sa.Column('user_id', sa.String(), nullable=False),
                    sa.Column('review_id', sa.String(), nullable=False),
                    sa.Column('created_at', sa.DateTime(), nullable=False),
                    sa.ForeignKeyConstraint(['user_id'], ['auth_users.id'], ondelete='CASCADE'),
                    sa.ForeignKeyConstraint(['review_id'], ['reviews.id'], ondelete='CASCADE'),
                    sa.PrimaryKeyConstraint('id'),
                    sa.UniqueConstraint('user_id', 'review_id', name='uq_like_user_review'),
                    )
    op.create_index('ix_review_likes_user_id', 'review_likes', ['user_id'])
    op.create_index('ix_review_likes_review_id', 'review_likes', ['review_id'])

    op.create_table('review_owner_responses',
                    sa.Column('id', sa.String(), nullable=False),
                    sa.Column('review_id', sa.String(), nullable=False),
                    sa.Column('owner_id', sa.String(), nullable=False),
                    sa.Column('content', sa.Text(), nullable=False),
                    *_timestamps(),
                    sa.ForeignKeyConstraint(['review_id'], ['reviews.id'], ondelete='CASCADE'),
                    sa.ForeignKeyConstraint(['owner_id'], ['auth_users.id'], ondelete='CASCADE'),
                    sa.PrimaryKeyConstraint('id'),
                    sa.UniqueConstraint('review_id'),
                    )
    op.create_index('ix_review_owner_responses_created_at', 'review_owner_responses', ['created_at'])

    # Claims and influencer applications
    op.create_table('restaurant_claims',
                    sa.Column('id', sa.String(), nullable=False),
                    sa.Column('user_id', sa.String(), nullable=False),
                    sa.Column('restaurant_id', sa.String(), nullable=False),
                    sa.Column('status', sa.String(length=20), server_default='PENDING', nullable=False),
                    sa.Column('is_dispute', sa.Boolean(), server_default='false', nullable=False),
                    sa.Column('phone_number', sa.String(length=30), nullable=False),
                    sa.Column('email', sa.String(length=255), nullable=False),
                    sa.Column('position', sa.String(length=100), nullable=False),
                    sa.Column('message', sa.Text(), nullable=False),
                    sa.Column('business_license', sa.String(length=500), nullable=True),
                    sa.Column('ownership_proof', sa.String(length=500), nullable=True),
                    sa.Column('tax_document', sa.String(length=500), nullable=True),
                    sa.Column('additional_documents', sa.JSON(), server_default='[]', nullable=False),
                    sa.Column('reviewed_by', sa.String(), nullable=True),
                    sa.Column('reviewed_at', sa.DateTime(), nullable=True),
                    sa.Column('reviewer_notes', sa.Text(), nullable=True),
                    *_timestamps(),
                    sa.ForeignKeyConstraint(['user_id'], ['auth_users.id'], ondelete='CASCADE'),
                    sa.ForeignKeyConstraint(['restaurant_id'], ['restaurants.id'], ondelete='CASCADE'),
                    sa.PrimaryKeyConstraint('id'),
                    sa.UniqueConstraint('user_id', 'restaurant_id', name='uq_claim_user_restaurant'),
                    )
    op.create_index('ix_restaurant_claims_user_id', 'restaurant_claims', ['user_id'])
    op.create_index('ix_restaurant_claims_restaurant_id', 'restaurant_claims', ['restaurant_id'])
    op.create_index('ix_restaurant_claims_status', 'restaurant_claims', ['status'])
    op.create_index('ix_restaurant_claims_created_at', 'restaurant_claims', ['created_at'])

    op.create_table('influencer_applications',
                    sa.Column('id', sa.String(), nullable=False),
                    sa.Column('user_id', sa.String(), nullable=False),
                    sa.Column('status', sa.String(length=20), server_default='PENDING', nullable=False),
                    sa.Column('instagram_handle', sa.String(length=100), nullable=True),
                    sa.Column('youtube_channel', sa.String(length=200), nullable=True),
                    sa.Column('tiktok_handle', sa.String(length=100), nullable=True),
                    sa.Column('follower_count', sa.Integer(), server_default='0', nullable=False),
                    sa.Column('content_type', sa.String(length=100), nullable=False),
                    sa.Column('reason', sa.Text(), nullable=False),
                    sa.Column('reviewed_by', sa.String(), nullable=True),
                    sa.Column('reviewed_at', sa.DateTime(), nullable=True),
                    sa.Column('reviewer_notes', sa.Text(), nullable=True),
                    *_timestamps(),
                    sa.ForeignKeyConstraint(['user_id'], ['auth_users.id'], ondelete='CASCADE'),
                    sa.PrimaryKeyConstraint('id'),
                    sa.UniqueConstraint('user_id'),
                    )
    op.create_index('ix_influencer_applications_status', 'influencer_applications', ['status'])
    op.create_index('ix_influencer_applications_created_at', 'influencer_applications', ['created_at'])

    # Moderation
    op.create_table('moderation_reports',
                    sa.Column('id', sa.String(), nullable=False),
                    sa.Column('reporter_id', sa.String(), nullable=False),
                    sa.Column('type', sa.String(length=20), nullable=False),
                    sa.Column('target_id', sa.String(), nullable=False),
                    sa.Column('reason', sa.String(length=100), nullable=False),
                    sa.Column('description', sa.Text(), nullable=True),
                    sa.Column('status', sa.String(length=20), server_default='PENDING', nullable=False),
                    sa.Column('resolved_by', sa.String(), nullable=True),
                    sa.Column('resolved_at', sa.DateTime(), nullable=True),
                    sa.Column('resolution_notes', sa.Text(), nullable=True),
                    *_timestamps(),
                    sa.ForeignKeyConstraint(['reporter_id'], ['auth_users.id'], ondelete='CASCADE'),
                    sa.PrimaryKeyConstraint('id'),
                    sa.UniqueConstraint('reporter_id', 'type', 'target_id', name='uq_report_reporter_target'),
                    )
    op.create_index('ix_moderation_reports_reporter_id', 'moderation_reports', ['reporter_id'])
    op.create_index('ix_moderation_reports_target_id', 'moderation_reports', ['target_id'])
    op.create_index('ix_moderation_reports_status', 'moderation_reports', ['status'])
    op.create_index('ix_moderation_reports_created_at', 'moderation_reports', ['created_at'])

    op.create_table('moderation_content_flags',
                    sa.Column('id', sa.String(), nullable=False),
                    sa.Column('content_id', sa.String(), nullable=False),
                    sa.Column('content_type', sa.String(length=20), nullable=False),
                    sa.Column('reason', sa.String(length=100), nullable=False),
                    sa.Column('severity', sa.Integer(), nullable=False),
                    sa.Column('report_count', sa.Integer(), server_default='1', nullable=False),
                    *_timestamps(),
                    sa.PrimaryKeyConstraint('id'),
                    sa.UniqueConstraint('content_id', 'content_type', name='uq_flag_content'),
                    )
    op.create_index('ix_moderation_content_flags_severity', 'moderation_content_flags', ['severity'])
    op.create_index('ix_moderation_content_flags_created_at', 'moderation_content_flags', ['created_at'])

    op.create_table('moderation_actions',
                    sa.Column('id', sa.String(), nullable=False),
                    sa.Column('moderator_id', sa.String(), nullable=False),
                    sa.Column('target_id', sa.String(), nullable=False),
                    sa.Column('target_type', sa.String(length=20), nullable=False),
                    sa.Column('action', sa.String(length=30), nullable=False),
                    sa.Column('reason', sa.Text(), nullable=False),
                    sa.Column('expires_at', sa.DateTime(), nullable=True),
                    sa.Column('report_id', sa.String(), nullable=True),
                    sa.Column('created_at', sa.DateTime(), nullable=False),
                    sa.PrimaryKeyConstraint('id'),
                    )
    op.create_index('ix_moderation_actions_moderator_id', 'moderation_actions', ['moderator_id'])
    op.create_index('ix_moderation_actions_target_id', 'moderation_actions', ['target_id'])
    op.create_index('ix_moderation_actions_created_at', 'moderation_actions', ['created_at'])

    op.create_table('moderation_user_strikes',
                    sa.Column('id', sa.String(), nullable=False),
                    sa.Column('user_id', sa.String(), nullable=False),
                    sa.Column('action_id', sa.String(), nullable=False),
                    sa.Column('reason', sa.Text(), nullable=False),
                    sa.Column('active', sa.Boolean(), server_default='true', nullable=False),
                    sa.Column('expires_at', sa.DateTime(), nullable=True),
                    sa.Column('created_at', sa.DateTime(), nullable=False),
                    sa.ForeignKeyConstraint(['user_id'], ['auth_users.id'], ondelete='CASCADE'),
                    sa.ForeignKeyConstraint(['action_id'], ['moderation_actions.id'], ondelete='CASCADE'),
                    sa.PrimaryKeyConstraint('id'),
                    )
    op.create_index('ix_moderation_user_strikes_user_id', 'moderation_user_strikes', ['user_id'])

    # Notifications
    op.create_table('notifications',
                    sa.Column('id', sa.String(), nullable=False),
                    sa.Column('user_id', sa.String(), nullable=False),
                    sa.Column('from_id', sa.String(), nullable=True),
                    sa.Column('type', sa.String(length=50), nullable=False),
                    sa.Column('title', sa.String(length=200), nullable=False),
                    sa.Column('message', sa.Text(), nullable=False),
                    sa.Column('review_id', sa.String(), nullable=True),
                    sa.Column('comment_id', sa.String(), nullable=True),
                    sa.Column('data', sa.JSON(), server_default='{}', nullable=False),
                    sa.Column('read', sa.Boolean(), server_default='false', nullable=False),
                    sa.Column('created_at', sa.DateTime(), nullable=False),
                    sa.ForeignKeyConstraint(['user_id'], ['auth_users.id'], ondelete='CASCADE'),
                    sa.ForeignKeyConstraint(['from_id'], ['auth_users.id'], ondelete='SET NULL'),
                    sa.PrimaryKeyConstraint('id'),
                    )
    op.create_index('ix_notifications_user_read', 'notifications', ['user_id', 'read'])
    op.create_index('ix_notifications_dedup', 'notifications', ['type', 'user_id', 'from_id'])
    op.create_index('ix_notifications_created_at', 'notifications', ['created_at'])

    op.create_table('notification_preferences',
                    sa.Column('user_id', sa.String(), nullable=False),
                    sa.Column('push_enabled', sa.Boolean(), server_default='true', nullable=False),
                    sa.Column('email_enabled', sa.Boolean(), server_default='true', nullable=False),
                    sa.ForeignKeyConstraint(['user_id'], ['auth_users.id'], ondelete='CASCADE'),
                    sa.PrimaryKeyConstraint('user_id'),
                    )


def downgrade() -> None:
    op.drop_table('notification_preferences')
    op.drop_table('notifications')
    op.drop_table('moderation_user_strikes')
    op.drop_table('moderation_actions')
    op.drop_table('moderation_content_flags')
    op.drop_table('moderation_reports')
    op.drop_table('influencer_applications')
    op.drop_table('restaurant_claims')
    op.drop_table('review_owner_responses')
    op.drop_table('review_likes')
    op.drop_table('review_comments')
    op.drop_table('reviews')
    op.drop_table('restaurants')
    op.drop_table('social_follows')
    op.drop_table('auth_sessions')
    op.drop_table('auth_profiles')
    op.drop_table('auth_users')
