"""Initial migration

Revision ID: 3f1c2a9b7e40
Create Date: 2025-03-02
"""
from alembic import op
import sqlalchemy as sa


revision = '3f1c2a9b7e40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
	op.create_table('profile',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('username', sa.String(length=32), nullable=False),
		sa.Column('password_hash', sa.String(), nullable=False),
		sa.Column('email', sa.String(), nullable=True),
		sa.Column('role', sa.String(length=16), nullable=False),
		sa.Column('avatar_url', sa.String(), nullable=True),
		sa.Column('bio', sa.String(), nullable=True),
		sa.Column('minecraft_username', sa.String(length=16), nullable=True),
		sa.Column('minecraft_uuid', sa.String(length=36), nullable=True),
		sa.Column('last_login_at', sa.DateTime(), nullable=True),
		sa.Column('last_login_ip', sa.String(), nullable=True),
		sa.Column('last_login_region', sa.String(), nullable=True),
		sa.Column('created_at', sa.DateTime(), nullable=False),
		sa.Column('updated_at', sa.DateTime(), nullable=False),
		sa.PrimaryKeyConstraint('id')
	)
	op.create_index(op.f('ix_profile_username'), 'profile', ['username'], unique=True)
	op.create_table('server',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('owner_id', sa.Integer(), nullable=False),
		sa.Column('name', sa.String(length=64), nullable=False),
		sa.Column('description', sa.String(), nullable=False),
		sa.Column('ip_address', sa.String(), nullable=False),
		sa.Column('port', sa.Integer(), nullable=False),
		sa.Column('version', sa.String(length=8), nullable=False),
		sa.Column('server_type', sa.String(length=16), nullable=False),
		sa.Column('is_pure_public', sa.Boolean(), nullable=False),
		sa.Column('requires_whitelist', sa.Boolean(), nullable=False),
		sa.Column('requires_genuine', sa.Boolean(), nullable=False),
		sa.Column('max_players', sa.Integer(), nullable=True),
		sa.Column('online_players', sa.Integer(), nullable=False),
		sa.Column('status', sa.String(length=16), nullable=False),
		sa.Column('featured', sa.Boolean(), nullable=False),
		sa.Column('view_count', sa.Integer(), nullable=False),
		sa.Column('created_at', sa.DateTime(), nullable=False),
		sa.Column('updated_at', sa.DateTime(), nullable=False),
		sa.ForeignKeyConstraint(['owner_id'], ['profile.id']),
		sa.PrimaryKeyConstraint('id')
	)
	op.create_index(op.f('ix_server_owner_id'), 'server', ['owner_id'], unique=False)
	op.create_index(op.f('ix_server_status'), 'server', ['status'], unique=False)
	op.create_index(op.f('ix_server_featured'), 'server', ['featured'], unique=False)
	op.create_index(op.f('ix_server_created_at'), 'server', ['created_at'], unique=False)
	op.create_table('server_image',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('server_id', sa.Integer(), nullable=False),
		sa.Column('image_url', sa.String(), nullable=False),
		sa.Column('is_primary', sa.Boolean(), nullable=False),
		sa.Column('display_order', sa.Integer(), nullable=False),
		sa.Column('created_at', sa.DateTime(), nullable=False),
		sa.ForeignKeyConstraint(['server_id'], ['server.id']),
		sa.PrimaryKeyConstraint('id')
	)
	op.create_index(op.f('ix_server_image_server_id'), 'server_image', ['server_id'], unique=False)
	op.create_table('server_tag',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('server_id', sa.Integer(), nullable=False),
		sa.Column('tag', sa.String(length=32), nullable=False),
		sa.Column('created_at', sa.DateTime(), nullable=False),
		sa.ForeignKeyConstraint(['server_id'], ['server.id']),
		sa.PrimaryKeyConstraint('id')
	)
	op.create_index(op.f('ix_server_tag_server_id'), 'server_tag', ['server_id'], unique=False)
	for table in ('server_like', 'server_favorite'):
		op.create_table(table,
			sa.Column('id', sa.Integer(), nullable=False),
			sa.Column('server_id', sa.Integer(), nullable=False),
			sa.Column('user_id', sa.Integer(), nullable=False),
			sa.Column('created_at', sa.DateTime(), nullable=False),
			sa.ForeignKeyConstraint(['server_id'], ['server.id']),
			sa.ForeignKeyConstraint(['user_id'], ['profile.id']),
			sa.PrimaryKeyConstraint('id')
		)
		op.create_index('ix_%s_server_user' % table, table, ['server_id', 'user_id'], unique=True)
		op.create_index(op.f('ix_%s_user_id' % table), table, ['user_id'], unique=False)
	op.create_table('server_comment',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('server_id', sa.Integer(), nullable=False),
		sa.Column('user_id', sa.Integer(), nullable=False),
		sa.Column('content', sa.String(), nullable=False),
		sa.Column('is_approved', sa.Boolean(), nullable=False),
		sa.Column('created_at', sa.DateTime(), nullable=False),
		sa.Column('updated_at', sa.DateTime(), nullable=False),
		sa.ForeignKeyConstraint(['server_id'], ['server.id']),
		sa.ForeignKeyConstraint(['user_id'], ['profile.id']),
		sa.PrimaryKeyConstraint('id')
	)
	op.create_index(op.f('ix_server_comment_server_id'), 'server_comment', ['server_id'], unique=False)
	op.create_index(op.f('ix_server_comment_user_id'), 'server_comment', ['user_id'], unique=False)
	op.create_index(op.f('ix_server_comment_is_approved'), 'server_comment', ['is_approved'], unique=False)
	op.create_table('server_report',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('server_id', sa.Integer(), nullable=True),
		sa.Column('comment_id', sa.Integer(), nullable=True),
		sa.Column('reporter_id', sa.Integer(), nullable=False),
		sa.Column('reason', sa.String(), nullable=False),
		sa.Column('status', sa.String(length=16), nullable=False),
		sa.Column('handled_by', sa.Integer(), nullable=True),
		sa.Column('handled_at', sa.DateTime(), nullable=True),
		sa.Column('created_at', sa.DateTime(), nullable=False),
		sa.ForeignKeyConstraint(['server_id'], ['server.id']),
		sa.ForeignKeyConstraint(['comment_id'], ['server_comment.id']),
		sa.ForeignKeyConstraint(['reporter_id'], ['profile.id']),
		sa.ForeignKeyConstraint(['handled_by'], ['profile.id']),
		sa.PrimaryKeyConstraint('id')
	)
	op.create_table('server_edit_request',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('server_id', sa.Integer(), nullable=False),
		sa.Column('owner_id', sa.Integer(), nullable=False),
		sa.Column('changes', sa.JSON(), nullable=False),
		sa.Column('status', sa.String(length=16), nullable=False),
		sa.Column('admin_note', sa.String(), nullable=True),
		sa.Column('created_at', sa.DateTime(), nullable=False),
		sa.Column('updated_at', sa.DateTime(), nullable=False),
		sa.ForeignKeyConstraint(['server_id'], ['server.id']),
		sa.ForeignKeyConstraint(['owner_id'], ['profile.id']),
		sa.PrimaryKeyConstraint('id')
	)
	op.create_index(op.f('ix_server_edit_request_server_id'), 'server_edit_request', ['server_id'], unique=False)
	op.create_index(op.f('ix_server_edit_request_status'), 'server_edit_request', ['status'], unique=False)
	op.create_table('site_settings',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('contact_email', sa.String(), nullable=False),
		sa.Column('qq_group', sa.String(), nullable=False),
		sa.Column('qq_group_link', sa.String(), nullable=True),
		sa.Column('updated_at', sa.DateTime(), nullable=False),
		sa.PrimaryKeyConstraint('id')
	)


def downgrade():
	op.drop_table('site_settings')
	op.drop_index(op.f('ix_server_edit_request_status'), table_name='server_edit_request')
	op.drop_index(op.f('ix_server_edit_request_server_id'), table_name='server_edit_request')
	op.drop_table('server_edit_request')
	op.drop_table('server_report')
	op.drop_index(op.f('ix_server_comment_is_approved'), table_name='server_comment')
	op.drop_index(op.f('ix_server_comment_user_id'), table_name='server_comment')
	op.drop_index(op.f('ix_server_comment_server_id'), table_name='server_comment')
	op.drop_table('server_comment')
	for table in ('server_favorite', 'server_like'):
		op.drop_index(op.f('ix_%s_user_id' % table), table_name=table)
		op.drop_index('ix_%s_server_user' % table, table_name=table)
		op.drop_table(table)
	op.drop_index(op.f('ix_server_tag_server_id'), table_name='server_tag')
	op.drop_table('server_tag')
	op.drop_index(op.f('ix_server_image_server_id'), table_name='server_image')
	op.drop_table('server_image')
	op.drop_index(op.f('ix_server_created_at'), table_name='server')
	op.drop_index(op.f('ix_server_featured'), table_name='server')
	op.drop_index(op.f('ix_server_status'), table_name='server')
	op.drop_index(op.f('ix_server_owner_id'), table_name='server')
	op.drop_table('server')
	op.drop_index(op.f('ix_profile_username'), table_name='profile')
	op.drop_table('profile')
