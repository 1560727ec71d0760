import math
from datetime import datetime

from sqlalchemy import or_

from .app import app, db
from .errors import Conflict, NotFound, PermissionDenied, ValidationError
from .models import Profile, Server, ServerComment, ServerEditRequest, \
	ServerFavorite, ServerImage, ServerLike, ServerReport, ServerTag, SiteSettings
from .relay import query_player


# Profiles

def register_profile(registration):
	if Profile.find_by_username(registration.username) is not None:
		raise Conflict("User name is already taken.")

	profile = Profile()
	profile.username = registration.username
	profile.email = registration.email
	profile.set_password(registration.password)

	# The first account administers the site
	profile.role = "admin" if Profile.query.count() == 0 else "player"

	db.session.add(profile)
	db.session.commit()
	return profile


def authenticate(credentials):
	profile = Profile.find_by_username(credentials.username)
	if profile is None or not profile.check_password(credentials.password):
		raise PermissionDenied("Incorrect user name or password.")
	return profile


def update_profile(ctx, update):
	profile = ctx.require_login()
	for name in update.fields:
		setattr(profile, name, getattr(update, name))
	db.session.commit()
	return profile


def link_minecraft_account(ctx, minecraft_name):
	profile = ctx.require_login()

	resp, status = query_player(minecraft_name.username)
	if not resp["success"]:
		if status == 404:
			raise ValidationError(resp["error"])
		raise ValidationError("Could not verify the Minecraft account: " + resp["error"])

	profile.minecraft_username = resp["data"]["username"] or minecraft_name.username
	profile.minecraft_uuid = resp["data"]["uuid"]
	db.session.commit()
	return profile


def unlink_minecraft_account(ctx):
	profile = ctx.require_login()
	profile.minecraft_username = None
	profile.minecraft_uuid = None
	db.session.commit()
	return profile


def get_user_stats(ctx):
	profile = ctx.require_login()
	return {
		"server_count": Server.query.filter_by(owner_id=profile.id).count(),
		"favorite_count": ServerFavorite.query.filter_by(user_id=profile.id).count(),
		"comment_count": ServerComment.query.filter_by(user_id=profile.id).count(),
	}


# Browsing

def listed_servers():
	return Server.query.filter_by(status="approved")


def search_servers(server_filter, pagination):
	query = listed_servers()

	if server_filter.version is not None:
		query = query.filter(Server.version == server_filter.version)
	if server_filter.server_type is not None:
		query = query.filter(Server.server_type == server_filter.server_type)
	for flag in ("is_pure_public", "requires_whitelist", "requires_genuine"):
		value = getattr(server_filter, flag)
		if value is not None:
			query = query.filter(getattr(Server, flag) == value)
	if server_filter.search is not None:
		# Wildcards typed by the user match literally
		search = server_filter.search.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
		pattern = "%" + search + "%"
		query = query.filter(or_(Server.name.ilike(pattern, escape="\\"),
			Server.description.ilike(pattern, escape="\\")))

	if server_filter.sort == "popular":
		query = query.order_by(Server.view_count.desc(), Server.id.desc())
	elif server_filter.sort == "featured":
		query = query.order_by(Server.featured.desc(), Server.created_at.desc(), Server.id.desc())
	else:
		query = query.order_by(Server.created_at.desc(), Server.id.desc())

	page = query.paginate(page=pagination.page, per_page=pagination.page_size,
		error_out=False, count=True)

	return {
		"data": [server.as_json() for server in page.items],
		"total": page.total,
		"page": pagination.page,
		"page_size": pagination.page_size,
		"total_pages": math.ceil(page.total / pagination.page_size),
	}


def get_featured_servers(limit):
	return listed_servers().filter_by(featured=True) \
		.order_by(Server.created_at.desc(), Server.id.desc()).limit(limit).all()


def get_latest_servers(limit):
	return listed_servers().order_by(Server.created_at.desc(), Server.id.desc()).limit(limit).all()


def get_server(server_id):
	server = db.session.get(Server, server_id)
	if server is None:
		raise NotFound("Server not found.")
	return server


def get_visible_server(ctx, server_id):
	server = get_server(server_id)
	# Hide unlisted servers from everyone but their owner and admins
	if not server.is_visible_to(ctx.profile):
		raise NotFound("Server not found.")
	return server


def get_server_detail(ctx, server_id):
	server = get_visible_server(ctx, server_id)

	obj = server.as_json()
	obj["owner"] = dict(obj["owner"], bio=server.owner.bio) if server.owner else None
	obj["favorite_count"] = ServerFavorite.query.filter_by(server_id=server.id).count()
	obj["comment_count"] = ServerComment.query.filter_by(server_id=server.id, is_approved=True).count()

	if ctx.signed_in:
		obj["is_liked"] = ServerLike.query.filter_by(server_id=server.id, user_id=ctx.profile_id).first() is not None
		obj["is_favorited"] = ServerFavorite.query.filter_by(server_id=server.id, user_id=ctx.profile_id).first() is not None

	return obj


# Likes and favorites

def _set_mark(model, ctx, server_id, marked):
	profile = ctx.require_login()
	server = get_visible_server(ctx, server_id)
	existing = model.query.filter_by(server_id=server.id, user_id=profile.id).first()

	if marked and existing is None:
		mark = model()
		mark.server_id = server.id
		mark.user_id = profile.id
		db.session.add(mark)
	elif not marked and existing is not None:
		db.session.delete(existing)

	db.session.commit()
	return model.query.filter_by(server_id=server.id).count()


def set_like(ctx, server_id, liked):
	return _set_mark(ServerLike, ctx, server_id, liked)


def set_favorite(ctx, server_id, favorited):
	return _set_mark(ServerFavorite, ctx, server_id, favorited)


def get_user_favorites(ctx):
	profile = ctx.require_login()
	favorites = ServerFavorite.query.filter_by(user_id=profile.id) \
		.order_by(ServerFavorite.created_at.desc(), ServerFavorite.id.desc()).all()
	return [f.server for f in favorites if f.server is not None]


# Comments and reports

def get_server_comments(ctx, server_id):
	server = get_visible_server(ctx, server_id)
	return ServerComment.query.filter_by(server_id=server.id, is_approved=True) \
		.order_by(ServerComment.created_at.desc(), ServerComment.id.desc()).all()


def create_comment(ctx, server_id, submission):
	profile = ctx.require_login()
	server = get_visible_server(ctx, server_id)

	comment = ServerComment()
	comment.server_id = server.id
	comment.user_id = profile.id
	comment.content = submission.content
	comment.is_approved = app.config["AUTO_APPROVE_COMMENTS"]
	db.session.add(comment)
	db.session.commit()
	return comment


def _delete_comment(comment):
	ServerReport.query.filter_by(comment_id=comment.id).update({"comment_id": None})
	db.session.delete(comment)


def delete_comment(ctx, comment_id):
	profile = ctx.require_login()
	comment = db.session.get(ServerComment, comment_id)
	if comment is None:
		raise NotFound("Comment not found.")
	if comment.user_id != profile.id and not profile.is_admin:
		raise PermissionDenied("Only the author or an admin can delete this comment.")
	_delete_comment(comment)
	db.session.commit()


def get_user_comments(ctx):
	profile = ctx.require_login()
	return ServerComment.query.filter_by(user_id=profile.id) \
		.order_by(ServerComment.created_at.desc(), ServerComment.id.desc()).all()


def create_report(ctx, submission):
	profile = ctx.require_login()

	if submission.server_id is not None:
		get_visible_server(ctx, submission.server_id)
	elif db.session.get(ServerComment, submission.comment_id) is None:
		raise NotFound("Comment not found.")

	report = ServerReport()
	report.server_id = submission.server_id
	report.comment_id = submission.comment_id
	report.reporter_id = profile.id
	report.reason = submission.reason
	db.session.add(report)
	db.session.commit()
	return report


# Owner self-service

def submit_server(ctx, submission):
	profile = ctx.require_login()

	# Submitting a server makes a player an owner
	if profile.role == "player":
		profile.role = "owner"

	server = Server()
	server.owner_id = profile.id
	for name, value in submission.server_values().items():
		setattr(server, name, value)
	server.status = "pending"
	server.online_players = 0

	for tag in submission.tags:
		server.tags.append(ServerTag(tag=tag))
	for i, url in enumerate(submission.images):
		server.images.append(ServerImage(image_url=url, is_primary=(i == 0), display_order=i))

	db.session.add(server)
	db.session.commit()

	app.logger.info("Server %r submitted by %s.", server.name, profile.username)
	return server


def get_user_servers(ctx):
	profile = ctx.require_login()
	return Server.query.filter_by(owner_id=profile.id) \
		.order_by(Server.created_at.desc(), Server.id.desc()).all()


def delete_server(ctx, server_id):
	profile = ctx.require_login()
	server = get_server(server_id)
	if not server.is_managed_by(profile):
		raise PermissionDenied("Only the owner or an admin can delete this server.")

	comment_ids = [c.id for c in server.comments]
	if comment_ids:
		ServerReport.query.filter(ServerReport.comment_id.in_(comment_ids)) \
			.update({"comment_id": None}, synchronize_session=False)
	ServerReport.query.filter_by(server_id=server.id).update({"server_id": None})

	db.session.delete(server)
	db.session.commit()


def submit_edit_request(ctx, server_id, submission):
	profile = ctx.require_login()
	server = get_server(server_id)
	if server.owner_id != profile.id:
		raise PermissionDenied("Only the owner can request changes to this server.")

	edit = ServerEditRequest()
	edit.server_id = server.id
	edit.owner_id = profile.id
	edit.changes = submission.changes
	db.session.add(edit)
	db.session.commit()
	return edit


def get_user_edit_requests(ctx):
	profile = ctx.require_login()
	return ServerEditRequest.query.filter_by(owner_id=profile.id) \
		.order_by(ServerEditRequest.created_at.desc(), ServerEditRequest.id.desc()).all()


# Moderation

def get_pending_servers(ctx):
	ctx.require_role("admin")
	return Server.query.filter_by(status="pending") \
		.order_by(Server.created_at.desc(), Server.id.desc()).all()


def review_server(ctx, server_id, review):
	ctx.require_role("admin")
	server = get_server(server_id)
	server.status = "approved" if review.approved else "rejected"
	db.session.commit()
	return server


def set_featured(ctx, server_id, featured):
	ctx.require_role("admin")
	server = get_server(server_id)
	server.featured = featured
	db.session.commit()
	return server


def get_pending_comments(ctx):
	ctx.require_role("admin")
	return ServerComment.query.filter_by(is_approved=False) \
		.order_by(ServerComment.created_at.desc(), ServerComment.id.desc()).all()


def review_comment(ctx, comment_id, review):
	ctx.require_role("admin")
	comment = db.session.get(ServerComment, comment_id)
	if comment is None:
		raise NotFound("Comment not found.")

	# Rejected comments are removed outright
	if review.approved:
		comment.is_approved = True
	else:
		_delete_comment(comment)
	db.session.commit()
	return comment if review.approved else None


def get_reports(ctx):
	ctx.require_role("admin")
	return ServerReport.query.order_by(ServerReport.created_at.desc(), ServerReport.id.desc()).all()


def handle_report(ctx, report_id):
	profile = ctx.require_role("admin")
	report = db.session.get(ServerReport, report_id)
	if report is None:
		raise NotFound("Report not found.")
	report.status = "handled"
	report.handled_by = profile.id
	report.handled_at = datetime.utcnow()
	db.session.commit()
	return report


def get_edit_requests(ctx, server_id=None, status=None):
	ctx.require_role("admin")
	query = ServerEditRequest.query
	if server_id is not None:
		query = query.filter_by(server_id=server_id)
	if status is not None:
		query = query.filter_by(status=status)
	return query.order_by(ServerEditRequest.created_at.desc(), ServerEditRequest.id.desc()).all()


def review_edit_request(ctx, request_id, review):
	ctx.require_role("admin")
	edit = db.session.get(ServerEditRequest, request_id)
	if edit is None:
		raise NotFound("Edit request not found.")
	if edit.status != "pending":
		raise Conflict("Edit request has already been reviewed.")

	if review.approved:
		for name, value in edit.changes.items():
			setattr(edit.server, name, value)
	edit.status = "approved" if review.approved else "rejected"
	edit.admin_note = review.admin_note
	db.session.commit()
	return edit


def get_users(ctx):
	ctx.require_role("admin")
	return Profile.query.order_by(Profile.created_at.desc(), Profile.id.desc()).all()


def set_user_role(ctx, profile_id, role_change):
	admin = ctx.require_role("admin")
	profile = db.session.get(Profile, profile_id)
	if profile is None:
		raise NotFound("User not found.")
	if profile.id == admin.id and role_change.role != "admin":
		raise ValidationError("Admins cannot remove their own admin role.")
	profile.role = role_change.role
	db.session.commit()
	return profile


def update_site_settings(ctx, update):
	ctx.require_role("admin")
	settings = SiteSettings.get()
	for name in update.fields:
		setattr(settings, name, getattr(update, name))
	db.session.commit()
	return settings
