from flask import request

from . import services
from .app import app
from .auth import SessionContext
from .schemas import Review, RoleChange, SiteSettingsUpdate, parse_int, require_fields
from .util import as_list, get_request_json


@app.get("/admin/servers/pending")
def pending_servers():
	return as_list(services.get_pending_servers(SessionContext.resolve()))


@app.post("/admin/servers/<int:server_id>/review")
def review_server(server_id):
	review = Review.from_json(get_request_json())
	server = services.review_server(SessionContext.resolve(), server_id, review)
	return server.as_json()


@app.post("/admin/servers/<int:server_id>/feature")
def feature_server(server_id):
	obj = get_request_json()
	require_fields(obj, {"featured": (True, "bool")})
	server = services.set_featured(SessionContext.resolve(), server_id, obj["featured"])
	return server.as_json()


@app.get("/admin/comments/pending")
def pending_comments():
	return as_list(services.get_pending_comments(SessionContext.resolve()))


@app.post("/admin/comments/<int:comment_id>/review")
def review_comment(comment_id):
	review = Review.from_json(get_request_json())
	comment = services.review_comment(SessionContext.resolve(), comment_id, review)
	if comment is None:
		return "", 204
	return comment.as_json()


@app.get("/admin/reports")
def reports():
	return as_list(services.get_reports(SessionContext.resolve()))


@app.post("/admin/reports/<int:report_id>/handle")
def handle_report(report_id):
	report = services.handle_report(SessionContext.resolve(), report_id)
	return report.as_json()


@app.get("/admin/edit-requests")
def edit_requests():
	server_id = request.args.get("server_id")
	if server_id:
		server_id = parse_int(server_id, "server_id")
	edits = services.get_edit_requests(SessionContext.resolve(),
		server_id or None, request.args.get("status") or None)
	return as_list(edits)


@app.post("/admin/edit-requests/<int:request_id>/review")
def review_edit_request(request_id):
	review = Review.from_json(get_request_json())
	edit = services.review_edit_request(SessionContext.resolve(), request_id, review)
	return edit.as_json()


@app.get("/admin/users")
def users():
	return as_list(services.get_users(SessionContext.resolve()))


@app.post("/admin/users/<int:profile_id>/role")
def set_user_role(profile_id):
	role_change = RoleChange.from_json(get_request_json())
	profile = services.set_user_role(SessionContext.resolve(), profile_id, role_change)
	return profile.as_json()


@app.put("/admin/site-settings")
def update_site_settings():
	update = SiteSettingsUpdate.from_json(get_request_json())
	settings = services.update_site_settings(SessionContext.resolve(), update)
	return settings.as_json()
