from flask import request

from . import services
from .app import app
from .auth import SessionContext
from .errors import DirectoryError
from .models import SiteSettings
from .relay import query_player, query_server_status
from .schemas import CommentSubmission, Credentials, EditRequestSubmission, \
	MinecraftUsername, Pagination, ProfileUpdate, Registration, ReportSubmission, \
	ServerFilter, ServerSubmission
from .tasks import record_view, update_login_info
from .util import as_list, get_geo_region, get_remote_ip, get_request_json


@app.errorhandler(DirectoryError)
def directory_error(e):
	return {"error": e.message}, e.status


# Auth

@app.post("/auth/register")
def register():
	registration = Registration.from_json(get_request_json())
	profile = services.register_profile(registration)

	ctx = SessionContext()
	ctx.sign_in(profile)
	return profile.as_json(), 201


@app.post("/auth/login")
def login():
	credentials = Credentials.from_json(get_request_json())
	profile = services.authenticate(credentials)

	ctx = SessionContext()
	ctx.sign_in(profile)
	update_login_info.delay(profile.id, get_remote_ip())
	return profile.as_json()


@app.post("/auth/logout")
def logout():
	SessionContext.resolve().sign_out()
	return "", 204


@app.get("/auth/me")
def me():
	ctx = SessionContext.resolve()
	return ctx.require_login().as_json()


@app.patch("/auth/me")
def update_me():
	update = ProfileUpdate.from_json(get_request_json())
	profile = services.update_profile(SessionContext.resolve(), update)
	return profile.as_json()


@app.put("/me/minecraft-username")
def link_minecraft():
	minecraft_name = MinecraftUsername.from_json(get_request_json())
	profile = services.link_minecraft_account(SessionContext.resolve(), minecraft_name)
	return profile.as_json()


@app.delete("/me/minecraft-username")
def unlink_minecraft():
	profile = services.unlink_minecraft_account(SessionContext.resolve())
	return profile.as_json()


# Browsing

@app.get("/servers")
def server_list():
	server_filter = ServerFilter.from_args(request.args)
	pagination = Pagination.from_args(request.args,
		app.config["PAGE_SIZE"], app.config["MAX_PAGE_SIZE"])
	return services.search_servers(server_filter, pagination)


@app.get("/servers/featured")
def featured_servers():
	return as_list(services.get_featured_servers(app.config["FEATURED_LIMIT"]))


@app.get("/servers/latest")
def latest_servers():
	return as_list(services.get_latest_servers(app.config["LATEST_LIMIT"]))


@app.get("/servers/<int:server_id>")
def server_detail(server_id):
	obj = services.get_server_detail(SessionContext.resolve(), server_id)
	record_view.delay(server_id)
	return obj


# Likes, favorites, comments and reports

@app.post("/servers/<int:server_id>/like")
def like_server(server_id):
	count = services.set_like(SessionContext.resolve(), server_id, True)
	return {"liked": True, "like_count": count}


@app.delete("/servers/<int:server_id>/like")
def unlike_server(server_id):
	count = services.set_like(SessionContext.resolve(), server_id, False)
	return {"liked": False, "like_count": count}


@app.post("/servers/<int:server_id>/favorite")
def favorite_server(server_id):
	count = services.set_favorite(SessionContext.resolve(), server_id, True)
	return {"favorited": True, "favorite_count": count}


@app.delete("/servers/<int:server_id>/favorite")
def unfavorite_server(server_id):
	count = services.set_favorite(SessionContext.resolve(), server_id, False)
	return {"favorited": False, "favorite_count": count}


@app.get("/servers/<int:server_id>/comments")
def server_comments(server_id):
	return as_list(services.get_server_comments(SessionContext.resolve(), server_id))


@app.post("/servers/<int:server_id>/comments")
def create_comment(server_id):
	submission = CommentSubmission.from_json(get_request_json(),
		app.config["MAX_COMMENT_LENGTH"])
	comment = services.create_comment(SessionContext.resolve(), server_id, submission)
	return comment.as_json(), 201


@app.delete("/comments/<int:comment_id>")
def delete_comment(comment_id):
	services.delete_comment(SessionContext.resolve(), comment_id)
	return "", 204


@app.post("/reports")
def create_report():
	submission = ReportSubmission.from_json(get_request_json())
	report = services.create_report(SessionContext.resolve(), submission)
	return report.as_json(), 201


# Owner self-service

@app.post("/servers")
def submit_server():
	submission = ServerSubmission.from_json(get_request_json(),
		app.config["MAX_TAGS"], app.config["MAX_TAG_LENGTH"])
	server = services.submit_server(SessionContext.resolve(), submission)
	return server.as_json(), 201


@app.delete("/servers/<int:server_id>")
def delete_server(server_id):
	services.delete_server(SessionContext.resolve(), server_id)
	return "", 204


@app.post("/servers/<int:server_id>/edit-requests")
def submit_edit_request(server_id):
	submission = EditRequestSubmission.from_json(get_request_json())
	edit = services.submit_edit_request(SessionContext.resolve(), server_id, submission)
	return edit.as_json(), 201


@app.get("/me/servers")
def my_servers():
	return as_list(services.get_user_servers(SessionContext.resolve()))


@app.get("/me/favorites")
def my_favorites():
	return as_list(services.get_user_favorites(SessionContext.resolve()))


@app.get("/me/comments")
def my_comments():
	return as_list(services.get_user_comments(SessionContext.resolve()))


@app.get("/me/edit-requests")
def my_edit_requests():
	return as_list(services.get_user_edit_requests(SessionContext.resolve()))


@app.get("/me/stats")
def my_stats():
	return services.get_user_stats(SessionContext.resolve())


@app.get("/site-settings")
def site_settings():
	return SiteSettings.get().as_json()


# Relays

@app.post("/api/query-mc-server")
def relay_server_status():
	obj = request.get_json(silent=True)
	server = obj.get("server") if isinstance(obj, dict) else None
	if not server or not isinstance(server, str):
		return {"success": False, "error": "Missing server address."}, 400
	return query_server_status(server)


@app.post("/api/query-mc-player")
def relay_player():
	obj = request.get_json(silent=True)
	username = obj.get("username") if isinstance(obj, dict) else None
	if not username or not isinstance(username, str):
		return {"success": False, "error": "Missing player name."}, 400
	return query_player(username)


@app.get("/api/my-ip")
def my_ip():
	ip = get_remote_ip()
	resp = {
		"ip": ip,
		"region": get_geo_region(ip), # null on error
	}
	return resp, 200, {"Cache-Control": "private, no-store"}
