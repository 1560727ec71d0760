import pytest

from conftest import login, make_profile, make_server
from server_directory.app import app, db
from server_directory.models import Profile, Server, ServerReport
from server_directory.status import DEFAULT_PORT


SUBMISSION = {
	"name": "Blocky Towns",
	"description": "Towny survival with friendly staff",
	"ip_address": "  Play.Blocky.Example ",
	"port": 25570,
	"version": "1.20",
	"server_type": "survival",
	"max_players": 100,
	"is_pure_public": True,
	"tags": ["towny", "#towny", " economy ", ""],
	"images": ["https://img.example.com/1.png", "https://img.example.com/2.png"],
}


@pytest.fixture
def admin(client):
	make_profile("root", "admin")
	return client


def test_submit_server(client):
	profile_id = make_profile("steve")
	assert client.post("/servers", json=SUBMISSION).status_code == 401

	login(client, "steve")
	resp = client.post("/servers", json=SUBMISSION)
	assert resp.status_code == 201
	body = resp.get_json()
	assert body["status"] == "pending"
	assert body["ip_address"] == "play.blocky.example"
	assert body["address"] == "play.blocky.example:25570"
	assert body["tags"] == ["towny", "economy"]
	assert body["primary_image"] == "https://img.example.com/1.png"
	assert len(body["images"]) == 2
	assert body["online_players"] == 0

	# Submitting makes the player an owner
	with app.app_context():
		assert db.session.get(Profile, profile_id).role == "owner"

	assert [s["id"] for s in client.get("/me/servers").get_json()] == [body["id"]]
	assert client.get("/servers").get_json()["total"] == 0


@pytest.mark.parametrize("changes", [
	{"name": ""},
	{"ip_address": "play.example.com:25565"},
	{"port": 70000},
	{"version": "2.0"},
	{"server_type": "anarchy"},
	{"max_players": -1},
	{"tags": ["x" * 21]},
	{"tags": [str(i) for i in range(11)]},
	{"images": ["javascript:alert(1)"]},
	{"port": "25565"},
])
def test_submit_server_validation(client, changes):
	make_profile("steve")
	login(client, "steve")
	resp = client.post("/servers", json=dict(SUBMISSION, **changes))
	assert resp.status_code == 400
	assert resp.get_json()["error"]


def test_review_server(admin):
	owner = make_profile("owner", "owner")
	approve_id = make_server(owner, status="pending", name="Good")
	reject_id = make_server(owner, status="pending", name="Bad")

	login(admin, "owner")
	assert admin.get("/admin/servers/pending").status_code == 403
	assert admin.post(f"/admin/servers/{approve_id}/review", json={"approved": True}).status_code == 403

	login(admin, "root")
	pending = admin.get("/admin/servers/pending").get_json()
	assert sorted(s["name"] for s in pending) == ["Bad", "Good"]

	resp = admin.post(f"/admin/servers/{approve_id}/review", json={"approved": True})
	assert resp.get_json()["status"] == "approved"
	resp = admin.post(f"/admin/servers/{reject_id}/review", json={"approved": False})
	assert resp.get_json()["status"] == "rejected"

	assert admin.get("/admin/servers/pending").get_json() == []
	assert [s["name"] for s in admin.get("/servers").get_json()["data"]] == ["Good"]
	assert admin.post("/admin/servers/9999/review", json={"approved": True}).status_code == 404
	assert admin.post(f"/admin/servers/{approve_id}/review", json={}).status_code == 400


def test_feature_server(admin):
	owner = make_profile("owner", "owner")
	server_id = make_server(owner)
	login(admin, "root")

	resp = admin.post(f"/admin/servers/{server_id}/feature", json={"featured": True})
	assert resp.get_json()["featured"] is True
	assert [s["id"] for s in admin.get("/servers/featured").get_json()] == [server_id]

	admin.post(f"/admin/servers/{server_id}/feature", json={"featured": False})
	assert admin.get("/servers/featured").get_json() == []
	assert admin.post(f"/admin/servers/{server_id}/feature", json={"featured": "yes"}).status_code == 400


def test_review_comments(admin):
	owner = make_profile("owner", "owner")
	make_profile("steve")
	server_id = make_server(owner)

	login(admin, "steve")
	app.config["AUTO_APPROVE_COMMENTS"] = False
	try:
		keep = admin.post(f"/servers/{server_id}/comments", json={"content": "keep"}).get_json()["id"]
		drop = admin.post(f"/servers/{server_id}/comments", json={"content": "drop"}).get_json()["id"]
	finally:
		app.config["AUTO_APPROVE_COMMENTS"] = True

	login(admin, "root")
	pending = admin.get("/admin/comments/pending").get_json()
	assert sorted(c["content"] for c in pending) == ["drop", "keep"]

	resp = admin.post(f"/admin/comments/{keep}/review", json={"approved": True})
	assert resp.status_code == 200
	assert resp.get_json()["is_approved"] is True

	resp = admin.post(f"/admin/comments/{drop}/review", json={"approved": False})
	assert resp.status_code == 204

	assert admin.get("/admin/comments/pending").get_json() == []
	comments = admin.get(f"/servers/{server_id}/comments").get_json()
	assert [c["id"] for c in comments] == [keep]


def test_handle_report(admin):
	owner = make_profile("owner", "owner")
	make_profile("steve")
	server_id = make_server(owner)

	login(admin, "steve")
	report_id = admin.post("/reports", json={"server_id": server_id, "reason": "Spam"}).get_json()["id"]
	assert admin.get("/admin/reports").status_code == 403

	login(admin, "root")
	reports = admin.get("/admin/reports").get_json()
	assert [r["id"] for r in reports] == [report_id]

	resp = admin.post(f"/admin/reports/{report_id}/handle")
	body = resp.get_json()
	assert body["status"] == "handled"
	assert body["handled_at"] is not None
	with app.app_context():
		assert body["handled_by"] == Profile.find_by_username("root").id


def test_edit_requests(admin):
	owner = make_profile("owner", "owner")
	make_profile("steve")
	server_id = make_server(owner)

	login(admin, "steve")
	resp = admin.post(f"/servers/{server_id}/edit-requests", json={"changes": {"name": "Mine now"}})
	assert resp.status_code == 403

	login(admin, "owner")
	assert admin.post(f"/servers/{server_id}/edit-requests",
		json={"changes": {"owner_id": 1}}).status_code == 400
	assert admin.post(f"/servers/{server_id}/edit-requests",
		json={"changes": {}}).status_code == 400
	assert admin.post(f"/servers/{server_id}/edit-requests",
		json={"changes": {"port": 0}}).status_code == 400

	resp = admin.post(f"/servers/{server_id}/edit-requests",
		json={"changes": {"name": "Renamed", "port": 25580, "max_players": None}})
	assert resp.status_code == 201
	edit_id = resp.get_json()["id"]
	rejected_id = admin.post(f"/servers/{server_id}/edit-requests",
		json={"changes": {"version": "1.8"}}).get_json()["id"]
	assert len(admin.get("/me/edit-requests").get_json()) == 2

	login(admin, "root")
	edits = admin.get(f"/admin/edit-requests?server_id={server_id}&status=pending").get_json()
	assert sorted(e["id"] for e in edits) == sorted([edit_id, rejected_id])

	resp = admin.post(f"/admin/edit-requests/{edit_id}/review",
		json={"approved": True, "admin_note": "Looks good"})
	assert resp.get_json()["status"] == "approved"
	assert resp.get_json()["admin_note"] == "Looks good"

	resp = admin.post(f"/admin/edit-requests/{rejected_id}/review", json={"approved": False})
	assert resp.get_json()["status"] == "rejected"

	assert admin.post(f"/admin/edit-requests/{edit_id}/review",
		json={"approved": False}).status_code == 409
	assert admin.get("/admin/edit-requests?status=pending").get_json() == []

	with app.app_context():
		server = db.session.get(Server, server_id)
		assert server.name == "Renamed"
		assert server.port == 25580
		assert server.max_players is None
		assert server.version == "1.20"


def test_delete_server(admin):
	owner = make_profile("owner", "owner")
	make_profile("steve")
	server_id = make_server(owner)
	other_id = make_server(owner)

	login(admin, "steve")
	admin.post(f"/servers/{server_id}/favorite")
	admin.post(f"/servers/{server_id}/comments", json={"content": "hi"})
	admin.post("/reports", json={"server_id": server_id, "reason": "Spam"})
	assert admin.delete(f"/servers/{server_id}").status_code == 403

	login(admin, "owner")
	assert admin.delete(f"/servers/{server_id}").status_code == 204
	assert admin.get(f"/servers/{server_id}").status_code == 404

	login(admin, "root")
	assert admin.delete(f"/servers/{other_id}").status_code == 204

	with app.app_context():
		assert Server.query.count() == 0
		assert ServerReport.query.one().server_id is None


def test_user_roles(admin):
	steve = make_profile("steve")
	login(admin, "root")

	users = admin.get("/admin/users").get_json()
	assert sorted(u["username"] for u in users) == ["root", "steve"]

	resp = admin.post(f"/admin/users/{steve}/role", json={"role": "owner"})
	assert resp.get_json()["role"] == "owner"
	assert admin.post(f"/admin/users/{steve}/role", json={"role": "king"}).status_code == 400
	assert admin.post("/admin/users/9999/role", json={"role": "owner"}).status_code == 404

	with app.app_context():
		root_id = Profile.find_by_username("root").id
	assert admin.post(f"/admin/users/{root_id}/role", json={"role": "player"}).status_code == 400


def test_site_settings(admin):
	assert admin.get("/site-settings").get_json()["contact_email"] == ""

	make_profile("steve")
	login(admin, "steve")
	assert admin.put("/admin/site-settings", json={"qq_group": "123"}).status_code == 403

	login(admin, "root")
	resp = admin.put("/admin/site-settings", json={"contact_email": "ops@example.com", "qq_group": "123456"})
	assert resp.status_code == 200

	body = admin.get("/site-settings").get_json()
	assert body["contact_email"] == "ops@example.com"
	assert body["qq_group"] == "123456"
	assert body["qq_group_link"] is None


def test_submit_server_defaults_to_game_port(client):
	make_profile("steve")
	login(client, "steve")
	submission = dict(SUBMISSION)
	del submission["port"]

	body = client.post("/servers", json=submission).get_json()
	assert body["port"] == DEFAULT_PORT
	assert body["address"] == "play.blocky.example"
