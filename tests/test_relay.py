from unittest.mock import Mock, patch

import requests

from conftest import login, make_profile


def upstream(status_code=200, data=None):
	resp = Mock()
	resp.status_code = status_code
	resp.json.return_value = data
	if status_code >= 400:
		resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Server Error")
	else:
		resp.raise_for_status.return_value = None
	return resp


def test_server_status_relay_maps_upstream(client):
	data = {
		"online": True,
		"ip": "203.0.113.5",
		"port": 25565,
		"players": 3,
		"max_players": 10,
		"version": "1.20",
		"motd_clean": "Hi",
		"motd_html": "<span>Hi</span>",
		"favicon_url": "data:image/png;base64,AAAA",
		"extra": "ignored",
	}
	with patch("server_directory.relay.requests.get", return_value=upstream(200, data)) as get:
		resp = client.post("/api/query-mc-server", json={"server": "play.example.com"})

	assert resp.status_code == 200
	assert get.call_args.kwargs["params"] == {"server": "play.example.com"}
	body = resp.get_json()
	assert body["success"] is True
	assert body["data"]["players"] == 3
	assert body["data"]["motd_clean"] == "Hi"
	assert "extra" not in body["data"]


def test_server_status_relay_reports_unreachable_as_offline(client):
	with patch("server_directory.relay.requests.get", return_value=upstream(404)):
		resp = client.post("/api/query-mc-server", json={"server": "gone.example.com"})

	assert resp.status_code == 200
	body = resp.get_json()
	assert body["success"] is True
	assert body["data"]["online"] is False


def test_server_status_relay_upstream_failure(client):
	with patch("server_directory.relay.requests.get", return_value=upstream(502)):
		resp = client.post("/api/query-mc-server", json={"server": "play.example.com"})
	assert resp.status_code == 500
	assert resp.get_json()["success"] is False

	with patch("server_directory.relay.requests.get", side_effect=requests.Timeout("timeout")):
		resp = client.post("/api/query-mc-server", json={"server": "play.example.com"})
	assert resp.status_code == 500
	assert resp.get_json() == {"success": False, "error": "timeout"}


def test_server_status_relay_requires_address(client):
	resp = client.post("/api/query-mc-server", json={})
	assert resp.status_code == 400
	assert resp.get_json()["success"] is False


def test_player_relay(client):
	data = {"username": "Notch", "uuid": "069a79f4-44e9-4726-a5be-fca90e38aaf5", "skin_url": "https://x/skin.png"}
	with patch("server_directory.relay.requests.get", return_value=upstream(200, data)):
		resp = client.post("/api/query-mc-player", json={"username": "Notch"})
	assert resp.status_code == 200
	assert resp.get_json() == {"success": True, "data": data}

	with patch("server_directory.relay.requests.get", return_value=upstream(404)):
		resp = client.post("/api/query-mc-player", json={"username": "nobody_here"})
	assert resp.status_code == 404
	assert resp.get_json()["success"] is False

	resp = client.post("/api/query-mc-player", json={"username": ""})
	assert resp.status_code == 400


def test_link_minecraft_account(client):
	make_profile("steve")
	login(client, "steve")

	data = {"username": "Notch", "uuid": "069a79f4-44e9-4726-a5be-fca90e38aaf5", "skin_url": "https://x/skin.png"}
	with patch("server_directory.relay.requests.get", return_value=upstream(200, data)):
		resp = client.put("/me/minecraft-username", json={"username": "notch"})
	assert resp.status_code == 200
	assert resp.get_json()["minecraft_username"] == "Notch"
	assert resp.get_json()["minecraft_uuid"] == data["uuid"]

	with patch("server_directory.relay.requests.get", return_value=upstream(404)):
		resp = client.put("/me/minecraft-username", json={"username": "nobody_here"})
	assert resp.status_code == 400

	resp = client.delete("/me/minecraft-username")
	assert resp.get_json()["minecraft_username"] is None


def test_my_ip_without_geoip_database(client):
	resp = client.get("/api/my-ip", environ_base={"REMOTE_ADDR": "203.0.113.9"})
	assert resp.status_code == 200
	assert resp.get_json() == {"ip": "203.0.113.9", "region": None}
