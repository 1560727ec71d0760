"""Relays to the upstream Minecraft status and player services."""
import requests

from .app import app


OFFLINE_DATA = {
	"online": False,
	"ip": "",
	"port": 0,
	"players": 0,
	"max_players": 0,
	"version": "",
	"motd_clean": "",
	"motd_html": "",
}


def _get(url, **params):
	return requests.get(url,
		params=params,
		headers={"Accept": "application/json"},
		timeout=app.config["RELAY_TIMEOUT"])


def query_server_status(server):
	"""Looks up `server` ("host" or "host:port") with the status provider.

	Returns a (response object, HTTP status) pair.
	"""
	try:
		resp = _get(app.config["STATUS_API_URL"], server=server)

		# The provider answers 404 for servers it cannot reach
		if resp.status_code == 404:
			return {"success": True, "data": dict(OFFLINE_DATA)}, 200

		resp.raise_for_status()
		data = resp.json()
		if not isinstance(data, dict):
			raise ValueError("Malformed response from upstream service.")
	except (requests.RequestException, ValueError) as e:
		app.logger.error("Status query for %r failed: %s", server, e)
		return {"success": False, "error": str(e) or "Query failed."}, 500

	return {
		"success": True,
		"data": {
			"online": data.get("online", False),
			"ip": data.get("ip"),
			"port": data.get("port"),
			"players": data.get("players"),
			"max_players": data.get("max_players"),
			"version": data.get("version"),
			"motd_clean": data.get("motd_clean"),
			"motd_html": data.get("motd_html"),
			"favicon_url": data.get("favicon_url"),
		},
	}, 200


def query_player(username):
	"""Looks up a Minecraft account by name.

	Returns a (response object, HTTP status) pair.
	"""
	try:
		resp = _get(app.config["PLAYER_API_URL"], username=username)

		if resp.status_code == 404:
			return {"success": False, "error": "Player not found, check the user name."}, 404

		resp.raise_for_status()
		data = resp.json()
		if not isinstance(data, dict):
			raise ValueError("Malformed response from upstream service.")
	except (requests.RequestException, ValueError) as e:
		app.logger.error("Player query for %r failed: %s", username, e)
		return {"success": False, "error": str(e) or "Query failed."}, 500

	return {
		"success": True,
		"data": {
			"username": data.get("username"),
			"uuid": data.get("uuid"),
			"skin_url": data.get("skin_url"),
		},
	}, 200
