import asyncio
import json

import click

from .app import app, db
from .board import StatusBoard
from .models import Profile, Server, ServerTag
from .status import DEFAULT_PORT, RelayClient


@app.cli.command("load-json")
@click.argument("filename")
@click.option("--owner", required=True, help="User name of the profile owning the servers.")
@click.option("--approve", is_flag=True, help="List the servers right away.")
def load_json(filename, owner, approve):
	"""Load the SQL database with servers from a JSON server list.
	"""
	profile = Profile.find_by_username(owner)
	if profile is None:
		raise click.ClickException(f"No profile named {owner!r}.")

	with open(filename, "r") as fd:
		data = json.load(fd)
		assert data

	for obj in data["list"]:
		server = Server()
		server.owner_id = profile.id
		server.name = obj["name"]
		server.description = obj.get("description", "")
		server.ip_address = obj["ip_address"]
		server.port = obj.get("port", DEFAULT_PORT)
		server.version = obj.get("version", "other")
		server.server_type = obj.get("server_type", "other")
		server.is_pure_public = obj.get("is_pure_public", False)
		server.requires_whitelist = obj.get("requires_whitelist", False)
		server.requires_genuine = obj.get("requires_genuine", False)
		server.max_players = obj.get("max_players")
		server.online_players = obj.get("online_players", 0)
		server.status = "approved" if approve else "pending"
		for tag in obj.get("tags", []):
			server.tags.append(ServerTag(tag=tag))
		db.session.add(server)

	db.session.commit()

	click.echo(click.style(f'Loaded {len(data["list"])} servers', fg="green"))


@app.cli.command("create-admin")
@click.argument("username")
@click.password_option()
def create_admin(username, password):
	"""Create an admin profile, or promote an existing one.
	"""
	profile = Profile.find_by_username(username)
	if profile is None:
		profile = Profile()
		profile.username = username
		profile.set_password(password)
		db.session.add(profile)
	profile.role = "admin"
	db.session.commit()

	click.echo(click.style(f"{username} is now an admin", fg="green"))


@app.cli.command("status-board")
@click.option("--relay-url", default=None, help="Base URL of a running directory.")
@click.option("--limit", default=50, show_default=True)
def status_board(relay_url, limit):
	"""Check the live status of every listed server and print the list.
	"""
	relay_url = relay_url or app.config["RELAY_URL"]
	servers = Server.query.filter_by(status="approved") \
		.order_by(Server.created_at.desc()).limit(limit).all()

	async def run():
		async with RelayClient(relay_url) as relay:
			board = StatusBoard.for_relay(relay, jitter=app.config["STATUS_JITTER"])
			for server in servers:
				board.mount(server)
			await board.settle()
			rows = board.rows()
			board.unmount_all()
		return rows

	for row in asyncio.run(run()):
		colour = {"online": "green", "offline": "red"}.get(row["badge"], "yellow")
		badge = click.style(f"{row['badge'] or 'unknown':8}", fg=colour)
		click.echo(f"{badge} {row['players']:>9} {row['version']:>8}  {row['name']}")
