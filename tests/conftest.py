import os
import tempfile

import pytest

# Point the application at a throwaway database before it is imported
_tmpdir = tempfile.mkdtemp(prefix="server-directory-")
_config = os.path.join(_tmpdir, "test_config.py")
with open(_config, "w") as fd:
	fd.write("TESTING = True\n")
	fd.write("SECRET_KEY = 'test'\n")
	fd.write("SQLALCHEMY_DATABASE_URI = %r\n" % ("sqlite:///" + os.path.join(_tmpdir, "test.sqlite")))
	fd.write("STATUS_API_URL = 'https://status.invalid/serverstatus'\n")
	fd.write("PLAYER_API_URL = 'https://status.invalid/userinfo'\n")
	fd.write("MAXMIND_DB = None\n")
os.environ["SERVER_DIRECTORY_CONFIG"] = _config

from server_directory.app import app, celery, db  # noqa: E402
from server_directory.models import Profile, Server  # noqa: E402

celery.conf.task_always_eager = True


@pytest.fixture
def client():
	with app.app_context():
		db.drop_all()
		db.create_all()
	with app.test_client() as client:
		yield client
	with app.app_context():
		db.session.remove()


def make_profile(username, role="player", password="password123"):
	with app.app_context():
		profile = Profile()
		profile.username = username
		profile.role = role
		profile.set_password(password)
		db.session.add(profile)
		db.session.commit()
		return profile.id


def make_server(owner_id, status="approved", **kwargs):
	values = {
		"name": "Test Server",
		"description": "A server for testing",
		"ip_address": "play.example.com",
		"port": 25565,
		"version": "1.20",
		"server_type": "survival",
		"online_players": 5,
		"max_players": 20,
	}
	values.update(kwargs)
	with app.app_context():
		server = Server(owner_id=owner_id, status=status, **values)
		db.session.add(server)
		db.session.commit()
		return server.id


def login(client, username, password="password123"):
	resp = client.post("/auth/login", json={"username": username, "password": password})
	assert resp.status_code == 200
	return resp
