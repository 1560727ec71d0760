from datetime import datetime

from .app import app, celery, db
from .models import Profile, Server
from .util import get_geo_region


@celery.task
def record_view(server_id):
	Server.query.filter_by(id=server_id) \
		.update({Server.view_count: Server.view_count + 1}, synchronize_session=False)
	db.session.commit()


@celery.task
def update_login_info(profile_id, ip):
	profile = db.session.get(Profile, profile_id)
	if profile is None:
		app.logger.warning("Login info for unknown profile %d dropped.", profile_id)
		return

	profile.last_login_at = datetime.utcnow()
	profile.last_login_ip = ip
	profile.last_login_region = get_geo_region(ip) if ip else None

	db.session.commit()
