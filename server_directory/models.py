from datetime import datetime

from sqlalchemy.orm.exc import NoResultFound
from werkzeug.security import check_password_hash, generate_password_hash

from .app import db
from .display import display_players, display_version
from .status import DEFAULT_PORT, canonical_address


ROLES = ("player", "owner", "admin")

SERVER_STATUSES = ("pending", "approved", "rejected", "offline")

SERVER_TYPES = ("survival", "creative", "rpg", "minigame", "skyblock",
	"prison", "factions", "other")

GAME_VERSIONS = ("1.21", "1.20", "1.19", "1.18", "1.17", "1.16", "1.15",
	"1.14", "1.13", "1.12", "1.11", "1.10", "1.9", "1.8", "1.7", "other")


def isoformat(dt):
	return dt.isoformat() if dt is not None else None


class Profile(db.Model):
	id = db.Column(db.Integer, primary_key=True)

	username = db.Column(db.String(32), nullable=False, unique=True, index=True)
	password_hash = db.Column(db.String, nullable=False)
	email = db.Column(db.String, nullable=True)

	# One of ROLES
	role = db.Column(db.String(16), nullable=False, default="player")

	avatar_url = db.Column(db.String, nullable=True)
	bio = db.Column(db.String, nullable=True)

	# Linked Minecraft account, verified through the player relay
	minecraft_username = db.Column(db.String(16), nullable=True)
	minecraft_uuid = db.Column(db.String(36), nullable=True)

	# Recorded in the background after each login
	last_login_at = db.Column(db.DateTime, nullable=True)
	last_login_ip = db.Column(db.String, nullable=True)
	last_login_region = db.Column(db.String, nullable=True)

	created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
	updated_at = db.Column(db.DateTime, default=datetime.utcnow,
		onupdate=datetime.utcnow, nullable=False)

	def set_password(self, password):
		self.password_hash = generate_password_hash(password)

	def check_password(self, password):
		return check_password_hash(self.password_hash, password)

	@property
	def is_admin(self):
		return self.role == "admin"

	@staticmethod
	def find_by_username(username):
		try:
			return Profile.query.filter_by(username=username).one()
		except NoResultFound:
			return None

	def as_brief_json(self):
		return {
			"id": self.id,
			"username": self.username,
			"avatar_url": self.avatar_url,
		}

	def as_json(self):
		return {
			"id": self.id,
			"username": self.username,
			"email": self.email,
			"role": self.role,
			"avatar_url": self.avatar_url,
			"bio": self.bio,
			"minecraft_username": self.minecraft_username,
			"minecraft_uuid": self.minecraft_uuid,
			"last_login_at": isoformat(self.last_login_at),
			"last_login_region": self.last_login_region,
			"created_at": isoformat(self.created_at),
			"updated_at": isoformat(self.updated_at),
		}


class Server(db.Model):
	id = db.Column(db.Integer, primary_key=True)

	owner_id = db.Column(db.Integer, db.ForeignKey("profile.id"), nullable=False, index=True)

	name = db.Column(db.String(64), nullable=False)
	description = db.Column(db.String, nullable=False)

	# Connection address
	ip_address = db.Column(db.String, nullable=False)
	port = db.Column(db.Integer, nullable=False, default=DEFAULT_PORT)

	# One of GAME_VERSIONS and SERVER_TYPES
	version = db.Column(db.String(8), nullable=False)
	server_type = db.Column(db.String(16), nullable=False)

	# Flags
	is_pure_public = db.Column(db.Boolean, nullable=False, default=False)
	requires_whitelist = db.Column(db.Boolean, nullable=False, default=False)
	requires_genuine = db.Column(db.Boolean, nullable=False, default=False)

	# Player counts as entered by the owner.  Live counts from the status
	# provider are never written here.  NULL means no limit.
	max_players = db.Column(db.Integer, nullable=True)
	online_players = db.Column(db.Integer, nullable=False, default=0)

	# One of SERVER_STATUSES.  Only approved servers are listed.
	status = db.Column(db.String(16), nullable=False, default="pending", index=True)

	featured = db.Column(db.Boolean, nullable=False, default=False, index=True)

	view_count = db.Column(db.Integer, nullable=False, default=0)

	created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
	updated_at = db.Column(db.DateTime, default=datetime.utcnow,
		onupdate=datetime.utcnow, nullable=False)

	owner = db.relationship("Profile", backref="servers")
	images = db.relationship("ServerImage", cascade="all, delete-orphan",
		order_by="ServerImage.display_order")
	tags = db.relationship("ServerTag", cascade="all, delete-orphan",
		order_by="ServerTag.id")
	likes = db.relationship("ServerLike", cascade="all, delete-orphan")
	favorites = db.relationship("ServerFavorite", back_populates="server",
		cascade="all, delete-orphan")
	comments = db.relationship("ServerComment", back_populates="server",
		cascade="all, delete-orphan")
	edit_requests = db.relationship("ServerEditRequest", back_populates="server",
		cascade="all, delete-orphan")

	@property
	def address(self):
		return canonical_address(self.ip_address, self.port)

	@property
	def primary_image(self):
		for image in self.images:
			if image.is_primary:
				return image.image_url
		return self.images[0].image_url if self.images else None

	def is_visible_to(self, profile):
		if self.status == "approved":
			return True
		return profile is not None and (profile.is_admin or profile.id == self.owner_id)

	def is_managed_by(self, profile):
		return profile is not None and (profile.is_admin or profile.id == self.owner_id)

	def as_json(self):
		return {
			"id": self.id,
			"owner_id": self.owner_id,
			"owner": self.owner.as_brief_json() if self.owner else None,
			"name": self.name,
			"description": self.description,
			"ip_address": self.ip_address,
			"port": self.port,
			"address": self.address,
			"version": self.version,
			"server_type": self.server_type,
			"is_pure_public": self.is_pure_public,
			"requires_whitelist": self.requires_whitelist,
			"requires_genuine": self.requires_genuine,
			"max_players": self.max_players,
			"online_players": self.online_players,
			"status": self.status,
			"featured": self.featured,
			"view_count": self.view_count,
			"like_count": len(self.likes),
			"primary_image": self.primary_image,
			"images": [image.as_json() for image in self.images],
			"tags": [tag.tag for tag in self.tags],
			# Baseline shown until a live status check has resolved
			"display_players": display_players(self),
			"display_version": display_version(self),
			"created_at": isoformat(self.created_at),
			"updated_at": isoformat(self.updated_at),
		}


class ServerImage(db.Model):
	id = db.Column(db.Integer, primary_key=True)
	server_id = db.Column(db.Integer, db.ForeignKey("server.id"), nullable=False, index=True)
	image_url = db.Column(db.String, nullable=False)
	is_primary = db.Column(db.Boolean, nullable=False, default=False)
	display_order = db.Column(db.Integer, nullable=False, default=0)
	created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

	def as_json(self):
		return {
			"id": self.id,
			"image_url": self.image_url,
			"is_primary": self.is_primary,
			"display_order": self.display_order,
		}


class ServerTag(db.Model):
	id = db.Column(db.Integer, primary_key=True)
	server_id = db.Column(db.Integer, db.ForeignKey("server.id"), nullable=False, index=True)
	tag = db.Column(db.String(32), nullable=False)
	created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)


class ServerLike(db.Model):
	__table_args__ = (db.Index("ix_server_like_server_user", "server_id", "user_id", unique=True),)

	id = db.Column(db.Integer, primary_key=True)
	server_id = db.Column(db.Integer, db.ForeignKey("server.id"), nullable=False)
	user_id = db.Column(db.Integer, db.ForeignKey("profile.id"), nullable=False, index=True)
	created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)


class ServerFavorite(db.Model):
	__table_args__ = (db.Index("ix_server_favorite_server_user", "server_id", "user_id", unique=True),)

	id = db.Column(db.Integer, primary_key=True)
	server_id = db.Column(db.Integer, db.ForeignKey("server.id"), nullable=False)
	user_id = db.Column(db.Integer, db.ForeignKey("profile.id"), nullable=False, index=True)
	created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

	server = db.relationship("Server", back_populates="favorites")


class ServerComment(db.Model):
	id = db.Column(db.Integer, primary_key=True)
	server_id = db.Column(db.Integer, db.ForeignKey("server.id"), nullable=False, index=True)
	user_id = db.Column(db.Integer, db.ForeignKey("profile.id"), nullable=False, index=True)
	content = db.Column(db.String, nullable=False)
	is_approved = db.Column(db.Boolean, nullable=False, default=False, index=True)
	created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
	updated_at = db.Column(db.DateTime, default=datetime.utcnow,
		onupdate=datetime.utcnow, nullable=False)

	user = db.relationship("Profile")
	server = db.relationship("Server", back_populates="comments")

	def as_json(self):
		return {
			"id": self.id,
			"server_id": self.server_id,
			"server_name": self.server.name if self.server else None,
			"user": self.user.as_brief_json() if self.user else None,
			"content": self.content,
			"is_approved": self.is_approved,
			"created_at": isoformat(self.created_at),
		}


class ServerReport(db.Model):
	id = db.Column(db.Integer, primary_key=True)

	# Exactly one of these is set when the report is filed.  They are
	# cleared if the reported server or comment is deleted.
	server_id = db.Column(db.Integer, db.ForeignKey("server.id"), nullable=True)
	comment_id = db.Column(db.Integer, db.ForeignKey("server_comment.id"), nullable=True)

	reporter_id = db.Column(db.Integer, db.ForeignKey("profile.id"), nullable=False)
	reason = db.Column(db.String, nullable=False)

	# "pending" or "handled"
	status = db.Column(db.String(16), nullable=False, default="pending")
	handled_by = db.Column(db.Integer, db.ForeignKey("profile.id"), nullable=True)
	handled_at = db.Column(db.DateTime, nullable=True)

	created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

	reporter = db.relationship("Profile", foreign_keys=[reporter_id])
	server = db.relationship("Server")
	comment = db.relationship("ServerComment")

	def as_json(self):
		return {
			"id": self.id,
			"server_id": self.server_id,
			"server_name": self.server.name if self.server else None,
			"comment_id": self.comment_id,
			"comment_content": self.comment.content if self.comment else None,
			"reporter": self.reporter.as_brief_json() if self.reporter else None,
			"reason": self.reason,
			"status": self.status,
			"handled_by": self.handled_by,
			"handled_at": isoformat(self.handled_at),
			"created_at": isoformat(self.created_at),
		}


class ServerEditRequest(db.Model):
	id = db.Column(db.Integer, primary_key=True)
	server_id = db.Column(db.Integer, db.ForeignKey("server.id"), nullable=False, index=True)
	owner_id = db.Column(db.Integer, db.ForeignKey("profile.id"), nullable=False)

	# Field name to new value, checked against the submission schema
	changes = db.Column(db.JSON, nullable=False)

	# "pending", "approved" or "rejected"
	status = db.Column(db.String(16), nullable=False, default="pending", index=True)
	admin_note = db.Column(db.String, nullable=True)

	created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
	updated_at = db.Column(db.DateTime, default=datetime.utcnow,
		onupdate=datetime.utcnow, nullable=False)

	server = db.relationship("Server", back_populates="edit_requests")
	owner = db.relationship("Profile")

	def as_json(self):
		return {
			"id": self.id,
			"server_id": self.server_id,
			"server_name": self.server.name if self.server else None,
			"owner": self.owner.as_brief_json() if self.owner else None,
			"changes": self.changes,
			"status": self.status,
			"admin_note": self.admin_note,
			"created_at": isoformat(self.created_at),
			"updated_at": isoformat(self.updated_at),
		}


class SiteSettings(db.Model):
	"""
	This table has only a single row storing the public site settings.
	"""
	id = db.Column(db.Integer, primary_key=True)

	contact_email = db.Column(db.String, nullable=False, default="")
	qq_group = db.Column(db.String, nullable=False, default="")
	qq_group_link = db.Column(db.String, nullable=True)

	updated_at = db.Column(db.DateTime, default=datetime.utcnow,
		onupdate=datetime.utcnow, nullable=False)

	@staticmethod
	def get():
		try:
			return SiteSettings.query.filter_by(id=1).one()
		except NoResultFound:
			settings = SiteSettings()
			settings.id = 1
			settings.contact_email = ""
			settings.qq_group = ""
			db.session.add(settings)
			return settings

	def as_json(self):
		return {
			"contact_email": self.contact_email,
			"qq_group": self.qq_group,
			"qq_group_link": self.qq_group_link,
			"updated_at": isoformat(self.updated_at),
		}
