from flask import session

from .app import db
from .errors import LoginRequired, PermissionDenied
from .models import Profile


class SessionContext:
	"""The signed-in profile of the current request, if any.

	Resolved once per request with resolve() and handed to the service
	functions that need to know who is asking.
	"""

	def __init__(self, profile=None):
		self.profile = profile

	@classmethod
	def resolve(cls):
		profile_id = session.get("profile_id")
		profile = db.session.get(Profile, profile_id) if profile_id is not None else None
		if profile_id is not None and profile is None:
			# Profile was deleted while signed in
			session.pop("profile_id", None)
		return cls(profile)

	@property
	def signed_in(self):
		return self.profile is not None

	@property
	def profile_id(self):
		return self.profile.id if self.profile is not None else None

	@property
	def is_admin(self):
		return self.profile is not None and self.profile.is_admin

	def require_login(self):
		if self.profile is None:
			raise LoginRequired()
		return self.profile

	def require_role(self, *roles):
		profile = self.require_login()
		if profile.role not in roles:
			raise PermissionDenied("This action requires the %s role." % " or ".join(roles))
		return profile

	def sign_in(self, profile):
		session.clear()
		session["profile_id"] = profile.id
		self.profile = profile

	def sign_out(self):
		session.clear()
		self.profile = None
