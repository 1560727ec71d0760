class DirectoryError(Exception):
	"""Base class for errors reported back to API clients."""
	status = 400

	def __init__(self, message):
		super().__init__(message)
		self.message = message


class ValidationError(DirectoryError):
	status = 400


class LoginRequired(DirectoryError):
	status = 401

	def __init__(self, message="Login required."):
		super().__init__(message)


class PermissionDenied(DirectoryError):
	status = 403


class NotFound(DirectoryError):
	status = 404


class Conflict(DirectoryError):
	status = 409
