"""Typed request bodies.

Each request struct lists its fields in a table of
``fieldName: (Required, Type, SubType)`` and is built with ``from_json``,
which raises ValidationError on the first problem found.
"""
import re
from dataclasses import dataclass, field
from typing import List, Optional

from .errors import ValidationError
from .models import GAME_VERSIONS, ROLES, SERVER_TYPES
from .status import DEFAULT_PORT


USERNAME_RE = re.compile(r"^[A-Za-z0-9_]{3,32}$")
MINECRAFT_NAME_RE = re.compile(r"^[A-Za-z0-9_]{3,16}$")

TRUE_STRINGS = ("true", "1", "yes")
FALSE_STRINGS = ("false", "0", "no")

BAD_CHARS = " \t\v\r\n\x00"


def check_fields(obj, fields):
	"""Checks the types of fields in a request object.

	Returns error string or None.
	"""
	if not isinstance(obj, dict):
		return "JSON data is not an object."

	for name, data in fields.items():
		if name not in obj:
			if data[0]:
				return f"Required field '{name}' is missing."
			continue

		expected = data[1] if isinstance(data[1], tuple) else (data[1],)
		type_str = type(obj[name]).__name__
		if type_str not in expected:
			return f"Field '{name}' has incorrect type (expected {data[1]} found {type_str})."

		if len(data) >= 3 and obj[name] is not None:
			for item in obj[name]:
				subtype_str = type(item).__name__
				if subtype_str != data[2]:
					return f"Entry in field '{name}' has incorrect type (expected {data[2]} found {subtype_str})."

	return None


def require_fields(obj, fields):
	error_str = check_fields(obj, fields)
	if error_str is not None:
		raise ValidationError("Invalid JSON data: " + error_str)


def require_text(value, name, max_length=None):
	value = value.strip()
	if not value:
		raise ValidationError(f"Field '{name}' must not be empty.")
	if max_length is not None and len(value) > max_length:
		raise ValidationError(f"Field '{name}' is longer than {max_length} characters.")
	return value


def check_host(host):
	if not host or len(host) > 255 or any(c in host for c in BAD_CHARS + "/@#\"'"):
		raise ValidationError("Field 'ip_address' is not a valid host name or IP address.")
	if ":" in host and "." in host:
		raise ValidationError("Field 'ip_address' must not include a port number.")


def check_port(port):
	if not 1 <= port <= 65535:
		raise ValidationError("Field 'port' is out of range.")


def parse_bool(value, name):
	value = value.lower()
	if value in TRUE_STRINGS:
		return True
	if value in FALSE_STRINGS:
		return False
	raise ValidationError(f"Parameter '{name}' is not a boolean.")


def parse_int(value, name):
	try:
		return int(value)
	except ValueError:
		raise ValidationError(f"Parameter '{name}' is not an integer.") from None


SERVER_FIELDS = {
	"name": (True, "str"),
	"description": (True, "str"),
	"ip_address": (True, "str"),
	"port": (False, "int"),
	"version": (True, "str"),
	"server_type": (True, "str"),
	"max_players": (False, ("int", "NoneType")),

	# Flags
	"is_pure_public": (False, "bool"),
	"requires_whitelist": (False, "bool"),
	"requires_genuine": (False, "bool"),

	"tags": (False, "list", "str"),
	"images": (False, "list", "str"),
}

# Fields that an owner may ask to change after approval
EDITABLE_FIELDS = ("name", "description", "ip_address", "port", "version",
	"server_type", "max_players", "is_pure_public", "requires_whitelist",
	"requires_genuine")


def clean_server_values(obj):
	"""Checks the values of server fields present in `obj`.

	Returns a new dict with the normalized values.
	"""
	values = {}
	if "name" in obj:
		values["name"] = require_text(obj["name"], "name", 64)
	if "description" in obj:
		values["description"] = require_text(obj["description"], "description", 5000)
	if "ip_address" in obj:
		host = obj["ip_address"].strip().lower().rstrip(".")
		check_host(host)
		values["ip_address"] = host
	if "port" in obj:
		check_port(obj["port"])
		values["port"] = obj["port"]
	if "version" in obj:
		if obj["version"] not in GAME_VERSIONS:
			raise ValidationError("Field 'version' is not a known game version.")
		values["version"] = obj["version"]
	if "server_type" in obj:
		if obj["server_type"] not in SERVER_TYPES:
			raise ValidationError("Field 'server_type' is not a known server type.")
		values["server_type"] = obj["server_type"]
	if "max_players" in obj:
		if obj["max_players"] is not None and obj["max_players"] < 0:
			raise ValidationError("Field 'max_players' must not be negative.")
		values["max_players"] = obj["max_players"]
	for flag in ("is_pure_public", "requires_whitelist", "requires_genuine"):
		if flag in obj:
			values[flag] = obj[flag]
	return values


def clean_tags(tags, max_tags, max_length):
	result = []
	for tag in tags:
		tag = tag.strip().lstrip("#")
		if not tag or tag in result:
			continue
		if len(tag) > max_length:
			raise ValidationError(f"Tag '{tag}' is longer than {max_length} characters.")
		result.append(tag)
	if len(result) > max_tags:
		raise ValidationError(f"At most {max_tags} tags are allowed.")
	return result


@dataclass
class ServerSubmission:
	name: str
	description: str
	ip_address: str
	version: str
	server_type: str
	port: int = DEFAULT_PORT
	max_players: Optional[int] = None
	is_pure_public: bool = False
	requires_whitelist: bool = False
	requires_genuine: bool = False
	tags: List[str] = field(default_factory=list)
	images: List[str] = field(default_factory=list)

	@classmethod
	def from_json(cls, obj, max_tags=10, max_tag_length=20):
		require_fields(obj, SERVER_FIELDS)
		values = clean_server_values(obj)
		values["tags"] = clean_tags(obj.get("tags", []), max_tags, max_tag_length)

		images = []
		for url in obj.get("images", []):
			if not url.startswith(("http://", "https://")) or any(c in url for c in BAD_CHARS):
				raise ValidationError("Entry in field 'images' is not an http(s) URL.")
			images.append(url)
		values["images"] = images

		return cls(**values)

	def server_values(self):
		return {name: getattr(self, name) for name in EDITABLE_FIELDS}


@dataclass
class EditRequestSubmission:
	changes: dict

	@classmethod
	def from_json(cls, obj):
		require_fields(obj, {"changes": (True, "dict")})
		changes = obj["changes"]
		unknown = [name for name in changes if name not in EDITABLE_FIELDS]
		if unknown:
			raise ValidationError(f"Field '{unknown[0]}' cannot be changed.")
		if not changes:
			raise ValidationError("No changes requested.")

		fields = {name: (False,) + SERVER_FIELDS[name][1:] for name in EDITABLE_FIELDS}
		require_fields(changes, fields)
		return cls(clean_server_values(changes))


@dataclass
class CommentSubmission:
	content: str

	@classmethod
	def from_json(cls, obj, max_length=500):
		require_fields(obj, {"content": (True, "str")})
		return cls(require_text(obj["content"], "content", max_length))


@dataclass
class ReportSubmission:
	reason: str
	server_id: Optional[int] = None
	comment_id: Optional[int] = None

	@classmethod
	def from_json(cls, obj):
		require_fields(obj, {
			"reason": (True, "str"),
			"server_id": (False, "int"),
			"comment_id": (False, "int"),
		})
		if ("server_id" in obj) == ("comment_id" in obj):
			raise ValidationError("Exactly one of 'server_id' and 'comment_id' is required.")
		return cls(require_text(obj["reason"], "reason", 1000),
			obj.get("server_id"), obj.get("comment_id"))


@dataclass
class Registration:
	username: str
	password: str
	email: Optional[str] = None

	@classmethod
	def from_json(cls, obj):
		require_fields(obj, {
			"username": (True, "str"),
			"password": (True, "str"),
			"email": (False, ("str", "NoneType")),
		})
		if not USERNAME_RE.match(obj["username"]):
			raise ValidationError("Field 'username' must be 3 to 32 letters, digits or underscores.")
		if len(obj["password"]) < 8:
			raise ValidationError("Field 'password' must be at least 8 characters.")
		email = obj.get("email") or None
		if email is not None and "@" not in email:
			raise ValidationError("Field 'email' does not match expected format.")
		return cls(obj["username"], obj["password"], email)


@dataclass
class Credentials:
	username: str
	password: str

	@classmethod
	def from_json(cls, obj):
		require_fields(obj, {
			"username": (True, "str"),
			"password": (True, "str"),
		})
		return cls(obj["username"], obj["password"])


@dataclass
class ProfileUpdate:
	email: Optional[str] = None
	avatar_url: Optional[str] = None
	bio: Optional[str] = None
	fields: tuple = ()

	@classmethod
	def from_json(cls, obj):
		require_fields(obj, {
			"email": (False, ("str", "NoneType")),
			"avatar_url": (False, ("str", "NoneType")),
			"bio": (False, ("str", "NoneType")),
		})
		present = tuple(name for name in ("email", "avatar_url", "bio") if name in obj)
		if obj.get("email") and "@" not in obj["email"]:
			raise ValidationError("Field 'email' does not match expected format.")
		if obj.get("avatar_url") and not obj["avatar_url"].startswith(("http://", "https://")):
			raise ValidationError("Field 'avatar_url' does not match expected format.")
		if obj.get("bio") and len(obj["bio"]) > 500:
			raise ValidationError("Field 'bio' is longer than 500 characters.")
		return cls(obj.get("email") or None, obj.get("avatar_url") or None,
			obj.get("bio") or None, present)


@dataclass
class MinecraftUsername:
	username: str

	@classmethod
	def from_json(cls, obj):
		require_fields(obj, {"username": (True, "str")})
		username = obj["username"].strip()
		if not MINECRAFT_NAME_RE.match(username):
			raise ValidationError("Field 'username' is not a valid Minecraft name.")
		return cls(username)


@dataclass
class Review:
	approved: bool
	admin_note: Optional[str] = None

	@classmethod
	def from_json(cls, obj):
		require_fields(obj, {
			"approved": (True, "bool"),
			"admin_note": (False, ("str", "NoneType")),
		})
		return cls(obj["approved"], obj.get("admin_note") or None)


@dataclass
class RoleChange:
	role: str

	@classmethod
	def from_json(cls, obj):
		require_fields(obj, {"role": (True, "str")})
		if obj["role"] not in ROLES:
			raise ValidationError("Field 'role' is not a known role.")
		return cls(obj["role"])


@dataclass
class SiteSettingsUpdate:
	contact_email: Optional[str] = None
	qq_group: Optional[str] = None
	qq_group_link: Optional[str] = None
	fields: tuple = ()

	@classmethod
	def from_json(cls, obj):
		require_fields(obj, {
			"contact_email": (False, "str"),
			"qq_group": (False, "str"),
			"qq_group_link": (False, ("str", "NoneType")),
		})
		present = tuple(name for name in ("contact_email", "qq_group", "qq_group_link") if name in obj)
		return cls(obj.get("contact_email"), obj.get("qq_group"),
			obj.get("qq_group_link") or None, present)


SORT_ORDERS = ("latest", "popular", "featured")


@dataclass
class ServerFilter:
	version: Optional[str] = None
	server_type: Optional[str] = None
	is_pure_public: Optional[bool] = None
	requires_whitelist: Optional[bool] = None
	requires_genuine: Optional[bool] = None
	search: Optional[str] = None
	sort: str = "latest"

	@classmethod
	def from_args(cls, args):
		obj = cls()
		if args.get("version"):
			obj.version = args["version"]
		if args.get("server_type"):
			obj.server_type = args["server_type"]
		for flag in ("is_pure_public", "requires_whitelist", "requires_genuine"):
			if args.get(flag):
				setattr(obj, flag, parse_bool(args[flag], flag))
		if args.get("search", "").strip():
			obj.search = args["search"].strip()
		if args.get("sort"):
			if args["sort"] not in SORT_ORDERS:
				raise ValidationError("Parameter 'sort' must be one of " + ", ".join(SORT_ORDERS) + ".")
			obj.sort = args["sort"]
		return obj


@dataclass
class Pagination:
	page: int = 1
	page_size: int = 12

	@classmethod
	def from_args(cls, args, default_size=12, max_size=50):
		page = parse_int(args["page"], "page") if args.get("page") else 1
		page_size = parse_int(args["page_size"], "page_size") if args.get("page_size") else default_size
		if page < 1:
			raise ValidationError("Parameter 'page' must be at least 1.")
		if not 1 <= page_size <= max_size:
			raise ValidationError(f"Parameter 'page_size' must be between 1 and {max_size}.")
		return cls(page, page_size)
