import maxminddb
from flask import jsonify, request

from .app import app
from .errors import ValidationError


MAXMIND_DB = app.config.get("MAXMIND_DB", None)
if MAXMIND_DB is not None:
	geoip_reader = maxminddb.open_database(MAXMIND_DB, maxminddb.MODE_AUTO)
else:
	app.logger.warning(
		"For working GeoIP download the database from "
		"https://db-ip.com/db/download/ip-to-country-lite and point "
		"the MAXMIND_DB setting to the .mmdb file."
	)
	geoip_reader = None


def get_remote_ip():
	ip = request.remote_addr or ""
	if ip.startswith("::ffff:"):
		ip = ip[7:]
	return ip


def get_geo_region(ip):
	"""Returns the country (or failing that, continent) of an IP address."""
	if ip.startswith("::ffff:"):
		ip = ip[7:]

	if geoip_reader is None:
		return None

	try:
		geo = geoip_reader.get(ip)
	except ValueError:
		return None

	if geo and "country" in geo:
		names = geo["country"].get("names", {})
		return names.get("en") or geo["country"].get("iso_code")
	elif geo and "continent" in geo:
		return geo["continent"]["code"]
	else:
		app.logger.warning("Unable to get GeoIP data for %s.", ip)
		return None


def get_request_json():
	obj = request.get_json(silent=True)
	if obj is None:
		raise ValidationError("Failed to decode JSON request body.")
	if not isinstance(obj, dict):
		raise ValidationError("JSON data is not an object.")
	return obj


def as_list(items):
	return jsonify([item.as_json() for item in items])
