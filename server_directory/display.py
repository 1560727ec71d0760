"""Merges stored server fields with live status for display.

Live values only win while the live result says the server is online;
otherwise the manually maintained fields of the listing are shown.
"""

# Stored versions are shown as they are, except for these
VERSION_LABELS = {
	"other": "Other",
}

UNLIMITED = "∞"


def _is_online(live):
	return live is not None and live.online is True


def display_players(stored, live=None):
	if _is_online(live) and live.players is not None:
		return f"{live.players.online}/{live.players.max}"
	max_players = stored.max_players if stored.max_players is not None else UNLIMITED
	return f"{stored.online_players}/{max_players}"


def display_version(stored, live=None):
	if _is_online(live) and live.version:
		return live.version
	return VERSION_LABELS.get(stored.version, stored.version)


def display_motd(live=None):
	"""Returns a (plain, html) pair, or None when there is nothing to show."""
	if not _is_online(live) or not (live.motd or live.motd_html):
		return None
	return live.motd, live.motd_html


def display_favicon(live=None):
	if not _is_online(live):
		return None
	return live.favicon_url


def status_badge(live=None, checking=False):
	"""Text of the online badge, or None if no badge should be shown.

	A failed check and a server reported offline look the same.
	"""
	if checking:
		return "checking"
	if live is None:
		return None
	return "online" if live.online else "offline"
