from glob import glob

# Enables detailed tracebacks and an interactive Python console on errors.
# Never use in production!
DEBUG = False

# Key used to sign session cookies. Override this in the instance config.
SECRET_KEY = "change-me"

# Database to use to store persistent server information
SQLALCHEMY_DATABASE_URI = "sqlite:///server_directory.sqlite"

# Message broker to forward messages from web server to worker threads
# Redis and RabbitMQ are good options.
CELERY_BROKER_URL = "redis://localhost/0"

# Upstream services queried by the status and player relays.
STATUS_API_URL = "https://uapis.cn/api/v1/game/minecraft/serverstatus"
PLAYER_API_URL = "https://uapis.cn/api/v1/game/minecraft/userinfo"

# Seconds to wait for an upstream service before giving up.
RELAY_TIMEOUT = 10

# Base URL of a running directory, used by the status board command.
RELAY_URL = "http://127.0.0.1:5000"

# Upper bound, in seconds, of the random delay before a status poll.
# Spreads out requests when many servers are shown at once.
STATUS_JITTER = 1.0

# Listing pagination
PAGE_SIZE = 12
MAX_PAGE_SIZE = 50

# Number of servers in the featured and latest listings
FEATURED_LIMIT = 6
LATEST_LIMIT = 6

# Maximum number of tags per server and characters per tag
MAX_TAGS = 10
MAX_TAG_LENGTH = 20

MAX_COMMENT_LENGTH = 500

# Publish comments without waiting for an admin to approve them.
AUTO_APPROVE_COMMENTS = True

# MaxMind GeoIP database.
# You can download a copy from https://db-ip.com/db/download/ip-to-country-lite
mmdbs = glob("dbip-country-lite-*.mmdb")
if mmdbs:
	MAXMIND_DB = mmdbs[0]
