# Copy this file to config.py and adjust it.  Values set here override the
# defaults in server_directory/config.py.

# Enables detailed tracebacks and an interactive Python console on errors.
# Never use in production!
#DEBUG = True

# Key used to sign session cookies.  Must be random and kept secret.
SECRET_KEY = "replace with the output of: python -c 'import secrets; print(secrets.token_hex())'"

# Database to use to store persistent server information
#SQLALCHEMY_DATABASE_URI = "postgresql://directory@localhost/directory"

# Message broker to forward messages from web server to worker threads
#CELERY_BROKER_URL = "redis://localhost/0"

# Upstream status and player services
#STATUS_API_URL = "https://uapis.cn/api/v1/game/minecraft/serverstatus"
#PLAYER_API_URL = "https://uapis.cn/api/v1/game/minecraft/userinfo"

# Hold new comments until an admin approves them
#AUTO_APPROVE_COMMENTS = False

# MaxMind GeoIP database used to record the region of logins.
# You can download a copy from https://db-ip.com/db/download/ip-to-country-lite
#MAXMIND_DB = "dbip-country-lite-2024-01.mmdb"
