API_VERSION_HEADER = "X-Grant-Tracker-Version"

# JWT Configuration
JWT_ALGORITHM = "HS256"

# Authentication endpoints configuration
SKIP_AUTH_PATHS = {
    "/openapi.json",
    "/docs",
    "/redoc",
    "/health",
    "/health/liveness",
    "/",
}

# Cookie-authenticated session endpoints; POST still needs a bearer token
SKIP_AUTH_PATTERNS: list = [
    ("GET", r"^/api/session/?$"),
    ("DELETE", r"^/api/session/?$"),
]

# Display name used when neither a profile name nor an email is available
DEFAULT_DISPLAY_NAME = "User"

# Name given to organizations created for users that have none
DEFAULT_ORGANIZATION_NAME_PREFIX = "Organization-"

