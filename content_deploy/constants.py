"""Global constants for content-deploy"""

import re

APP_NAME = "content-deploy"
LOG_FORMAT = "%(message)s"

# Configuration location
ENV_SERVER_CONFIG = "SERVER_CONFIG"
DEFAULT_CONFIG_FILE = "config/server.properties"

# Required configuration keys
KEY_UPLOAD_PATH = "CRX_UPLOAD_PATH"
KEY_INSTALL_PREFIX = "CRX_INSTALL_PREFIX"
KEY_PACKAGE_BASE_PATH = "PKG_BASE_PATH"
KEY_EXPLODE_ROOT = "EXPLODE_ROOT"
KEY_DEFAULT_AUTHOR_PORT = "DEFAULT_AUTHOR_PORT"
KEY_DEFAULT_PUBLISH_PORT = "DEFAULT_PUBLISH_PORT"
KEY_BUILD_USER = "aem_build_user"

REQUIRED_KEYS = [
    KEY_UPLOAD_PATH,
    KEY_INSTALL_PREFIX,
    KEY_PACKAGE_BASE_PATH,
    KEY_EXPLODE_ROOT,
    KEY_DEFAULT_AUTHOR_PORT,
    KEY_DEFAULT_PUBLISH_PORT,
    KEY_BUILD_USER,
]

# Optional configuration keys
KEY_MAX_PACKAGE_SIZE = "max_package_size"
KEY_HTTP_TIMEOUT = "HTTP_TIMEOUT"
KEY_REFERENCE_ROOT = "REFERENCE_FILTER_ROOT"
KEY_SUCCESS_TOKEN = "INSTALL_SUCCESS_TOKEN"
KEY_SERVERS = "servers"

# Per-environment key templates
BUILD_ALLOWED_KEY = "{environment}_build_allowed"
SERVER_KEY_PATTERN = re.compile(
    r"^(?P<env>[a-z0-9]+)_(?P<pool>[a-z0-9]+)_aem_(?P<role>author|publish)[a-z]*$"
)

# Defaults
DEFAULT_HTTP_TIMEOUT = 30.0  # seconds
DEFAULT_REFERENCE_ROOT = "/var/lib/build/workspace"
DEFAULT_SUCCESS_TOKEN = "success"
REFERENCE_FILTER_FILE = "filter.txt"

TRUTHY_LITERALS = {"true", "1", "yes"}
FALSY_LITERALS = {"false", "0", "no"}

# Package metadata entries inside a content package archive
VAULT_PROPERTIES_ENTRY = "META-INF/vault/properties.xml"
VAULT_FILTER_ENTRY = "META-INF/vault/filter.xml"

ARCHIVE_EXTENSIONS = {
    ".zip": "zip",
    ".jar": "jar",
}
WORKSPACE_PACKAGE_GLOB = "*.zip"

BYTES_PER_MB = 1024 * 1024

# Package manager commands
LIST_COMMAND = "ls"
INSTALL_COMMAND = "install"
INSTALL_PARAMS = {
    "cmd": INSTALL_COMMAND,
    "force": "true",
    "recursive": "true",
}

# Listing proximity search, in lines around the matched <name> element
LISTING_WINDOW = 5

# Truncation for logged remote responses
RESPONSE_EXCERPT_LENGTH = 400

# Discovery strategies
STRATEGY_STRUCTURED = "structured"
STRATEGY_WINDOW = "window"
STRATEGY_FALLBACK = "fallback"


# Error codes
class ErrorCode:
    CONFIG_ERROR = "CD001"
    PACKAGE_NOT_FOUND = "CD002"
    UNSUPPORTED_TYPE = "CD003"
    SIZE_EXCEEDED = "CD004"
    FILTER_MISMATCH = "CD005"
    DISCOVERY_AMBIGUOUS = "CD006"
    UPLOAD_FAILED = "CD007"
    INSTALL_FAILED = "CD008"


# Process exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

# Display constants
EMOJI_SUCCESS = "✓"
EMOJI_ERROR = "✗"
EMOJI_WARNING = "⚠"

MSG_INSTALL_SUCCESS = f"{EMOJI_SUCCESS} Installed {{package}} on {{target}}"
MSG_WOULD_INSTALL = "[DEBUG] Would install {package} on {target}: {url}"
MSG_DEPLOY_COMPLETE = f"{EMOJI_SUCCESS} Deployment completed successfully"
