"""
Project constants definitions
"""

# ============================================================
# Default Values
# ============================================================

DEFAULT_SSH_PORT = 22
DEFAULT_HOST_KEY_POLICY = "reject"

# Matches the SFTP maximum packet payload used by most servers
COPY_BUFSIZE = 32768

# ============================================================
# SSH Config
# ============================================================

SSH_CONFIG_PATH = "~/.ssh/config"
KNOWN_HOSTS_PATH = "~/.ssh/known_hosts"

# ============================================================
# Configuration
# ============================================================

DEFAULT_CONFIG_PATH = "~/.remotefs.toml"
ENV_PREFIX = "REMOTEFS_"

# ============================================================
# Walkthrough
# ============================================================

WALKTHROUGH_BASE_DIR = "/test"
WALKTHROUGH_GREETING = b"Hello, SFTP!"
WALKTHROUGH_APPENDIX = b"\nAppended text"
