#!/usr/bin/env python3
"""Default settings for the cliplisten listener.

These values are used when neither a command-line option nor the matching
CLIPLISTEN_* environment variable is given.
"""

# Address the listener binds to.
DEFAULT_ADDR: str = "localhost"

# TCP port the listener binds to.
DEFAULT_PORT: int = 52224

# Output charset that received text is transcoded into.
DEFAULT_ENCODING: str = "shift_jis"

# Shared handshake key. Operators are expected to change it.
DEFAULT_ACCEPT_KEY: str = "change_on_install"

# Number of characters of the received text shown in notifications.
DEFAULT_PREVIEW_LENGTH: int = 40

# Highest verbosity level (full payload echo and encoding decisions).
MAX_VERBOSITY: int = 2

# Value of the "type" header used when the sender omits it.
DEFAULT_SINK_TYPE: str = "clipboard"

# Maximum length of the handshake line in bytes.
# Longer first lines are treated as a rejected handshake.
HANDSHAKE_LINE_LIMIT: int = 65536

# Environment variable that disables native clipboard/notification probing.
NO_NATIVE_ENV: str = "CLIPLISTEN_NO_NATIVE"

# Environment variable that replaces PATH when probing external commands.
SEARCH_PATH_ENV: str = "CLIPLISTEN_PATH"
