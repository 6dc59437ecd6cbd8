#!/usr/bin/env python3
"""Constants for send mode connection retry.

These constants control the exponential backoff used when the sender
cannot reach the listener.
"""

# Number of connection attempts before giving up.
CONNECT_ATTEMPTS: int = 5

# Initial delay between connection attempts in seconds.
INITIAL_WAIT: float = 0.5

# Maximum delay between connection attempts in seconds.
MAX_WAIT: float = 8.0

# Multiplier for exponential backoff (delay = initial * multiplier^attempt).
WAIT_MULTIPLIER: float = 2.0
