# ABOUTME: Exception definitions for game module loading.
# ABOUTME: Every configuration problem is reported once at load time, never resolved silently at runtime.


class GameDefinitionError(Exception):
    """Raised when a game module is missing, malformed or internally inconsistent"""
    pass
