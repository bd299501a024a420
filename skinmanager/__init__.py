"""skinmanager - plugin host and message dispatch for a game-mod manager."""

__version__ = "0.1.0"
__logo__ = "🧩"
