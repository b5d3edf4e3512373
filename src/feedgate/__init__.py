"""FeedGate - authentication core for the feed API.

Signup and login with bcrypt-hashed passwords, stateless signed session
tokens, and a bearer-token gate for protected routes.
"""

__version__ = "0.1.0"

from feedgate.infrastructure.api.app import app

__all__ = ["app", "__version__"]
