"""API route modules."""
from api.routes import auth, submissions, tests, users

__all__ = ["auth", "submissions", "tests", "users"]
