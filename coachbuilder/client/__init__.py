"""
Client side of Coach Builder.

The API wrapper, client-local storage, the admin dashboard and the
command line interface that drives the builders.
"""

from .api import ApiClient, ApiError
from .dashboard import AdminDashboard
from .storage import AssessmentStore, CustomExerciseStore, LocalStore, SessionStore

__all__ = [
    "AdminDashboard",
    "ApiClient",
    "ApiError",
    "AssessmentStore",
    "CustomExerciseStore",
    "LocalStore",
    "SessionStore",
]
