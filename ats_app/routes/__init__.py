# ats_app/routes/__init__.py
"""
Application routes package
"""

from .auth import register_auth_routes
from .hiring_manager import register_hiring_manager_routes
from .job_seeker import register_job_seeker_routes
from .organization import register_organization_routes


def init_routes(app):
    """Initialize all application routes"""
    register_auth_routes(app)
    register_organization_routes(app)
    register_hiring_manager_routes(app)
    register_job_seeker_routes(app)
