"""
Authentication application.

Platform users who administer the service: they log in with email and
password, receive JWTs and manage API keys and system notification settings.

Key components:
    - User model: Custom email-based user with a platform role
    - IsPlatformAdmin: Permission guarding every admin endpoint
    - Token endpoints: simplejwt obtain / refresh views

Usage:
    from authentication.models import PlatformRole, User
    from authentication.permissions import IsPlatformAdmin
"""
