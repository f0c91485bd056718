# app/core/__init__.py
"""
Core application modules.
Contains essential infrastructure components:
- bootstrap: Plan catalog reconciliation on startup
- db: Database configuration and connection management
- errors: Error taxonomy and HTTP exception handlers
- rate_limiter: Fixed-window limiter for the public auth endpoints
- security: Password hashing and JWT tokens
"""
