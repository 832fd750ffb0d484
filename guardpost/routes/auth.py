"""Placeholder ``/auth`` route collection.

Sign-up, login and token issuance belong to the deployment; point
``AUTH_ROUTES`` at the module that implements them.
"""

from guardpost.routes._placeholder import placeholder_router

router = placeholder_router("auth")
