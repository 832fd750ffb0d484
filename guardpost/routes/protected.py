"""Placeholder ``/protected`` route collection (see ``PROTECTED_ROUTES``)."""

from guardpost.routes._placeholder import placeholder_router

router = placeholder_router("protected")
