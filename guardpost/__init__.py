"""guardpost – HTTP server bootstrap mounting the ``/auth`` and ``/protected``
route collections behind a JSON body parser."""

__version__ = "0.1.0"
