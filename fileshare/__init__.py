"""HTTP file-sharing service with token authentication, uploads, cached listings and expiring share links."""

__version__ = "0.1.0"