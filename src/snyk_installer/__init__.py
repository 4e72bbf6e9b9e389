"""snyk-installer: provisions the Snyk CLI onto local or remote build nodes."""

__version__ = "0.4.0"
