"""authflow: post-authentication success handling for local and OAuth2 sign-in."""

__version__ = "0.1.0"
