"""Application services built on the store and the token settings."""
