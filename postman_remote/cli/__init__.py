"""Command line interface for postman-remote."""
