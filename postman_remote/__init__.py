"""postman-remote: locate, authenticate and fetch Postman cloud resources."""

__version__ = "0.1.0"
