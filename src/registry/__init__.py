"""Package registry clients (Packagist, PyPI)."""
