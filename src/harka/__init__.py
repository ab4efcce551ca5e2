"""HARKA admin services: search, backups and the admin API client."""

__version__ = "0.1.0"
