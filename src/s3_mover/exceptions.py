# src/s3_mover/exceptions.py
"""Custom exceptions for the s3-mover application."""


class S3MoverError(Exception):
    """Base exception for all application-specific errors."""

    pass


class ConfigError(S3MoverError):
    """Raised for configuration-related issues."""

    pass


class StoreError(S3MoverError):
    """Raised when an object store call fails for a reason other than not-found."""

    pass
