# src/s3_mover/keys.py
"""
Object key helpers.

Maps keys discovered under the source prefix to their destination keys and
validates the user supplied prefixes before any store call is made.
"""

from pathlib import PurePosixPath

from s3_mover.exceptions import ConfigError

SEPARATOR: str = "/"


def join_key(prefix: str, name: str) -> str:
    """
    Join a key prefix and a name with exactly one separator.

    Args:
        prefix (str): The key prefix, possibly empty, with or without a
            trailing separator.
        name (str): The name to append.

    Returns:
        str: `name` if the prefix is empty, else `prefix/name`.
    """
    if not prefix:
        return name
    if prefix.endswith(SEPARATOR):
        return f"{prefix}{name}"
    return f"{prefix}{SEPARATOR}{name}"


def is_key_valid(path: str) -> None:
    """
    Reject a prefix that starts with a separator.

    Args:
        path (str): The prefix to check.

    Raises:
        ConfigError: If the path begins with a separator.
    """
    if path.startswith(SEPARATOR):
        raise ConfigError(f"Invalid path '{path}': must not start with '{SEPARATOR}'.")


def normalize_prefix(prefix: str) -> str:
    """Strip trailing separators so 'in' and 'in/' compare equal."""
    return prefix.rstrip(SEPARATOR)


class KeyMapper:
    """
    Computes destination keys for discovered source keys.

    By default only the key's basename is appended to the destination prefix,
    so nested source keys are flattened. With `preserve_structure` the part of
    the key below the source prefix is kept instead.
    """

    def __init__(
        self,
        source_prefix: str,
        destination_prefix: str,
        preserve_structure: bool = False,
    ) -> None:
        self._source_prefix: str = source_prefix
        self._destination_prefix: str = destination_prefix
        self._preserve_structure: bool = preserve_structure

    def relative_name(self, object_key: str) -> str:
        """
        Return the part of `object_key` that is appended to the destination.

        Args:
            object_key (str): A key discovered under the source prefix.

        Returns:
            str: The basename, or the suffix relative to the source prefix.
        """
        if self._preserve_structure:
            prefix: str = normalize_prefix(self._source_prefix)
            if not prefix:
                return object_key
            if object_key.startswith(prefix + SEPARATOR):
                return object_key[len(prefix) + 1 :]
        return PurePosixPath(object_key).name

    def target_key(self, object_key: str) -> str:
        """
        Compute the destination key for a discovered source key.

        Args:
            object_key (str): A key discovered under the source prefix.

        Returns:
            str: The destination key.
        """
        return join_key(self._destination_prefix, self.relative_name(object_key))
