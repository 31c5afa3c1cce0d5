"""to-sql exception hierarchy.

Every failure that ends a run is one of these. Readers, the materializer and
the provisioner raise them; the orchestrator propagates the first one captured.
"""


class ToSqlError(Exception):
    """Base exception for all to-sql failures."""


class InvalidPathError(ToSqlError):
    """Raised when a path or name cannot produce a valid identifier."""


class ReadError(ToSqlError):
    """Raised when a source file is missing, unreadable or not a valid container."""


class ParseError(ToSqlError):
    """Raised for malformed quoting in a delimited file."""


class SchemaError(ToSqlError):
    """Raised when column labels collide in a way the sink cannot hold."""


class WriteError(ToSqlError):
    """Raised when the sink rejects DDL or an insert."""


class ProvisionError(ToSqlError):
    """Raised when the target database cannot be created."""
