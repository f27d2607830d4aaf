"""Exceptions for graphvault checkpoint persistence."""

from __future__ import annotations


class InvalidConfigError(ValueError):
    """Checkpoint key is missing a field the operation needs.

    Raised when ``put``/``put_writes`` are called without a thread id, when
    ``put_writes`` has no checkpoint id to attach writes to, or when a read
    cannot resolve which checkpoint it returned.

    Attributes:
        missing: Names of the missing key fields
        message: Human-readable error message
    """

    def __init__(
        self,
        missing: list[str],
        message: str | None = None,
    ) -> None:
        self.missing = missing
        self.message = message or self._default_message()
        super().__init__(self.message)

    def _default_message(self) -> str:
        missing_str = ", ".join(f"'{m}'" for m in self.missing)
        return f"Missing required checkpoint key field(s): {missing_str}"


class SerializationMismatchError(TypeError):
    """Checkpoint and metadata were encoded with different type tags.

    Both payloads of a checkpoint row share one ``type`` column, so they
    must be decodable by the same serializer.

    Attributes:
        checkpoint_type: Type tag produced for the checkpoint
        metadata_type: Type tag produced for the metadata
        message: Human-readable error message
    """

    def __init__(
        self,
        checkpoint_type: str,
        metadata_type: str,
        message: str | None = None,
    ) -> None:
        self.checkpoint_type = checkpoint_type
        self.metadata_type = metadata_type
        self.message = message or self._default_message()
        super().__init__(self.message)

    def _default_message(self) -> str:
        return (
            f"Failed to serialize checkpoint and metadata to the same type: "
            f"checkpoint={self.checkpoint_type!r}, metadata={self.metadata_type!r}"
        )
