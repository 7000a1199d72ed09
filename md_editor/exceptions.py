"""Package-specific exception types."""

from __future__ import annotations


class EditorError(ValueError):
    """Base class for editing-related errors.

    Represents every expected failure of the editing core: bad positions,
    unsupported edits, and invalid state.
    """


class InvalidPositionError(EditorError):
    """Raised when a position does not address a character in the document.

    Args:
        position: The offending `DocumentPosition`.
    """

    def __init__(self, position):
        self.position = position
        super().__init__(f"Invalid document position: {position}")


class InvalidRangeError(EditorError):
    """Raised when a range is reversed or has an endpoint outside the document.

    Args:
        text_range: The offending `TextRange`.
    """

    def __init__(self, text_range):
        self.text_range = text_range
        super().__init__(f"Invalid text range: {text_range}")


class InvalidBlockTypeError(EditorError):
    """Raised when a block type cannot be constructed or targeted.

    Args:
        block_type: Description of the rejected block type.
    """

    def __init__(self, block_type):
        self.block_type = block_type
        super().__init__(f"Invalid block type: {block_type}")


class UnsupportedOperationError(EditorError):
    """Raised for edits the core deliberately does not perform.

    Multi-block deletion, inline formatting inside a code block, and direct
    text editing of lists or code blocks all end up here.

    Args:
        operation: Human-readable description of the refused operation.
    """

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Unsupported operation: {operation}")


class DocumentValidationError(EditorError):
    """Raised when document content fails structural validation."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Document validation failed: {reason}")


class SerializationError(EditorError):
    """Raised when a document cannot be converted to or from text."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Serialization failed: {reason}")


class StateError(EditorError):
    """Raised when an editor state is internally inconsistent."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"State error: {reason}")


class UndoError(EditorError):
    """Raised when an undo or redo step cannot be replayed."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Undo failed: {reason}")


class FeatureNotImplementedError(EditorError):
    """Raised by paths that are intentionally stubbed."""

    def __init__(self, feature: str):
        self.feature = feature
        super().__init__(f"Not implemented: {feature}")
