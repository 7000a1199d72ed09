"""
md-editor: a UI-independent core for structured markdown editing.

Parses markdown into blocks, regenerates it, and applies every edit as an
undoable command on an immutable editor state.

CLI Usage:
    md-editor format README.md

Library Usage:
    from md_editor import InputEventProcessor, MarkdownEditorState

    processor = InputEventProcessor()
    state = MarkdownEditorState.with_paragraph("Hello world")
    state = processor.simulate_typing("!", state)
    state = processor.history.undo(state)
"""

import logging

from .commands import (
    ApplyFormattingCommand,
    Command,
    CompositeCommand,
    DeleteTextCommand,
    InsertTextCommand,
    NoOpCommand,
    RestoreSnapshotCommand,
    SetBlockTypeCommand,
    SmartBackspaceCommand,
    SmartEnterCommand,
    UpdateSelectionCommand,
    can_execute,
    convert_to_heading,
    convert_to_list,
    create_undo,
    execute,
    is_undoable,
    replace_text,
    wrap_with_formatting,
)
from .config import ConfigError, EditorConfig, build_config, load_config
from .document import (
    delete_text,
    document_stats,
    get_block,
    insert_text,
    replace_block,
    validate_document,
    validate_position,
)
from .exceptions import (
    DocumentValidationError,
    EditorError,
    FeatureNotImplementedError,
    InvalidBlockTypeError,
    InvalidPositionError,
    InvalidRangeError,
    SerializationError,
    StateError,
    UndoError,
    UnsupportedOperationError,
)
from .formatting import apply_inline_formatting, set_block_type
from .generator import generate_markdown
from .history import CommandHistory
from .input_events import InputEvent, InputEventProcessor, InputEventType, KeyModifiers
from .models import (
    CodeBlock,
    DocumentMetadata,
    DocumentPosition,
    DocumentStats,
    FormattedRange,
    FormattingOperation,
    Heading,
    InlineFormatting,
    ListBlock,
    ListItem,
    ListKind,
    MarkdownBlock,
    MarkdownBlockType,
    MarkdownDocument,
    MarkdownEditorState,
    Paragraph,
    ParsedDocument,
    Quote,
    TextRange,
    ValidationResult,
)
from .parser import parse_markdown
from .rules import (
    are_compatible,
    can_apply_formatting,
    can_set_block_type,
    is_formatting_allowed,
    valid_block_type_options,
    valid_formatting_options,
)
from .state import (
    are_states_equivalent,
    create_state,
    create_state_from_document,
    update_selection,
    validate_state,
)

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Parsing and generation
    "parse_markdown",
    "generate_markdown",
    # Document operations
    "validate_position",
    "get_block",
    "insert_text",
    "delete_text",
    "replace_block",
    "validate_document",
    "document_stats",
    # Formatting
    "apply_inline_formatting",
    "set_block_type",
    "is_formatting_allowed",
    "are_compatible",
    "can_apply_formatting",
    "can_set_block_type",
    "valid_formatting_options",
    "valid_block_type_options",
    # State
    "create_state",
    "create_state_from_document",
    "update_selection",
    "validate_state",
    "are_states_equivalent",
    # Commands
    "Command",
    "InsertTextCommand",
    "DeleteTextCommand",
    "ApplyFormattingCommand",
    "SetBlockTypeCommand",
    "SmartEnterCommand",
    "SmartBackspaceCommand",
    "CompositeCommand",
    "NoOpCommand",
    "UpdateSelectionCommand",
    "RestoreSnapshotCommand",
    "execute",
    "can_execute",
    "create_undo",
    "is_undoable",
    "replace_text",
    "wrap_with_formatting",
    "convert_to_heading",
    "convert_to_list",
    "CommandHistory",
    # Input
    "InputEvent",
    "InputEventType",
    "InputEventProcessor",
    "KeyModifiers",
    # Data models
    "DocumentPosition",
    "TextRange",
    "InlineFormatting",
    "FormattingOperation",
    "MarkdownBlockType",
    "FormattedRange",
    "Paragraph",
    "Heading",
    "ListKind",
    "ListItem",
    "ListBlock",
    "CodeBlock",
    "Quote",
    "MarkdownBlock",
    "ParsedDocument",
    "MarkdownDocument",
    "DocumentMetadata",
    "DocumentStats",
    "MarkdownEditorState",
    "ValidationResult",
    # Configuration
    "EditorConfig",
    "ConfigError",
    "load_config",
    "build_config",
    # Exceptions
    "EditorError",
    "InvalidPositionError",
    "InvalidRangeError",
    "InvalidBlockTypeError",
    "UnsupportedOperationError",
    "DocumentValidationError",
    "SerializationError",
    "StateError",
    "UndoError",
    "FeatureNotImplementedError",
    # Version
    "__version__",
]
