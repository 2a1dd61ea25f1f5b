"""
Input sanitization for user-supplied chat text.

Rejects:
- Null bytes
- Control characters (message content may keep tabs and newlines)
- Script/XSS markers
"""
import re
from typing import Optional


class InputSanitizer:
    """Validates and sanitizes user input."""

    NULL_BYTE_PATTERN = re.compile(r'\x00')
    CONTROL_CHAR_PATTERN = re.compile(r'[\x00-\x08\x0b-\x0c\x0e-\x1f\x7f]')  # Except \t=0x09, \n=0x0a, \r=0x0d
    LINE_BREAK_PATTERN = re.compile(r'[\r\n\t]')
    SCRIPT_PATTERN = re.compile(r'<script|javascript:|onerror|onclick|<iframe|<embed', re.IGNORECASE)
    USERNAME_PATTERN = re.compile(r'^[a-zA-Z0-9_\-]+$')

    @staticmethod
    def sanitize_string(value: str, max_length: Optional[int] = None, allow_newlines: bool = False) -> str:
        """
        Sanitize string input.

        Args:
            value: Input string
            max_length: Optional max length after sanitization
            allow_newlines: Allow \\n, \\r and \\t characters (for message content)

        Returns:
            Sanitized string

        Raises:
            ValueError: If input contains dangerous patterns
        """
        if not isinstance(value, str):
            raise ValueError("Input must be string")

        if InputSanitizer.NULL_BYTE_PATTERN.search(value):
            raise ValueError("Null bytes not allowed")

        if InputSanitizer.CONTROL_CHAR_PATTERN.search(value):
            raise ValueError("Control characters not allowed")

        if not allow_newlines and InputSanitizer.LINE_BREAK_PATTERN.search(value):
            raise ValueError("Line breaks not allowed")

        if InputSanitizer.SCRIPT_PATTERN.search(value):
            raise ValueError("Script/XSS patterns not allowed")

        if max_length and len(value) > max_length:
            raise ValueError(f"Input exceeds max length of {max_length}")

        return value

    @staticmethod
    def sanitize_username(value: str) -> str:
        """Validate username format (alphanumeric + underscore/dash)."""
        if len(value) < 3:
            raise ValueError("Username must be at least 3 characters")

        sanitized = InputSanitizer.sanitize_string(value, max_length=64)

        if not InputSanitizer.USERNAME_PATTERN.match(sanitized):
            raise ValueError("Username must contain only alphanumeric, dash, underscore")

        return sanitized

    @staticmethod
    def sanitize_line(value: str, max_length: int = 255) -> str:
        """Single-line text: group names, captions, about lines."""
        return InputSanitizer.sanitize_string(value, max_length=max_length).strip()

    @staticmethod
    def sanitize_content(value: str, max_length: int = 50000) -> str:
        """Check free-form message text and return it unchanged.

        Only null bytes and control characters (other than tab, newline and
        carriage return) are rejected. Markup is stored as written; escaping
        is the renderer's job.
        """
        if not isinstance(value, str):
            raise ValueError("Input must be string")

        if InputSanitizer.NULL_BYTE_PATTERN.search(value):
            raise ValueError("Null bytes not allowed")

        if InputSanitizer.CONTROL_CHAR_PATTERN.search(value):
            raise ValueError("Control characters not allowed")

        if len(value) > max_length:
            raise ValueError(f"Input exceeds max length of {max_length}")

        return value
