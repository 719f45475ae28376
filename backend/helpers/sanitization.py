"""
Input sanitization utilities.

Plain-text fields are stripped of HTML with bleach before storage. Uploaded
file names are reduced to a safe display name; the name on disk is always
generated separately.
"""

import ntpath
import re
from typing import Optional

import bleach

UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")
MAX_FILENAME_LENGTH = 255


def sanitize_plain_text(content: Optional[str]) -> Optional[str]:
    """
    Strip all HTML tags for plain text fields.

    Args:
        content: Raw content from user input

    Returns:
        Plain text with all HTML removed, or None if input is None

    Examples:
        >>> sanitize_plain_text('<script>alert(1)</script>Title')
        'alert(1)Title'
        >>> sanitize_plain_text('<b>Bold</b> text')
        'Bold text'
    """
    if content is None:
        return None

    return bleach.clean(content, tags=[], strip=True)


def sanitize_filename(filename: Optional[str]) -> str:
    """
    Reduce a client-supplied file name to a safe display name.

    Directory components (both / and \\ separators) are dropped and every
    character outside [A-Za-z0-9._-] becomes an underscore.

    Examples:
        >>> sanitize_filename('../../etc/passwd')
        'passwd'
        >>> sanitize_filename('Bericht März.pdf')
        'Bericht_M_rz.pdf'
    """
    base = ntpath.basename(filename or "")
    sanitized = UNSAFE_FILENAME_CHARS.sub("_", base)[:MAX_FILENAME_LENGTH]
    return sanitized or "attachment"
