"""
String Utilities - Filename-safe names for boards and exported pages
"""

import re


def sanitize_filename(name: str, default: str = 'untitled') -> str:
    """
    Sanitize a string for use as a filename.

    Replaces characters invalid on Windows/Mac/Linux (< > : " / \\ | ? *),
    strips leading/trailing spaces and dots, and collapses repeated
    underscores.

    Args:
        name: String to sanitize
        default: Value used when nothing usable remains

    Returns:
        Sanitized string safe for use as a filename

    Examples:
        >>> sanitize_filename("Lesson 3: verbs")
        'Lesson 3_ verbs'
        >>> sanitize_filename("   ")
        'untitled'
    """
    if not name:
        return default

    safe = re.sub(r'[<>:"/\\|?*\x00-\x1f]', '_', name)
    safe = safe.strip(' .')
    if not safe:
        return default

    return re.sub(r'_+', '_', safe)


def page_file_stem(index: int, page_id: str) -> str:
    """Zero-padded stem for a page inside an export, e.g. ``001_page-1``."""
    return f"{index:03d}_{sanitize_filename(page_id, default='page')}"


__all__ = ['sanitize_filename', 'page_file_stem']
