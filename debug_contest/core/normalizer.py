"""
Code normalizer for submission comparison
"""
from typing import Optional


def normalize_code(code: Optional[str]) -> str:
    """
    Canonicalize source text before exact comparison

    Steps:
    1. Unify line endings (CRLF / CR → LF)
    2. Strip every line
    3. Drop lines that are empty after stripping
    4. Rejoin with LF and strip the result

    Indentation, blank lines and trailing whitespace are ignored; token
    changes, comments and line order are not.

    Example:
        >>> normalize_code("def f():\\r\\n\\n    return 1  \\n")
        'def f():\\nreturn 1'
    """
    if not code:
        return ""

    text = code.replace('\r\n', '\n').replace('\r', '\n')
    lines = [line.strip() for line in text.split('\n')]
    return '\n'.join(line for line in lines if line).strip()


def codes_match(submitted: Optional[str], expected: Optional[str]) -> bool:
    return normalize_code(submitted) == normalize_code(expected)
