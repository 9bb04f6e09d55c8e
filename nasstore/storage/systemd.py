"""
systemd unit naming helpers.
"""
import string

# Characters allowed verbatim in an escaped path, same set as systemd-escape
VALID_CHARS = set(string.ascii_letters + string.digits + ':_.')


def _escape_char(byte: int) -> str:
    return '\\x%02x' % byte


def escape_path(path: str) -> str:
    """
    Escape a path the way `systemd-escape --path` does.

    '/sharedfolders/my data' -> 'sharedfolders-my\\x20data'

    Raises:
        ValueError: If the path contains '..' components
    """
    parts = [part for part in path.split('/') if part not in ('', '.')]
    if '..' in parts:
        raise ValueError(f"Path '{path}' must not contain '..'")
    if not parts:
        return '-'

    simplified = '/'.join(parts)
    escaped = []
    for i, byte in enumerate(simplified.encode('utf-8')):
        char = chr(byte)
        if char == '/':
            escaped.append('-')
        elif i == 0 and char == '.':
            escaped.append(_escape_char(byte))
        elif byte < 128 and char in VALID_CHARS:
            escaped.append(char)
        else:
            escaped.append(_escape_char(byte))
    return ''.join(escaped)


def unit_name(where: str, suffix: str = 'mount') -> str:
    """Unit name for a mount point, e.g. 'sharedfolders-media.mount'."""
    return f"{escape_path(where)}.{suffix}"
