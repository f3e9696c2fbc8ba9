"""
Build-Info Reporter - Print the main version and VCS settings of the build
"""
import sys
from typing import Iterator, Optional, TextIO

from .build_info_service import BuildInfo, BuildInfoSource, Setting

VCS_PREFIX = "vcs"

_SHORT_ESCAPES = {
    '\a': '\\a',
    '\b': '\\b',
    '\f': '\\f',
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
    '\v': '\\v',
    '\\': '\\\\',
    '"': '\\"',
}


def quote_value(value: str) -> str:
    """
    Quote a setting value as a double-quoted string literal.

    Non-printable runes use \\xNN, \\uNNNN or \\UNNNNNNNN (lowercase hex).

    Args:
        value: Raw setting value

    Returns:
        Quoted value including the surrounding double quotes
    """
    parts = ['"']
    for ch in value:
        escaped = _SHORT_ESCAPES.get(ch)
        if escaped is not None:
            parts.append(escaped)
        elif ch.isprintable():
            parts.append(ch)
        else:
            code = ord(ch)
            if code < 0x80:
                parts.append(f'\\x{code:02x}')
            elif code < 0x10000:
                parts.append(f'\\u{code:04x}')
            else:
                parts.append(f'\\U{code:08x}')
    parts.append('"')
    return ''.join(parts)


def is_vcs_setting(setting: Setting) -> bool:
    """Prefix match only; keys shorter than the prefix never match"""
    return len(setting.key) >= len(VCS_PREFIX) and setting.key[:len(VCS_PREFIX)] == VCS_PREFIX


def format_setting(setting: Setting) -> str:
    return f"{setting.key} = {quote_value(setting.value)}"


def iter_report_lines(info: BuildInfo) -> Iterator[str]:
    """
    Yield report lines (without newlines) for a build descriptor.

    Args:
        info: Build descriptor

    Yields:
        Main version, then each vcs setting in recorded order
    """
    yield info.main_version
    for setting in info.settings:
        if is_vcs_setting(setting):
            yield format_setting(setting)


def run(source: BuildInfoSource, out: Optional[TextIO] = None) -> None:
    """
    Read the build descriptor and print the report.

    Args:
        source: Where to read the build descriptor from
        out: Output stream (defaults to stdout)

    Raises:
        BuildInfoUnavailable: If the descriptor cannot be read; nothing has
            been written at that point
    """
    info = source.read()
    if out is None:
        out = sys.stdout
    for line in iter_report_lines(info):
        out.write(line + '\n')
    out.flush()
