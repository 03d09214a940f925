"""
Symbols — Glyph vocabulary for the status line

Progressive enhancement: Nerd Font icons when requested or detected,
plain Unicode otherwise, ASCII fallback for limited terminals.
Configurable via display.symbols setting.

Also provides safe output utilities:
- safe_write(): Encoding-safe writing for the terminal stream
- sanitize_control_chars(): Strips control chars from probe output
"""

import os
import sys
from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Safe Output Utilities (Two-Layer Defense)
# =============================================================================
# Layer 1 (Security): sanitize_control_chars() - strips control chars from
#                     text we did not produce (branch names, paths)
# Layer 2 (Encoding): safe_write() - handles display encoding gracefully

# Common Unicode to ASCII replacements for display
UNICODE_TO_ASCII = {
    '↑': '^',
    '↓': 'v',
    '…': '...',
    '▓': '#',
    '█': '#',
    '░': '-',
    '●': '*',
    '○': 'o',
    '✓': '+',
    '│': '|',
}


def sanitize_control_chars(text: str) -> str:
    """
    Layer 1 (Security): Remove control characters from external text.

    Git output and paths end up inside our own escape sequences; an embedded
    ESC or newline would break the single-line layout.

    Args:
        text: Raw text from a probe or the input payload

    Returns:
        Text with all chars below 0x20 (and DEL) removed, tabs become spaces
    """
    if not text:
        return text

    result = []
    for char in text:
        code = ord(char)
        if code == 9:
            result.append(' ')
        elif code >= 32 and code != 127:
            result.append(char)

    return ''.join(result)


def safe_write(text: str, file=None) -> None:
    """
    Layer 2 (Encoding): Write with graceful encoding fallback.

    Handles UnicodeEncodeError by replacing unencodable characters
    with ASCII equivalents or '?' as last resort. Never adds a newline.

    Args:
        text: Text to write (may contain any Unicode and escape sequences)
        file: Output stream (default: sys.stdout)
    """
    if file is None:
        file = sys.stdout

    try:
        file.write(text)
    except UnicodeEncodeError:
        safe_text = text
        for unicode_char, ascii_equiv in UNICODE_TO_ASCII.items():
            safe_text = safe_text.replace(unicode_char, ascii_equiv)

        try:
            file.write(safe_text)
        except UnicodeEncodeError:
            encoding = getattr(file, 'encoding', 'utf-8') or 'utf-8'
            encoded = safe_text.encode(encoding, errors='replace')
            file.write(encoded.decode(encoding))


@dataclass(frozen=True)
class SymbolSet:
    """Complete set of glyphs used by widgets and components."""
    name: str
    # Repository
    branch: str
    commit: str
    staged: str
    unstaged: str
    untracked: str
    conflict: str
    ahead: str
    behind: str
    stash: str
    clean: str
    rebasing: str
    merging: str
    # Project
    folder: str
    solution: str
    # Progress bar
    fill_block: str
    fill_full_block: str
    empty_block: str
    fill_circle: str
    empty_circle: str


NERD = SymbolSet(
    name='nerd',
    branch='\uf126',
    commit='\uf417',
    staged='+',
    unstaged='~',
    untracked='?',
    conflict='!',
    ahead='↑',
    behind='↓',
    stash='$',
    clean='\uf164',
    rebasing='\uf1da',
    merging='\uf1e5',
    folder='\uf07b',
    solution='\U000f031b',
    fill_block='▓',
    fill_full_block='█',
    empty_block='░',
    fill_circle='●',
    empty_circle='○',
)

UNICODE = SymbolSet(
    name='unicode',
    branch='⎇',
    commit='◆',
    staged='+',
    unstaged='~',
    untracked='?',
    conflict='!',
    ahead='↑',
    behind='↓',
    stash='$',
    clean='✓',
    rebasing='REBASING',
    merging='MERGING',
    folder='▣',
    solution='◈',
    fill_block='▓',
    fill_full_block='█',
    empty_block='░',
    fill_circle='●',
    empty_circle='○',
)

ASCII = SymbolSet(
    name='ascii',
    branch='git:',
    commit='@',
    staged='+',
    unstaged='~',
    untracked='?',
    conflict='!',
    ahead='^',
    behind='v',
    stash='$',
    clean='ok',
    rebasing='REBASING',
    merging='MERGING',
    folder='dir:',
    solution='sln:',
    fill_block='#',
    fill_full_block='#',
    empty_block='-',
    fill_circle='*',
    empty_circle='o',
)

SYMBOL_SETS = {s.name: s for s in (NERD, UNICODE, ASCII)}


def supports_unicode() -> bool:
    """
    Check if environment likely supports Unicode output.

    Conservative: defaults to ASCII if uncertain.
    Checks stdout encoding first (most reliable on Windows).
    """
    # Explicit environment override
    if os.environ.get('STATUSLINE_ASCII_ONLY', '').lower() in ('1', 'true', 'yes'):
        return False
    if os.environ.get('STATUSLINE_UNICODE', '').lower() in ('1', 'true', 'yes'):
        return True

    stdout_encoding = getattr(sys.stdout, 'encoding', None)
    if stdout_encoding:
        encoding_lower = stdout_encoding.lower().replace('-', '').replace('_', '')
        # Windows code pages that don't support our glyphs
        if encoding_lower.startswith('cp') and encoding_lower != 'cp65001':
            return False
        if encoding_lower in ('ascii', 'latin1', 'iso88591', 'ansix3.41968'):
            return False

    lang = os.environ.get('LANG', '').lower()
    lc_all = os.environ.get('LC_ALL', '').lower()
    if 'utf-8' in lang or 'utf8' in lang:
        return True
    if 'utf-8' in lc_all or 'utf8' in lc_all:
        return True

    # Known good terminals
    term_program = os.environ.get('TERM_PROGRAM', '')
    if term_program in ('vscode', 'iTerm.app', 'Apple_Terminal', 'Hyper', 'WezTerm'):
        return True
    if os.environ.get('WT_SESSION'):
        return True

    if stdout_encoding and 'utf' in stdout_encoding.lower():
        return True

    return False


def get_symbols(preference: Optional[str] = None) -> SymbolSet:
    """
    Get appropriate symbol set based on preference or auto-detection.

    Args:
        preference: "nerd", "unicode", "ascii", or "auto" (None = auto)

    Returns:
        Appropriate SymbolSet for the environment. Auto mode assumes a
        Nerd Font is installed whenever Unicode output works.
    """
    if preference in SYMBOL_SETS:
        return SYMBOL_SETS[preference]
    return NERD if supports_unicode() else ASCII
