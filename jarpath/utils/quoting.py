from __future__ import annotations

import shlex
from typing import List, Optional


def quoted_string_to_list(text: Optional[str]) -> List[str]:
    """Split a shell-like option string into tokens.

    Quoted segments survive as a single token with the quotes removed:
    `-Xmx512m "-Dfoo=a b"` -> ["-Xmx512m", "-Dfoo=a b"].
    Backslashes are kept literally, so Windows paths pass through intact.

    Raises
    - ValueError: on unbalanced quotes.
    """
    if not text:
        return []
    lexer = shlex.shlex(text, posix=True)
    lexer.whitespace_split = True
    lexer.commenters = ""
    lexer.escape = ""
    return list(lexer)
