"""Shell-expression matching (``shExpMatch``)."""

import re


def glob_to_regex(pattern: str) -> str:
    """Translate a PAC shell expression into an anchored regex.

    Only three characters are special: ``.`` is literal, ``*`` matches
    any run (including empty) and ``?`` matches one character. Other
    regex metacharacters are passed through untouched, as browsers do.
    """
    translated = pattern.replace(".", r"\.").replace("*", ".*").replace("?", ".")
    return f"^{translated}$"


def sh_exp_match(subject: str, pattern: str) -> bool:
    """Check whether the whole of subject matches the shell expression.

    Example:
        sh_exp_match("www.example.com", "*.example.com")  # True
        sh_exp_match("ab", "?")                           # False
    """
    try:
        regex = re.compile(glob_to_regex(pattern))
    except re.error:
        return False
    return regex.fullmatch(subject) is not None
