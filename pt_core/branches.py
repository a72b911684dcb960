"""Branch naming for pushed commits."""

import re

MAX_BRANCH_LENGTH = 255

_NON_ALNUM = re.compile(r"[^0-9a-zA-Z]+")


def slug_from_message(message: str) -> str:
    """Lower-cased message with runs of non-alphanumerics turned into '-'.

    Empty when the message has no ASCII letters or digits.

        >>> slug_from_message("修正バグ")
        ''
    """
    return _NON_ALNUM.sub("-", message.lower()).strip("-")


def branch_from_message(prefix: str | None, message: str) -> str:
    """Generate a consistent branch name from a commit message.

    The message is lower-cased and every run of non-alphanumeric characters
    becomes a single hyphen. With a prefix the result is ``prefix/slug``.
    The full name never exceeds 255 characters.

    Examples:
        >>> branch_from_message("alice", "Fix Bug: edge case!!")
        'alice/fix-bug-edge-case'
        >>> branch_from_message(None, "Add  --verbose flag")
        'add-verbose-flag'
    """
    slug = slug_from_message(message)
    name = f"{prefix}/{slug}" if prefix else slug
    return name[:MAX_BRANCH_LENGTH].rstrip("-/")
