"""Compact text format for persisting a state tree.

The format is a sequence of ``name=value`` entries joined with ``;``.
A value starting with ``(`` is a directory whose entries run up to the
first ``)`` on its own level; any other value is a file fingerprint that
ends at ``;``, ``)`` or the end of input::

    docs=(a.txt=638412;old=())
    readme.md=638401

There is no escaping. Names and fingerprints containing ``=``, ``(``,
``)`` or ``;`` cannot be stored, and :func:`encode_tree` refuses them.
Decoding never fails: empty or truncated input simply ends the entries
that were read so far.
"""

import logging
from typing import Iterator, Union

from ..exceptions import StateEncodeError
from .tree import StateTree

logger = logging.getLogger(__name__)

RESERVED_CHARACTERS = frozenset("=();")


def is_encodable_name(name: str) -> bool:
    """Check whether a name or fingerprint can be stored in the state format.

    Examples:
        >>> is_encodable_name("report.pdf")
        True
        >>> is_encodable_name("draft (1).txt")
        False
    """
    return RESERVED_CHARACTERS.isdisjoint(name)


def _iter_entries(
    tree: StateTree,
) -> Iterator[tuple[str, Union[StateTree, str]]]:
    yield from tree.directories.items()
    yield from tree.files.items()


def _check_encodable(value: str, kind: str) -> None:
    if not is_encodable_name(value):
        raise StateEncodeError(
            f"Cannot store {kind} {value!r}: it contains one of "
            f"{''.join(sorted(RESERVED_CHARACTERS))!r}"
        )


def encode_tree(tree: StateTree) -> str:
    """Serialize a state tree to its text form.

    Directories are written before files on every level.

    Args:
        tree: Root of the tree to serialize

    Returns:
        The encoded text (empty string for an empty tree)

    Raises:
        StateEncodeError: If a name or fingerprint contains a reserved character
    """
    parts: list[str] = []
    # One entry iterator and one "needs separator" flag per open level
    stack = [_iter_entries(tree)]
    pending_separator = [False]

    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            pending_separator.pop()
            if stack:
                parts.append(")")
            continue

        name, value = entry
        _check_encodable(name, "name")
        if pending_separator[-1]:
            parts.append(";")
        pending_separator[-1] = True

        if isinstance(value, StateTree):
            parts.append(f"{name}=(")
            stack.append(_iter_entries(value))
            pending_separator.append(False)
        else:
            _check_encodable(value, "fingerprint")
            parts.append(f"{name}={value}")

    return "".join(parts)


def decode_tree(text: str) -> StateTree:
    """Parse the text form back into a state tree.

    A single left-to-right scan; each ``(`` opens one level on an explicit
    stack, so nesting depth is not bound by the interpreter's recursion
    limit. Malformed or truncated input stops the scan instead of raising.

    Args:
        text: Encoded state

    Returns:
        The decoded tree (empty for empty input)
    """
    root = StateTree()
    stack = [root]
    pos = 0
    length = len(text)

    def close_level() -> None:
        nonlocal pos
        stack.pop()
        # The parent consumes the character following the closed directory
        if stack and pos < length and text[pos] != ")":
            pos += 1

    while stack and pos < length:
        node = stack[-1]

        if text[pos] == ")":
            pos += 1
            close_level()
            continue

        equals = text.find("=", pos)
        if equals == -1:
            logger.debug(f"State text ends inside a name at offset {pos}")
            break
        name = text[pos:equals]
        pos = equals + 1

        if pos < length and text[pos] == "(":
            pos += 1
            stack.append(node.directories.setdefault(name, StateTree()))
            continue

        end = pos
        while end < length and text[end] not in ";)":
            end += 1
        node.files[name] = text[pos:end]
        pos = end

        if pos >= length:
            break
        pos += 1
        if text[pos - 1] == ")":
            close_level()

    return root
