"""In-memory model of what the last backup run left in the target."""

from dataclasses import dataclass, field
from typing import Iterator


@dataclass
class StateTree:
    """Last-known backed-up shape of one directory.

    A name is either a directory or a file within one tree, never both,
    mirroring the filesystem directory it describes. Child trees are owned
    exclusively: dropping an entry drops its whole subtree.
    """

    directories: dict[str, "StateTree"] = field(default_factory=dict)
    """Child directory name -> subtree"""

    files: dict[str, str] = field(default_factory=dict)
    """File name -> change fingerprint of the source file when it was copied"""

    def is_empty(self) -> bool:
        """Check whether this tree records no entries at all."""
        return not self.directories and not self.files

    def iter_nodes(self) -> Iterator["StateTree"]:
        """Iterate over this tree and every subtree, depth first."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(list(node.directories.values())))

    def count_files(self) -> int:
        """Count the files recorded in this tree and all subtrees."""
        return sum(len(node.files) for node in self.iter_nodes())

    def count_directories(self) -> int:
        """Count the directories recorded below this tree."""
        return sum(len(node.directories) for node in self.iter_nodes())
