#!/usr/bin/env python3
"""
Tree scanning engine for Kladeusis

Walks a dependency directory, classifies every entry against the prune
policy and reduces the matches into per-group statistics. Nothing here
writes to the filesystem; any OSError raised by stat or listing calls
propagates to the caller unchanged.
"""

import os
import stat
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from prune_policy import is_junk_dir, is_junk_ext, is_junk_file

# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


class EntryKind(Enum):
    DIRECTORY = "directory"
    FILE = "file"
    OTHER = "other"

    @classmethod
    def from_mode(cls, mode: int) -> "EntryKind":
        if stat.S_ISDIR(mode):
            return cls.DIRECTORY
        if stat.S_ISREG(mode):
            return cls.FILE
        return cls.OTHER


@dataclass(frozen=True)
class Entry:
    """One filesystem node seen during a walk"""

    path: str
    kind: EntryKind
    raw_size: int = 0

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE

    def effective_size(self, cache: "SizeCache") -> int:
        """Own size for files, recursive size for directories"""
        if self.is_dir:
            return cache.size_of(self.path)
        return self.raw_size


@dataclass
class GroupStats:
    total_bytes: int = 0
    dir_count: int = 0
    file_count: int = 0

    def __add__(self, other: "GroupStats") -> "GroupStats":
        return GroupStats(
            total_bytes=self.total_bytes + other.total_bytes,
            dir_count=self.dir_count + other.dir_count,
            file_count=self.file_count + other.file_count,
        )


@dataclass
class GroupReport:
    label: str
    stats: GroupStats
    matches: list[Entry] = field(default_factory=list)


@dataclass
class ScanResult:
    root_path: str
    groups: list[GroupReport] = field(default_factory=list)
    scan_duration: float = 0.0
    cache: Optional["SizeCache"] = None

    @property
    def total(self) -> GroupStats:
        return sum((g.stats for g in self.groups), GroupStats())


# ---------------------------------------------------------------------------
# Size cache
# ---------------------------------------------------------------------------


class SizeCache:
    """Memoized recursive byte sizes, scoped to a single scan.

    A directory's size is its own st_size plus the size of every direct
    child. Symlinks are never followed. Once computed, a path is not
    stat'ed again for the lifetime of the cache.
    """

    def __init__(self):
        self._sizes: dict[str, int] = {}

    def __contains__(self, path: str) -> bool:
        return path in self._sizes

    def __len__(self) -> int:
        return len(self._sizes)

    def size_of(self, path: str) -> int:
        if path in self._sizes:
            return self._sizes[path]

        # Post-order over an explicit stack so depth is limited by the tree only
        pending: dict[str, tuple[int, list[str]]] = {}
        stack: list[tuple[str, bool]] = [(path, False)]
        while stack:
            current, expanded = stack.pop()
            if expanded:
                own, children = pending.pop(current)
                self._sizes[current] = own + sum(self._sizes[c] for c in children)
                continue
            if current in self._sizes:
                continue

            st = os.lstat(current)
            if not stat.S_ISDIR(st.st_mode):
                self._sizes[current] = st.st_size
                continue

            with os.scandir(current) as it:
                children = [e.path for e in it]
            pending[current] = (st.st_size, children)
            stack.append((current, True))
            stack.extend((c, False) for c in children if c not in self._sizes)

        return self._sizes[path]


# ---------------------------------------------------------------------------
# Tree walker
# ---------------------------------------------------------------------------


def _make_entry(path: str, st: os.stat_result) -> Entry:
    return Entry(path=path, kind=EntryKind.from_mode(st.st_mode), raw_size=st.st_size)


def walk(root: str) -> list[Entry]:
    """Return *root* and all its descendants in depth-first pre-order.

    Postcondition: every directory appears before any of its descendants.
    Children are visited in name order. Entries that are neither a directory
    nor a regular file (symlinks, sockets, devices) are left out.
    """
    root_entry = _make_entry(root, os.lstat(root))
    if root_entry.kind is EntryKind.OTHER:
        return []

    entries: list[Entry] = []
    stack = [root_entry]
    while stack:
        entry = stack.pop()
        entries.append(entry)
        if not entry.is_dir:
            continue

        with os.scandir(entry.path) as it:
            children = sorted(it, key=lambda e: e.name)
        found = [_make_entry(c.path, c.stat(follow_symlinks=False)) for c in children]
        # Reversed so the first child is popped next
        stack.extend(e for e in reversed(found) if e.kind is not EntryKind.OTHER)

    return entries


# ---------------------------------------------------------------------------
# Classifier
# ---------------------------------------------------------------------------


class PruneClassifier:
    """Decides which entries are prune matches.

    Matched directories are recorded with register_pruned(); files under a
    recorded directory are then covered by it and never match on their own.
    Directories always match by name alone. Callers must feed entries in
    walk() order for that to hold.
    """

    def __init__(self):
        self._pruned_dirs: list[str] = []
        self._pruned_set: set[str] = set()

    @property
    def pruned_dirs(self) -> list[str]:
        return list(self._pruned_dirs)

    def is_covered(self, path: str) -> bool:
        """Return True if *path* is a recorded directory or lies beneath one."""
        current = path.rstrip(os.sep) or path
        while current:
            if current in self._pruned_set:
                return True
            parent = os.path.dirname(current)
            if parent == current:
                break
            current = parent
        return False

    def matches(self, entry: Entry) -> bool:
        if entry.is_dir:
            return is_junk_dir(entry.path)
        if entry.is_file:
            # Already counted through the recorded directory's recursive size
            if self.is_covered(entry.path):
                return False
            return is_junk_file(entry.path) or is_junk_ext(entry.path)
        return is_junk_ext(entry.path)

    def register_pruned(self, entry: Entry):
        if not entry.is_dir:
            return
        path = entry.path.rstrip(os.sep) or entry.path
        if path not in self._pruned_set:
            self._pruned_set.add(path)
            self._pruned_dirs.append(path)

    def should_prune(self, entry: Entry) -> bool:
        """Classify *entry* and record it if it is a matched directory."""
        matched = self.matches(entry)
        if matched:
            self.register_pruned(entry)
        return matched


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------


def aggregate(matches: list[Entry], cache: SizeCache) -> GroupStats:
    return GroupStats(
        total_bytes=sum(e.effective_size(cache) for e in matches),
        dir_count=sum(1 for e in matches if e.is_dir),
        file_count=sum(1 for e in matches if e.is_file),
    )


# ---------------------------------------------------------------------------
# Scanning
# ---------------------------------------------------------------------------


def list_groups(root: str) -> list[str]:
    """Names of the immediate children of *root*, sorted"""
    return sorted(os.listdir(root))


def scan_group(path: str, classifier: PruneClassifier) -> list[Entry]:
    """Walk one group and return its prune matches in walk order"""
    return [entry for entry in walk(path) if classifier.should_prune(entry)]


def scan_root(
    root: str,
    on_group: Optional[Callable[[str], None]] = None,
    stop_requested: Optional[Callable[[], bool]] = None,
) -> ScanResult:
    """Scan every top-level child of *root* as its own group.

    Raises NotADirectoryError if *root* is missing or not a directory. Any
    OSError during the scan aborts the whole run.
    """
    if not os.path.isdir(root):
        raise NotADirectoryError(f"Not a directory: {root}")

    cache = SizeCache()
    classifier = PruneClassifier()
    result = ScanResult(root_path=root, cache=cache)
    start = time.monotonic()

    for name in list_groups(root):
        if stop_requested and stop_requested():
            break
        if on_group:
            on_group(name)

        path = os.path.join(root, name)
        matches: list[Entry] = []
        if stat.S_ISDIR(os.lstat(path).st_mode):
            matches = scan_group(path, classifier)
        result.groups.append(GroupReport(label=name, stats=aggregate(matches, cache), matches=matches))

    result.scan_duration = time.monotonic() - start
    return result
