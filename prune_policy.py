#!/usr/bin/env python3
"""
Prune policy for Kladeusis

Static lists of filenames, directory names and extensions that a package
does not need at runtime. Each predicate takes a path or bare name.
"""

import os

JUNK_FILES = frozenset(
    {
        "Makefile",
        "Gulpfile.js",
        "Gruntfile.js",
        ".DS_Store",
        ".tern-project",
        ".gitattributes",
        ".editorconfig",
        ".eslintrc",
        ".eslintrc.js",
        ".eslintignore",
        ".npmignore",
        ".jshintrc",
        ".flowconfig",
        ".documentup.json",
        ".yarn-metadata.json",
        ".travis.yml",
        "appveyor.yml",
        "circle.yml",
        ".coveralls.yml",
        "CHANGES",
        "LICENSE.txt",
        "LICENSE",
        "AUTHORS",
        "CONTRIBUTORS",
        ".yarn-integrity",
        ".yarnclean",
    }
)

JUNK_DIRS = frozenset(
    {
        "__tests__",
        "test",
        "tests",
        "powered-test",
        "docs",
        "doc",
        ".idea",
        ".vscode",
        "website",
        "images",
        "assets",
        "example",
        "examples",
        "coverage",
        ".nyc_output",
        ".circleci",
        ".github",
    }
)

# Case-sensitive, leading dot included
JUNK_EXTS = frozenset(
    {
        ".md",
        ".ts",
        ".jst",
        ".jsx",
        ".coffee",
        ".tgz",
        ".swp",
    }
)


def is_junk_file(name: str) -> bool:
    """Return True if the basename of *name* is a known non-essential file."""
    return os.path.basename(name) in JUNK_FILES


def is_junk_dir(name: str) -> bool:
    """Return True if the basename of *name* is a known non-essential directory."""
    return os.path.basename(name) in JUNK_DIRS


def is_junk_ext(name: str) -> bool:
    """Return True if *name* ends in a known non-essential extension."""
    return os.path.splitext(name)[1] in JUNK_EXTS
