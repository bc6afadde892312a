import os

import pytest


def make_tree(root, spec):
    """Create files and directories under *root* from a nested dict.

    A str or bytes value is file content, a dict is a subdirectory.
    """
    root.mkdir(parents=True, exist_ok=True)
    for name, value in spec.items():
        path = root / name
        if isinstance(value, dict):
            make_tree(path, value)
        elif isinstance(value, bytes):
            path.write_bytes(value)
        else:
            path.write_text(value)
    return root


def dir_meta(path) -> int:
    return os.lstat(path).st_size


@pytest.fixture
def node_modules(tmp_path):
    return tmp_path / "node_modules"
