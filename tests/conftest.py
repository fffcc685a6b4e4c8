"""
Shared fixtures for hashrarity tests.

Object stores are built byte-for-byte in tmp_path: loose objects are
empty files at objects/xx/yyyy..., pack indexes are written in the real
version 1 / version 2 layouts next to an empty .pack file.
"""

import os
import shutil
import struct
import subprocess
from pathlib import Path

import pytest

from hashrarity.infra import ObjectStore
from hashrarity.infra.pack_index import PACK_IDX_V2_MAGIC


def build_pack_index(digests, version=2):
    """Return the bytes of a pack index listing digests."""
    digests = sorted(digests)
    counts = [0] * 256
    for digest in digests:
        counts[digest[0]] += 1
    fanout = []
    running = 0
    for count in counts:
        running += count
        fanout.append(running)
    fanout_bytes = struct.pack('>256I', *fanout)

    if version == 1:
        entries = b''.join(struct.pack('>I', 12 + i * 100) + d for i, d in enumerate(digests))
        return fanout_bytes + entries + b'\0' * 40

    n = len(digests)
    hash_length = len(digests[0]) if digests else 20
    return (
        PACK_IDX_V2_MAGIC
        + struct.pack('>I', 2)
        + fanout_bytes
        + b''.join(digests)
        + b'\0' * (4 * n)                      # crc32
        + struct.pack(f'>{n}I', *range(n))     # offsets
        + b'\0' * (2 * hash_length)            # pack + index checksums
    )


class StoreBuilder:
    """Builds an objects directory with a known set of objects."""

    def __init__(self, root: Path):
        self.objects = root / 'objects'
        (self.objects / 'pack').mkdir(parents=True)
        (self.objects / 'info').mkdir()
        self._packs = 0

    def add_loose(self, hex_name: str) -> Path:
        subdir = self.objects / hex_name[:2]
        subdir.mkdir(exist_ok=True)
        path = subdir / hex_name[2:]
        path.write_bytes(b'x\x01')
        return path

    def add_pack(self, hex_names, version=2, with_pack=True, data=None) -> Path:
        self._packs += 1
        stem = self.objects / 'pack' / f'pack-{self._packs:040d}'
        idx = stem.with_suffix('.idx')
        if data is None:
            data = build_pack_index([bytes.fromhex(h) for h in hex_names], version=version)
        idx.write_bytes(data)
        if with_pack:
            stem.with_suffix('.pack').write_bytes(b'PACK')
        return idx

    def add_alternate(self, path) -> None:
        alternates = self.objects / 'info' / 'alternates'
        existing = alternates.read_text() if alternates.exists() else ''
        alternates.write_text(existing + f"{path}\n")

    def store(self, hash_length=20) -> ObjectStore:
        return ObjectStore(self.objects, hash_length)


@pytest.fixture
def pack_index_bytes():
    """build_pack_index, for tests that need raw index bytes."""
    return build_pack_index


@pytest.fixture
def store_builder(tmp_path):
    """A StoreBuilder rooted in a fresh temporary directory."""
    return StoreBuilder(tmp_path / 'repo')


@pytest.fixture
def store_factory(tmp_path):
    """Build additional stores, e.g. alternates, under tmp_path/<name>."""
    return lambda name: StoreBuilder(tmp_path / name)


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep tests away from the user's config and environment overrides."""
    home = tmp_path / 'home'
    home.mkdir()
    monkeypatch.setenv('HOME', str(home))
    for key in list(os.environ):
        if key.startswith('HASHRARITY_'):
            monkeypatch.delenv(key)
    return home


def run_git(repo: Path, *args: str) -> str:
    env = os.environ.copy()
    env.update({
        'GIT_AUTHOR_NAME': 'Test Author',
        'GIT_AUTHOR_EMAIL': 'author@example.com',
        'GIT_COMMITTER_NAME': 'Test Author',
        'GIT_COMMITTER_EMAIL': 'author@example.com',
        'GIT_CONFIG_NOSYSTEM': '1',
    })
    result = subprocess.run(
        ['git', *args], cwd=repo, capture_output=True, text=True, env=env, check=True
    )
    return result.stdout


def all_object_names(repo: Path):
    """Object names as git itself lists them."""
    output = run_git(repo, 'cat-file', '--batch-all-objects', '--batch-check=%(objectname)')
    return set(output.split())


@pytest.fixture
def git():
    """Run a git command in a repository and return its stdout."""
    if shutil.which('git') is None:
        pytest.skip("git is not installed")
    return run_git


@pytest.fixture
def git_object_names():
    """Callable listing every object name git knows about in a repository."""
    return all_object_names


@pytest.fixture
def git_repo(tmp_path):
    """
    A real repository with packed-only, loose-only and duplicated objects.

    Two commits are packed with `git repack -a` and their loose copies
    pruned, except for one blob whose loose file is put back so that it
    is stored both loose and packed. A third commit adds loose objects
    only.
    """
    if shutil.which('git') is None:
        pytest.skip("git is not installed")

    repo = tmp_path / 'work'
    repo.mkdir()
    run_git(repo, 'init', '-q')
    for i in range(2):
        (repo / f'file{i}.txt').write_text(f"content {i}\n")
        run_git(repo, 'add', '.')
        run_git(repo, 'commit', '-q', '-m', f'commit {i}')

    blob = run_git(repo, 'rev-parse', 'HEAD:file0.txt').strip()
    loose_blob = repo / '.git' / 'objects' / blob[:2] / blob[2:]
    blob_bytes = loose_blob.read_bytes()
    run_git(repo, 'repack', '-a', '-q')
    run_git(repo, 'prune-packed')
    loose_blob.parent.mkdir(exist_ok=True)
    loose_blob.write_bytes(blob_bytes)

    (repo / 'later.txt').write_text("added after repack\n")
    run_git(repo, 'add', '.')
    run_git(repo, 'commit', '-q', '-m', 'after repack')
    return repo
