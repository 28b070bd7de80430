"""Shared fixtures: keypairs and stores in temporary directories."""

import pytest

from page.keys import generate_identity
from page.store import Store


@pytest.fixture
def identity():
    return generate_identity()


@pytest.fixture
def recipient(identity):
    return identity.recipient()


@pytest.fixture
def other_identity():
    return generate_identity()


@pytest.fixture
def store_dir(tmp_path):
    path = tmp_path / "secrets"
    path.mkdir()
    return path


@pytest.fixture
def store(store_dir, identity, recipient):
    return Store(store_dir, identity=identity, recipient=recipient)
