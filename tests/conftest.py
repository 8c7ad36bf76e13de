"""Shared fixtures."""

import tempfile
from pathlib import Path
from unittest.mock import Mock

import pytest

from springcm_upload.api import SpringCMClient
from springcm_upload.models import Credentials, Folder


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def credentials():
    return Credentials(client_id="client", client_secret="secret", data_center="na11")


@pytest.fixture
def folder():
    return Folder(
        id="f-123",
        name="Inbound",
        path="/Admin/Inbound",
        href="https://apina11.springcm.com/v201606/folders/f-123",
    )


@pytest.fixture
def mock_client(folder):
    """Create a mock SpringCM client that resolves every path to one folder."""
    client = Mock(spec=SpringCMClient)
    client.get_folder.return_value = folder
    return client
