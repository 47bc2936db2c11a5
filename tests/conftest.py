import os
import pytest
from pathlib import Path
import tempfile
import shutil
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

# keep the operation history log out of the user's home directory
os.environ.setdefault("MOLCHARGE_DATA_DIR", tempfile.mkdtemp(prefix="molcharge_test_"))

from molcharge.infrastructure.resources import create_project_manifest


@pytest.fixture(scope="session")
def session_workdir():
    d = Path(tempfile.mkdtemp())
    create_project_manifest(d, "test")
    try:
        yield d
    finally:
        shutil.rmtree(d, ignore_errors=True)
