import shutil
from pathlib import Path

import pytest

from bucketwire.app import BucketwireApp
from bucketwire.component import ComponentRegistry
from bucketwire.context import AppContext, _ContextStore
from bucketwire.project import get_project_root


@pytest.fixture(autouse=True)
def clean_registries():
    ComponentRegistry.clear()
    BucketwireApp._reset()
    yield
    BucketwireApp._reset()


@pytest.fixture(autouse=True)
def app_context():
    _ContextStore.clear()
    app_context = AppContext(name="test", env="test")
    _ContextStore.set(app_context)
    yield app_context
    _ContextStore.clear()


@pytest.fixture
def project_cwd(monkeypatch, pytestconfig, tmp_path):
    """Provide a temporary Pulumi project root with handler files and chdir into it."""
    get_project_root.cache_clear()

    source_project_dir = pytestconfig.rootpath / "tests" / "aws" / "sample_test_project"
    temp_project_dir = tmp_path / "sample_project_copy"
    shutil.copytree(source_project_dir, temp_project_dir, dirs_exist_ok=True)

    original_cwd = Path.cwd()
    monkeypatch.chdir(temp_project_dir)

    yield temp_project_dir

    monkeypatch.chdir(original_cwd)
    get_project_root.cache_clear()
