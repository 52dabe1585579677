# ============================================================================
# CONFIGURATION AND SUPPORT TESTS
# ============================================================================
# STATUS: Tests - Config, file store, logging, cancellation, progress
# PURPOSE: Verify the ambient layers the pipeline relies on
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration and Support Tests

Run with:
    pytest tests/test_config.py -v
"""

import json
import logging
from unittest.mock import MagicMock

import pytest

from core.config import (
    Defaults,
    FileStoreConfig,
    InstallerConfig,
    StoreLocation,
    get_defaults,
)
from core.errors import InvalidInputError, ProductionCancelledError
from core.logging import (
    HumanFormatter,
    StructuredFormatter,
    get_current_context,
    log_checkpoint,
    log_context,
)
from infrastructure.file_store import BasicFileStore
from services.install_location import resolve_install_location
from worker.cancellation import CancellationToken, NeverCancelled
from worker.progress import ProgressTracker


# ============================================================================
# INSTALLER CONFIG
# ============================================================================

class TestInstallerConfig:

    def test_defaults(self):
        config = InstallerConfig()
        assert config.enable_full_pyramid is False
        assert config.max_level == "0"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("PRODUCER_ENABLE_FULL_PYRAMID", "true")
        monkeypatch.setenv("TILED_RASTER_PRODUCER_LIMIT_MAX_LEVEL", "auto")
        config = InstallerConfig.from_env()
        assert config.enable_full_pyramid is True
        assert config.max_level == "auto"

    def test_from_dict_ignores_unknown_keys(self):
        config = InstallerConfig.from_dict({"max_level": 3, "colour": "blue"})
        assert config.max_level == "3"
        assert config.enable_full_pyramid is False

    def test_defaults_from_yaml(self, tmp_path):
        path = tmp_path / "installer.yaml"
        path.write_text("installer:\n  enable_full_pyramid: true\n  max_level: auto\n")

        defaults = Defaults.from_yaml(path)

        assert defaults.installer.enable_full_pyramid is True
        assert defaults.installer.max_level == "auto"
        assert defaults.tiling.image_tile_size == 512

    def test_get_defaults_is_cached(self):
        assert get_defaults() is get_defaults()


# ============================================================================
# FILE STORE
# ============================================================================

class TestFileStore:

    def test_for_directory(self, tmp_path):
        config = FileStoreConfig.for_directory(tmp_path)
        assert config.locations[0].path == tmp_path
        assert config.locations[0].install is True

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "store.yaml"
        path.write_text(
            f"locations:\n"
            f"  - path: {tmp_path / 'cache'}\n"
            f"    write: true\n"
            f"  - path: {tmp_path / 'install'}\n"
            f"    install: true\n"
        )
        store = BasicFileStore(FileStoreConfig.from_yaml(path))

        assert store.locations() == [tmp_path / "cache", tmp_path / "install"]
        assert store.is_install_location(tmp_path / "install")
        assert not store.is_install_location(tmp_path / "cache")
        assert store.write_location() == tmp_path / "cache"

    def test_from_env_directory(self, monkeypatch, tmp_path):
        monkeypatch.delenv("DATA_FILE_STORE_CONFIG", raising=False)
        monkeypatch.setenv("DATA_FILE_STORE_DIR", str(tmp_path))
        assert BasicFileStore.from_env().locations() == [tmp_path]

    def test_from_env_unset(self, monkeypatch):
        monkeypatch.delenv("DATA_FILE_STORE_CONFIG", raising=False)
        monkeypatch.delenv("DATA_FILE_STORE_DIR", raising=False)
        assert BasicFileStore.from_env() is None

    def test_user_directory_expanded(self):
        location = StoreLocation(path="~/worldwind")
        assert "~" not in str(location.path)

    def test_requires_config(self):
        with pytest.raises(InvalidInputError):
            BasicFileStore(None)


# ============================================================================
# INSTALL LOCATION
# ============================================================================

class TestInstallLocation:

    def test_prefers_install_location(self, tmp_path):
        store = BasicFileStore(FileStoreConfig(locations=[
            StoreLocation(path=tmp_path / "a", write=True),
            StoreLocation(path=tmp_path / "b", install=True),
        ]))
        assert resolve_install_location(store) == tmp_path / "b"

    def test_falls_back_to_write_location(self, tmp_path):
        store = BasicFileStore(FileStoreConfig(locations=[
            StoreLocation(path=tmp_path / "a"),
            StoreLocation(path=tmp_path / "b", write=True),
        ]))
        assert resolve_install_location(store) == tmp_path / "b"

    def test_empty_store(self):
        assert resolve_install_location(BasicFileStore(FileStoreConfig())) is None

    def test_none_store(self):
        with pytest.raises(InvalidInputError):
            resolve_install_location(None)

    def test_does_not_create_directories(self, tmp_path):
        store = BasicFileStore.for_directory(tmp_path / "missing")
        resolve_install_location(store)
        assert not (tmp_path / "missing").exists()


# ============================================================================
# LOGGING
# ============================================================================

def _record(message="hello", exc_info=None):
    return logging.LogRecord("services.test", logging.INFO, __file__, 1, message, None, exc_info)


class TestLogging:

    def test_context_nests_and_unwinds(self):
        with log_context(install_id="abc", dataset_name="ortho"):
            with log_context(phase="offering", files=3):
                context = get_current_context()
                assert context.install_id == "abc"
                assert context.phase == "offering"
                assert context.extra == {"files": 3}
            assert get_current_context().phase is None
        assert get_current_context().install_id is None

    def test_human_formatter_includes_dataset(self):
        with log_context(dataset_name="ortho", phase="producing"):
            line = HumanFormatter().format(_record())
        assert "[dataset=ortho, phase=producing]" in line
        assert line.endswith("hello")

    def test_structured_formatter_is_json(self):
        with log_context(install_id="abc"):
            data = json.loads(StructuredFormatter().format(_record()))
        assert data["message"] == "hello"
        assert data["context"]["install_id"] == "abc"
        assert data["level"] == "INFO"

    def test_checkpoint_carries_context(self):
        logger = MagicMock()
        with log_context(install_id="abc", dataset_name="ortho"):
            log_checkpoint("install_started", {"files": 2}, logger)

        message = logger.info.call_args[0][0]
        payload = logger.info.call_args[1]["extra"]["extra"]
        assert message == "CHECKPOINT: install_started"
        assert payload["install_id"] == "abc"
        assert payload["data"] == {"files": 2}


# ============================================================================
# CANCELLATION AND PROGRESS
# ============================================================================

class TestCancellationToken:

    def test_cancel_is_one_way(self):
        token = CancellationToken()
        assert not token.is_cancelled
        token.cancel("first")
        token.cancel("second")
        assert token.is_cancelled
        assert token.reason == "first"

    def test_raise_if_cancelled(self):
        token = CancellationToken()
        token.raise_if_cancelled()
        token.cancel()
        with pytest.raises(ProductionCancelledError):
            token.raise_if_cancelled()

    def test_never_cancelled(self):
        token = NeverCancelled()
        token.cancel()
        assert not token.is_cancelled


class TestProgressTracker:

    def test_complete_reports_full(self):
        reports = []
        tracker = ProgressTracker("ortho", total=10, report_callback=reports.append)
        tracker.update(current=3)
        tracker.complete()

        assert reports[-1].percent == 100.0
        assert reports[-1].current == 10
        assert reports[-1].dataset_name == "ortho"

    def test_throttled(self):
        reports = []
        tracker = ProgressTracker(
            "ortho", total=1000, report_callback=reports.append, min_report_interval=60
        )
        tracker.update(current=1, force_report=True)
        tracker.update(current=500)
        assert len(reports) == 1

    def test_callback_failure_is_contained(self):
        tracker = ProgressTracker("ortho", total=2, report_callback=MagicMock(side_effect=RuntimeError))
        tracker.complete()
        assert tracker.percent == 100.0
