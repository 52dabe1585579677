# ============================================================================
# PRODUCTION COORDINATOR TESTS
# ============================================================================
# STATUS: Tests - Offer / produce / rollback state machine
# PURPOSE: Verify parameter shapes, cancellation and rollback guarantees
# CREATED: 18 OCT 2026
# ============================================================================
"""
Production Coordinator Tests

Covers:
1. Parameter shapes for on-demand and full-pyramid modes
2. State transitions on success
3. Cancellation between offers and during production → None document
4. Failure → rollback, then re-raise
5. Idempotent rollback

Run with:
    pytest tests/test_production.py -v
"""

from pathlib import Path
from typing import List, Optional
from xml.etree import ElementTree as ET

import pytest

from core.config import InstallerConfig
from core.contracts import ParamKey, ProductionState, SERVICE_NAME_LOCAL_RASTER_SERVER
from core.errors import InvalidInputError
from core.models import FileSet
from producers import DataStoreProducer
from services.production import ProductionCoordinator
from worker.cancellation import CancellationToken


# ============================================================================
# FAKE PRODUCER
# ============================================================================

class FakeProducer(DataStoreProducer):
    """Producer that records calls and writes a marker directory."""

    def __init__(
        self,
        fail_on_offer: Optional[str] = None,
        fail_on_start: Optional[Exception] = None,
        cancel_token: Optional[CancellationToken] = None,
        cancel_after_offers: Optional[int] = None,
        produce_document: bool = True,
    ):
        super().__init__()
        self.offered: List[Path] = []
        self.started = False
        self.rollbacks = 0
        self._fail_on_offer = fail_on_offer
        self._fail_on_start = fail_on_start
        self._token = cancel_token
        self._cancel_after_offers = cancel_after_offers
        self._produce_document = produce_document

    def _cache_dir(self) -> Path:
        params = self._store_params
        return Path(params[ParamKey.FILE_STORE_LOCATION]) / params[ParamKey.DATA_CACHE_NAME]

    def offer_data_source(self, source, params=None):
        if self._fail_on_offer and Path(source).name == self._fail_on_offer:
            raise InvalidInputError(f"Cannot offer {source}")
        self.offered.append(Path(source))
        self._cache_dir().mkdir(parents=True, exist_ok=True)
        if self._cancel_after_offers is not None and len(self.offered) >= self._cancel_after_offers:
            self._token.cancel("Cancelled in test")

    def start_production(self, cancel_token=None):
        self.started = True
        self._production_params = self._store_params
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        if self._fail_on_start is not None:
            raise self._fail_on_start
        if self._produce_document:
            self._results.append(ET.Element("Layer"))

    def remove_production_state(self):
        self.rollbacks += 1
        self._results = []
        cache_dir = self._cache_dir()
        if cache_dir.exists():
            cache_dir.rmdir()


FILES = FileSet.of("/d/a.tif", "/d/b.tif", "/d/c.tif")


# ============================================================================
# PARAMETERS
# ============================================================================

class TestBuildParameters:
    """Tests for the two parameter shapes."""

    def test_on_demand_default(self, tmp_path):
        params = ProductionCoordinator(InstallerConfig()).build_parameters(tmp_path, "ortho")

        assert params[ParamKey.DATASET_NAME] == "ortho"
        assert params[ParamKey.DATA_CACHE_NAME] == "ortho"
        assert params[ParamKey.FILE_STORE_LOCATION] == str(tmp_path.absolute())
        assert params[ParamKey.SERVICE_NAME] == SERVICE_NAME_LOCAL_RASTER_SERVER
        assert params[ParamKey.TILED_RASTER_PRODUCER_LIMIT_MAX_LEVEL] == "0"
        assert ParamKey.PRODUCER_ENABLE_FULL_PYRAMID not in params

    def test_on_demand_max_level_override(self, tmp_path):
        config = InstallerConfig(max_level="5")
        params = ProductionCoordinator(config).build_parameters(tmp_path, "ortho")
        assert params[ParamKey.TILED_RASTER_PRODUCER_LIMIT_MAX_LEVEL] == "5"

    def test_full_pyramid(self, tmp_path):
        config = InstallerConfig(enable_full_pyramid=True)
        params = ProductionCoordinator(config).build_parameters(tmp_path, "ortho")

        assert params[ParamKey.PRODUCER_ENABLE_FULL_PYRAMID] is True
        assert ParamKey.SERVICE_NAME not in params
        assert ParamKey.TILED_RASTER_PRODUCER_LIMIT_MAX_LEVEL not in params

    def test_default_config_from_environment(self, monkeypatch):
        monkeypatch.setenv("PRODUCER_ENABLE_FULL_PYRAMID", "true")
        assert ProductionCoordinator().config.enable_full_pyramid is True


# ============================================================================
# RUN
# ============================================================================

class TestRun:
    """Tests for the state machine."""

    def test_success(self, tmp_path):
        coordinator = ProductionCoordinator(InstallerConfig())
        producer = FakeProducer()

        result = coordinator.run(producer, FILES, tmp_path, "ortho")

        assert result.state == ProductionState.COMPLETED
        assert result.document is not None
        assert result.document.tag == "Layer"
        assert producer.offered == list(FILES.files)
        assert producer.started
        assert producer.rollbacks == 0
        assert coordinator.state == ProductionState.COMPLETED

    def test_success_without_document_is_none(self, tmp_path):
        producer = FakeProducer(produce_document=False)
        result = ProductionCoordinator(InstallerConfig()).run(producer, FILES, tmp_path, "ortho")

        assert result.state == ProductionState.COMPLETED
        assert result.document is None
        assert producer.rollbacks == 0

    def test_cancel_between_offers(self, tmp_path):
        token = CancellationToken()
        producer = FakeProducer(cancel_token=token, cancel_after_offers=1)

        result = ProductionCoordinator(InstallerConfig()).run(producer, FILES, tmp_path, "ortho", token)

        assert result.cancelled
        assert result.document is None
        assert len(producer.offered) == 1
        assert not producer.started
        assert producer.rollbacks == 1
        assert not (tmp_path / "ortho").exists()

    def test_cancel_before_producing(self, tmp_path):
        token = CancellationToken()
        producer = FakeProducer(cancel_token=token, cancel_after_offers=3)

        result = ProductionCoordinator(InstallerConfig()).run(producer, FILES, tmp_path, "ortho", token)

        assert result.state == ProductionState.CANCELLED
        assert len(producer.offered) == 3
        assert not producer.started
        assert not (tmp_path / "ortho").exists()

    def test_cancel_during_producing(self, tmp_path):
        token = CancellationToken()

        class CancellingProducer(FakeProducer):
            def start_production(self, cancel_token=None):
                token.cancel("user pressed cancel")
                super().start_production(cancel_token)

        producer = CancellingProducer()
        result = ProductionCoordinator(InstallerConfig()).run(producer, FILES, tmp_path, "ortho", token)

        assert result.cancelled
        assert result.document is None
        assert producer.rollbacks == 1
        assert not (tmp_path / "ortho").exists()

    def test_producer_error_after_cancel_is_cancellation(self, tmp_path):
        token = CancellationToken()

        class AbortingProducer(FakeProducer):
            def start_production(self, cancel_token=None):
                token.cancel("user pressed cancel")
                raise RuntimeError("renderer aborted")

        producer = AbortingProducer()
        result = ProductionCoordinator(InstallerConfig()).run(producer, FILES, tmp_path, "ortho", token)

        assert result.cancelled
        assert result.document is None
        assert producer.rollbacks == 1

    def test_offer_failure_rolls_back_and_raises(self, tmp_path):
        producer = FakeProducer(fail_on_offer="b.tif")
        coordinator = ProductionCoordinator(InstallerConfig())

        with pytest.raises(InvalidInputError):
            coordinator.run(producer, FILES, tmp_path, "ortho")

        assert producer.rollbacks == 1
        assert coordinator.state == ProductionState.ROLLED_BACK
        assert not (tmp_path / "ortho").exists()

    def test_production_failure_rolls_back_and_raises(self, tmp_path):
        producer = FakeProducer(fail_on_start=RuntimeError("disk full"))
        coordinator = ProductionCoordinator(InstallerConfig())

        with pytest.raises(RuntimeError, match="disk full"):
            coordinator.run(producer, FILES, tmp_path, "ortho")

        assert producer.rollbacks == 1
        assert coordinator.state == ProductionState.ROLLED_BACK

    def test_rollback_failure_does_not_mask_error(self, tmp_path):
        producer = FakeProducer(fail_on_start=RuntimeError("disk full"))

        def broken_rollback():
            raise OSError("permission denied")

        producer.remove_production_state = broken_rollback

        with pytest.raises(RuntimeError, match="disk full"):
            ProductionCoordinator(InstallerConfig()).run(producer, FILES, tmp_path, "ortho")

    def test_rollback_is_idempotent(self, tmp_path):
        token = CancellationToken()
        producer = FakeProducer(cancel_token=token, cancel_after_offers=1)
        coordinator = ProductionCoordinator(InstallerConfig())
        coordinator.run(producer, FILES, tmp_path, "ortho", token)

        coordinator.rollback()
        coordinator.rollback()

        assert producer.rollbacks == 3
        assert not (tmp_path / "ortho").exists()

    def test_rollback_before_run_is_noop(self):
        ProductionCoordinator(InstallerConfig()).rollback()
