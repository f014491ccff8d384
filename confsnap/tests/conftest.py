import pytest

from confsnap.snapshot import SnapshotManager, scalar_summary
from confsnap.tests.mocks import (
    FLAG_ON,
    TARGET_ID,
    MockBlobStore,
    MockClock,
    MockConfigurationService,
)


@pytest.fixture
def clock() -> MockClock:
    return MockClock()


@pytest.fixture
def store() -> MockBlobStore:
    return MockBlobStore()


@pytest.fixture
def remote() -> MockConfigurationService:
    service = MockConfigurationService()
    service.set_config(TARGET_ID, FLAG_ON)
    return service


@pytest.fixture
def manager(store, remote, clock) -> SnapshotManager:
    return SnapshotManager(
        store=store,
        remote=remote,
        extractor=scalar_summary,
        history_cap=50,
        clock=clock,
    )
