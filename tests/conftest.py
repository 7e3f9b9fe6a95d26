from __future__ import annotations

import pytest

from shared.logger import SiftLogger

from dexsift.core.dex_file import DexFile

from tests.dexbuilder import TEST_CASE, DexBuilder


@pytest.fixture
def quiet_logger() -> SiftLogger:
    return SiftLogger("test", console_output=False)


@pytest.fixture
def simple_test_dex() -> DexFile:
    """One JUnit3 test class with lifecycle methods and two tests."""
    data = (
        DexBuilder()
        .add_class(
            "Lcom/example/FooTest;",
            TEST_CASE,
            ["setUp", "testA", "testB", "tearDown"],
        )
        .build()
    )
    return DexFile(data, name="simple.dex")
