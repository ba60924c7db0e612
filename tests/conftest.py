# Shared test setup.
# Qt runs on the offscreen platform. If pytest-qt is not installed a minimal
# 'qtbot' fallback fixture is provided; if it is installed, its fixture wins.

import os
import sys
import contextlib
import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from codetrack.services.service_locator import services  # noqa: E402
from codetrack.state.application_state import ApplicationState, reset_application_state  # noqa: E402

try:  # If pytest-qt present, do nothing (its fixture will be used)
    import pytestqt  # type: ignore  # noqa: F401
except ImportError:  # pragma: no cover
    try:
        from PyQt6.QtWidgets import QApplication
    except ImportError:  # pragma: no cover
        QApplication = None  # type: ignore

    @pytest.fixture
    def qtbot():  # type: ignore
        if QApplication is None:
            pytest.skip("PyQt6 not available")
        app = QApplication.instance() or QApplication(sys.argv)  # type: ignore  # noqa: F841
        widgets = []

        class Bot:
            def addWidget(self, w):  # mimic pytest-qt API subset
                widgets.append(w)

            @contextlib.contextmanager
            def waitSignal(self, *args, **kwargs):  # no-op stub
                yield

        return Bot()


@pytest.fixture
def state() -> ApplicationState:
    return reset_application_state()


@pytest.fixture(autouse=True)
def _clean_services():
    yield
    services.clear()
