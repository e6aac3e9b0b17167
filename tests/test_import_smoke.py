import sys
import pytest
from unittest.mock import patch


@pytest.mark.parametrize("strategy", ["crop_id", "user_crop"])
@pytest.mark.parametrize("camera", ["true", "false"])
def test_import_graph_smoke(strategy, camera):
    """
    Verify that the app can be imported without crashing,
    regardless of lookup strategy or camera flag.
    """
    with patch.dict("os.environ", {
        "LOOKUP_STRATEGY": strategy,
        "CAMERA_ENABLED": camera,
    }):
        for name in ("cropverify.main", "cropverify.core.workflow", "cropverify.capture.device"):
            sys.modules.pop(name, None)

        try:
            import cropverify.main
            import cropverify.core.workflow
            import cropverify.capture.device
        except ImportError as e:
            pytest.fail(f"Import failed with strategy={strategy} camera={camera}: {e}")


def test_uvicorn_importable():
    """
    Simulate uvicorn import string loading.
    """
    from cropverify.main import app
    assert app is not None
