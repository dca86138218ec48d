import os
import subprocess
import sys

import pytest


def _run_dry(env_overrides: dict[str, str]) -> subprocess.CompletedProcess[str]:
    env = dict(os.environ)
    env.update(env_overrides)
    return subprocess.run(
        [sys.executable, "-m", "app.main", "--dry-run-startup"],
        capture_output=True,
        text=True,
        check=False,
        env=env,
    )


@pytest.mark.integration
@pytest.mark.parametrize("backend", ["memory", "gspread"])
def test_service_starts_via_dry_run(backend: str) -> None:
    proc = _run_dry({"SHEETS_BACKEND": backend})

    assert proc.returncode == 0, proc.stderr


@pytest.mark.integration
def test_dry_run_logs_configuration_warnings_as_json() -> None:
    proc = _run_dry({"SHEETS_BACKEND": "memory", "INTAKE_BEARER_TOKEN": ""})

    assert proc.returncode == 0, proc.stderr
    assert '"level": "WARNING"' in proc.stdout
    assert "INTAKE_BEARER_TOKEN" in proc.stdout


@pytest.mark.integration
def test_dry_run_rejects_unknown_backend() -> None:
    proc = _run_dry({"SHEETS_BACKEND": "excel"})

    assert proc.returncode == 2
    assert "Unsupported sheets backend" in proc.stderr
