import subprocess
import sys


def test_cli_help() -> None:
    cp = subprocess.run(
        [sys.executable, "-m", "chainviz", "--help"],
        check=True,
        capture_output=True,
        text=True,
    )
    assert "chainviz" in cp.stdout.lower()
