"""
Run exporter code in a child interpreter and stop it with a signal.

The child script must print the listen port on its first line once the
socket is bound.
"""

import os
import signal
import subprocess
import sys
import time
from pathlib import Path

import httpx

PROJECT_ROOT = Path(__file__).resolve().parents[2]


def wait_for_http(port: int, timeout: float = 15.0) -> None:
    deadline = time.monotonic() + timeout
    while True:
        try:
            httpx.get(f"http://127.0.0.1:{port}/")
            return
        except httpx.TransportError:
            if time.monotonic() > deadline:
                raise
            time.sleep(0.05)


def run_until_signal(
    script: str, sig: signal.Signals = signal.SIGTERM, timeout: float = 20.0
) -> tuple[int, str, str]:
    """
    Start script, wait until it serves HTTP, send sig, and collect the result.

    Returns:
        Exit code, stdout after the port line, and stderr
    """
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(
        path for path in (str(PROJECT_ROOT), env.get("PYTHONPATH")) if path
    )
    process = subprocess.Popen(
        [sys.executable, "-c", script],
        cwd=PROJECT_ROOT,
        env=env,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )
    try:
        port = int(process.stdout.readline())
        wait_for_http(port)
        process.send_signal(sig)
        stdout, stderr = process.communicate(timeout=timeout)
    finally:
        if process.poll() is None:
            process.kill()
            process.communicate()
    return process.returncode, stdout, stderr
