#!/usr/bin/env python3
"""
Launch the VitoEnergy dashboard with `streamlit run`.
"""

import importlib.util
import logging
import subprocess
import sys
from pathlib import Path
from typing import List

from pyvitoenergy.config import settings

logger = logging.getLogger("VitoEnergy")

DASHBOARD_PACKAGES = ("streamlit", "altair")


def missing_packages() -> List[str]:
    return [name for name in DASHBOARD_PACKAGES if importlib.util.find_spec(name) is None]


def dashboard_path() -> str:
    spec = importlib.util.find_spec("pyvitoenergy.streamlit_app")
    if spec is not None and spec.origin:
        return spec.origin
    return str(Path(__file__).resolve().parent / "streamlit_app.py")


def streamlit_command(app_path: str, port: int) -> List[str]:
    return [
        sys.executable,
        "-m",
        "streamlit",
        "run",
        app_path,
        "--server.port",
        str(port),
        "--server.address",
        "0.0.0.0",
        "--theme.base",
        "dark",
    ]


def main() -> int:
    missing = missing_packages()
    if missing:
        logger.error(f"Dashboard needs {', '.join(missing)}: pip install {' '.join(missing)}")
        return 1

    cmd = streamlit_command(dashboard_path(), settings.streamlit_port)
    logger.info(f"Starting dashboard on port {settings.streamlit_port}")
    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        logger.info("Dashboard stopped")
    except subprocess.CalledProcessError as e:
        logger.error(f"Dashboard exited with status {e.returncode}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
