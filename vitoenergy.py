#!/usr/bin/env python3
"""
VitoEnergy - Energy accounting for solar/gas heating telemetry
"""

import argparse
import atexit
import logging
import sys
import threading
import time

from pyvitoenergy import DataCollector, settings
from pyvitoenergy.errors import VitoEnergyError
from pyvitoenergy.run_streamlit import main as run_streamlit

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.INFO
)
logger = logging.getLogger("VitoEnergy")

# Global flag to control the background thread
running = True


def background_task():
    """Background task that imports new exports from the inbox directory"""
    global running
    data_collector = DataCollector()

    while running:
        try:
            logger.info("Checking import directory for new exports")
            imported = data_collector.import_directory(settings.import_directory)
            logger.info(f"Completed background task, imported {imported} files")
        except (VitoEnergyError, OSError) as e:
            logger.error(f"Error in background task: {e}")

        # Wait for configured interval
        for _ in range(settings.background_task_interval):
            if not running:
                break
            time.sleep(1)


def cleanup():
    """Cleanup function to stop the background thread"""
    global running
    running = False
    logger.info("Stopping background task")


def start_import_watch():
    """Start the background import thread"""
    atexit.register(cleanup)

    background_thread = threading.Thread(target=background_task)
    background_thread.daemon = True
    background_thread.start()

    return background_thread


def main():
    """Main entry point for the application"""
    parser = argparse.ArgumentParser(description="VitoEnergy - Heating Energy Accounting")
    parser.add_argument("--import", dest="import_file", help="Import a telemetry export and exit")
    parser.add_argument(
        "--watch", action="store_true", help="Import exports from the inbox directory periodically"
    )
    parser.add_argument("--streamlit", action="store_true", help="Run the Streamlit dashboard")
    parser.add_argument(
        "--local", action="store_true", help="Run in local mode (no inbox import)"
    )
    args = parser.parse_args()

    if args.local:
        settings.local_mode = True

    if args.import_file:
        try:
            result = DataCollector().import_file(args.import_file)
        except (VitoEnergyError, OSError) as e:
            logger.error(f"Import failed: {e}")
            return 1
        logger.info(f"Imported {result.parsed} rows from {args.import_file}")
        if not (args.watch or args.streamlit):
            return 0

    if args.watch and not settings.local_mode:
        thread = start_import_watch()
        if not (args.streamlit or settings.use_streamlit):
            thread.join()
            return 0

    if args.streamlit or settings.use_streamlit:
        logger.info("Starting Streamlit visualization server")
        return run_streamlit()

    return 0


if __name__ == "__main__":
    sys.exit(main())
