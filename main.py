"""
Companion Settings — Entry Point
Inspect the settings store and import settings from a previous installation.

Run with: python main.py [--ini PATH] [--list-profiles] [--import-previous]
"""

import argparse
import logging
import sys
from pathlib import Path

# Resolve root so imports work regardless of CWD
ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT))

from companion_settings import AppSettings, QSettingsBackend


def setup_logging(level_name: str = "INFO", log_file: Path | None = None):
    level = getattr(logging, level_name.upper(), logging.INFO)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
    )


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="OpenTX Companion settings tool")
    parser.add_argument("--ini", type=Path, help="use a portable INI file instead of the native store")
    parser.add_argument("--log-level", default="INFO")
    parser.add_argument("--log-file", type=Path)
    parser.add_argument("--list-profiles", action="store_true", help="print configured radio profiles")
    parser.add_argument("--import-previous", action="store_true",
                        help="import settings from the newest previous installation")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    logger = logging.getLogger(__name__)

    backend = QSettingsBackend.ini(args.ini) if args.ini else None
    settings = AppSettings(backend)
    settings.init()
    logger.info(f"Settings version {settings.settings_version()}, first use: {settings.is_first_use()}")

    if args.import_previous:
        version = settings.find_previous_version_settings()
        if version is None:
            logger.error("No previous version settings found")
            return 1
        if not settings.import_settings(version):
            return 1
        settings.init()
        logger.info(f"Imported settings from version {settings.previous_version()}")

    if args.list_profiles:
        for index, name in settings.get_active_profiles().items():
            marker = "*" if index == settings.profile_id else " "
            print(f"{marker} {index:2d}  {name}")

    settings.sync()
    return 0


if __name__ == "__main__":
    sys.exit(main())
