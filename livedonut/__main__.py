import argparse
import logging
import sys

from PyQt6.QtWidgets import QApplication, QMainWindow, QMessageBox

from livedonut import __version__
from livedonut.core.application.subscription_service import (
    CollectionSubscription,
    SubscriptionError,
    open_collection,
)
from livedonut.core.log_setup import setup_logging
from livedonut.core.settings import SettingsManager
from livedonut.presenters.chart_presenter import DonutChartPresenter
from livedonut.ui.donut_chart_view import DonutChartView

APP_NAME = "livedonut"

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME, description="Live donut chart of a Firestore collection."
    )
    parser.add_argument("--collection", help="Collection to watch.")
    parser.add_argument("--project", help="Google Cloud project id.")
    parser.add_argument("--credentials", help="Service account JSON file.")
    parser.add_argument(
        "--save", action="store_true",
        help="Remember the given connection settings for later runs."
    )
    parser.add_argument(
        "--enable-logging", action="store_true", help="Permanently enable logging."
    )
    parser.add_argument(
        "--disable-logging", action="store_true", help="Permanently disable logging."
    )
    return parser

def resolve_connection(args, settings_manager: SettingsManager) -> dict:
    """Stored connection settings overridden by command line values."""
    config = settings_manager.load_connection_settings()
    overrides = {
        "collection": args.collection,
        "project_id": args.project,
        "credentials_path": args.credentials,
    }
    config.update({key: value for key, value in overrides.items() if value})
    return config

def main():
    args, unknown = build_parser().parse_known_args()

    app = QApplication([sys.argv[0], *unknown])
    app.setApplicationName("Live Donut")
    app.setApplicationVersion(__version__)
    app.setOrganizationName(APP_NAME)

    settings_manager = SettingsManager(APP_NAME, APP_NAME)

    if args.enable_logging or args.disable_logging:
        enabled = args.enable_logging
        settings_manager.save_debug_mode(enabled)
        status = "enabled" if enabled else "disabled"
        print(f"Permanent logging was {status}.")
        sys.exit(0)

    setup_logging(
        APP_NAME,
        debug_enabled=settings_manager.load_debug_mode(),
        debug_env_var="DEBUG",
    )
    main_logger = logging.getLogger("Main")

    connection = resolve_connection(args, settings_manager)
    if args.save:
        settings_manager.save_connection_settings(connection)

    view = DonutChartView()
    window = QMainWindow()
    window.setWindowTitle(f"{connection['collection']} - Live Donut")
    window.setCentralWidget(view)

    try:
        collection = open_collection(
            connection["collection"],
            project_id=connection["project_id"],
            credentials_path=connection["credentials_path"],
        )
        subscription = CollectionSubscription(collection)
        presenter = DonutChartPresenter(subscription, view)
        presenter.start()
    except SubscriptionError as e:
        main_logger.error(f"Could not open collection: {e}", exc_info=True)
        QMessageBox.critical(None, "Live Donut", f"Could not open collection:\n{e}")
        sys.exit(1)

    app.aboutToQuit.connect(presenter.shutdown)

    window.show()
    sys.exit(app.exec())

if __name__ == "__main__":
    main()
