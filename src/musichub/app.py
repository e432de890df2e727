import logging
import os
import sys

from PySide6.QtCore import QStandardPaths
from PySide6.QtWidgets import QApplication

from musichub.core.api_client import MusicHubClient
from musichub.core.auth import Authenticator
from musichub.core.library import LibraryCoordinator
from musichub.core.state import AppState
from musichub.core.tasks import TaskRunner
from musichub.db.migrations import debug_print_schema, initialize_settings_database
from musichub.player.engine import PlaybackEngine
from musichub.player.player import Player, has_audio_output

logger = logging.getLogger(__name__)


def get_app_data_dir() -> str:
    base = QStandardPaths.writableLocation(QStandardPaths.AppDataLocation)
    os.makedirs(base, exist_ok=True)
    return base


def init_app_state() -> AppState:
    app_data_dir = get_app_data_dir()
    settings_db = initialize_settings_database(app_data_dir)

    if os.getenv("MUSICHUB_DEBUG_SCHEMA") == "1":
        debug_print_schema(settings_db)

    app_state = AppState(settings_db)
    app_state.app_data_dir = app_data_dir

    # the stored API URL decides where the client points
    app_state.restore()
    app_state.runner = TaskRunner()

    api_url = os.getenv("MUSICHUB_API_URL")
    if api_url:
        app_state.api_base_url = api_url
    app_state.client = MusicHubClient(app_state.api_base_url)
    logger.info("Using API at %s", app_state.api_base_url)

    if not has_audio_output():
        app_state.queue_notify("No audio output device found, playback is unavailable", "warning")
    player = Player()
    player.set_volume(app_state.volume)
    app_state.player = player
    app_state.engine = PlaybackEngine(player, fetch_lyrics=app_state.client.fetch_lyrics, runner=app_state.runner)
    app_state.library = LibraryCoordinator(app_state, app_state.client, app_state.runner)
    app_state.auth = Authenticator(app_state, app_state.client, app_state.runner)

    # initial load: the whole catalog becomes the queue, first track selected
    def on_catalog(tracks):
        if app_state.engine.current is None and tracks:
            app_state.engine.set_queue(tracks)
            app_state.engine.select(tracks[0])

    app_state.library.catalogChanged.connect(on_catalog)
    return app_state


def main() -> int:
    level = os.getenv("MUSICHUB_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    qt_app = QApplication(sys.argv)
    qt_app.setApplicationName("MusicHub")
    qt_app.setOrganizationName("MusicHub")

    from musichub.ui.main_window import MainWindow

    app_state = init_app_state()
    main_window = MainWindow(app_state)
    main_window.show()

    app_state.library.load_catalog()
    app_state.library.refresh_playlists()

    code = qt_app.exec()
    app_state.runner.wait_all()
    return code


if __name__ == "__main__":
    raise SystemExit(main())
