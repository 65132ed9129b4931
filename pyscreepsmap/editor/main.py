"""Main entry point for the PyScreepsMap viewer."""

import sys


def main(demo: bool = False, room: str | None = None, shard: str | None = None) -> int:
    """Launch the viewer application."""
    try:
        from PyQt6.QtWidgets import QApplication
    except ImportError:
        print("Error: PyQt6 is required for the map viewer.")
        print("Install it with: pip install pyscreepsmap[gui]")
        return 1

    from pyscreepsmap import __version__
    from pyscreepsmap.config import get_config
    from pyscreepsmap.editor.main_window import MainWindow

    config = get_config()
    if room:
        config.viewer.default_room = room
    if shard:
        config.terrain.shard = shard

    app = QApplication(sys.argv)
    app.setApplicationName("PyScreepsMap")
    app.setOrganizationName("PyScreepsMap")
    app.setApplicationVersion(__version__)

    window = MainWindow(config)
    window.show()
    if demo:
        window.action_demo.trigger()

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
