"""
Main entry point for the G-Code editor application.
Sets up logging, initializes the Qt application and starts the event loop.
"""
import argparse
import logging
import sys
from PySide6.QtWidgets import QApplication
from config.editor_config import ConfigManager
from gui.main_window import MainWindow


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Edit and visualize G-code files.")
    parser.add_argument("file", nargs="?", help="G-code file to open")
    parser.add_argument("--config", help="JSON editor configuration file")
    parser.add_argument("--preset", default="default", choices=ConfigManager.preset_names(),
                        help="built-in configuration preset")
    parser.add_argument("--write-config", metavar="PATH",
                        help="write the selected configuration as JSON and exit")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return parser.parse_args(argv)


def main(argv=None):
    """Initializes and runs the PySide6 application."""
    args = parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.config:
        config = ConfigManager.load_config(args.config)
    else:
        config = ConfigManager.get_config(args.preset)

    if args.write_config:
        ConfigManager.save_config(config, args.write_config)
        return

    app = QApplication(sys.argv[:1])
    window = MainWindow(config)
    if args.file:
        try:
            with open(args.file, 'r') as f:
                window.current_path = args.file
                window.load_text(f.read())
        except OSError as e:
            logging.getLogger(__name__).error("Cannot open %s: %s", args.file, e)
    window.show()
    sys.exit(app.exec())


if __name__ == '__main__':
    main()
