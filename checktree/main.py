import sys

from PyQt6.QtWidgets import QApplication

from checktree import __version__
from checktree.ui.main_window import MainWindow


def main() -> None:
    app = QApplication(sys.argv)
    app.setApplicationName(f"Checkbox Tree {__version__}")
    window = MainWindow()
    window.resize(600, 700)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
