import argparse
import logging
import sys
from pathlib import Path

from PyQt5.QtWidgets import QApplication, QMessageBox

from SA_Libs.AnnotationLib.annotate_window import open_annotate_window


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Annotate one audit photo.")
    parser.add_argument("project_id", help="Id of the project that owns the photo")
    parser.add_argument("issue_id", help="Id of the issue that owns the photo")
    parser.add_argument("photo_id", help="Id of the photo to annotate")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=Path.cwd(),
        help="Directory containing the AuditData store (default: current directory)",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QApplication(sys.argv)
    try:
        window = open_annotate_window(args.data_dir, args.project_id, args.issue_id, args.photo_id)
    except (LookupError, OSError) as e:
        QMessageBox.critical(None, "Cannot Open Photo", str(e))
        sys.exit(1)

    window.show()
    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
