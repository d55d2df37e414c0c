import os
import shutil
from datetime import datetime

import core.config as config


def backup_database(db_file: str | None = None, backup_dir: str | None = None) -> str | None:
    """Copies the JSON database into the backups folder.

    Returns:
        str | None: Path of the new snapshot, or None when there is nothing to back up.
    """
    db_file = db_file or config.DB_FILE
    backup_dir = backup_dir or config.BACKUPS_DIR

    if not os.path.exists(db_file):
        print(f"Error: Database file '{db_file}' not found. Cannot create backup.")
        return None

    os.makedirs(backup_dir, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    backup_path = os.path.join(backup_dir, f"db_backup_{timestamp}.json")

    shutil.copy2(db_file, backup_path)
    print(f"Success! Database backed up to: {backup_path}")
    return backup_path


if __name__ == "__main__":
    print("Starting database backup...")
    backup_database()
