import argparse
import os
import shutil
from datetime import datetime

import core.config as config


def restore_database(backup_filename: str, db_file: str | None = None, backup_dir: str | None = None) -> bool:
    """Restores the JSON database from a snapshot, keeping a safety copy of the current file."""
    db_file = db_file or config.DB_FILE
    backup_dir = backup_dir or config.BACKUPS_DIR

    backup_path = os.path.join(backup_dir, os.path.basename(backup_filename))

    # 1. Verification
    if not os.path.exists(backup_path):
        print(f"Error: Backup file '{backup_path}' does not exist.")
        return False

    # 2. Safety copy of current DB (if it exists)
    if os.path.exists(db_file):
        os.makedirs(backup_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        safety_path = os.path.join(backup_dir, f"pre_restore_safety_{timestamp}.json")
        shutil.copy2(db_file, safety_path)
        print(f"Created safety copy of current DB at: {safety_path}")

    # 3. Restore
    shutil.copy2(backup_path, db_file)
    print(f"Success! Database restored from: {backup_filename}")
    return True


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Restore the JSON database from a backup.")
    parser.add_argument(
        "backup_file",
        help="The filename of the backup inside the backups/ folder (e.g. db_backup_20240101_120000_000000.json)",
    )
    args = parser.parse_args()

    # allow passing full path by accident
    filename = os.path.basename(args.backup_file)
    print(f"Starting restore operation targeting '{filename}'...")
    restore_database(filename)
