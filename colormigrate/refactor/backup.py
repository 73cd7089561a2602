"""Snapshot, verify and restore project files by content hash.

Layout under the project::

    .color_migrate_backups/
        1718000000000/
            .backup_metadata.json
            lib/main.dart
            lib/widgets/badge.dart

The manifest records the sha256 of every copy. Verification and restore
recompute it, so a tampered or truncated copy is never written back.
"""

import json
import shutil
import time
from datetime import datetime
from pathlib import Path

from colormigrate.exceptions import BackupError, BackupNotFoundError, SecurityError
from colormigrate.refactor.models import BackupManifest, BackupVerification, RestoreResult
from colormigrate.security import is_valid_backup_id, sanitize_path
from colormigrate.utils.constants import BACKUP_DIR_NAME, BACKUP_MANIFEST_NAME
from colormigrate.utils.helpers import (
    compute_file_hash,
    is_safe_relative_path,
    load_json_file,
    normalize_relative_path,
    save_json_file,
)
from colormigrate.utils.logging import logger


class BackupManager:
    """Creates and manages id-scoped backups under one project."""

    def __init__(self, project_root: str | Path, backup_root: str | Path | None = None):
        self.project_root = Path(project_root).resolve()
        if backup_root is None:
            self.backup_root = self.project_root / BACKUP_DIR_NAME
        else:
            backup_root = Path(backup_root)
            self.backup_root = (
                backup_root if backup_root.is_absolute() else self.project_root / backup_root
            ).resolve()

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def _new_backup_id(self) -> str:
        candidate = int(time.time() * 1000)
        while (self.backup_root / str(candidate)).exists():
            candidate += 1
        return str(candidate)

    def create_backup(self, paths: list[str | Path]) -> BackupManifest:
        """Copy every existing file in paths into a fresh backup and record hashes.

        All or nothing: if any copy fails the partial backup is removed and
        BackupError is raised, so the caller never writes without a snapshot.
        """
        try:
            self.backup_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise BackupError(f"Cannot create backup root {self.backup_root}: {e}") from e

        backup_id = self._new_backup_id()
        backup_dir = self.backup_root / backup_id
        created_at = datetime.now().isoformat()
        logger.info(f"Creating backup {backup_id} of {len(paths)} file(s)")

        file_hashes: dict[str, str] = {}
        try:
            backup_dir.mkdir(parents=True)
            for raw_path in paths:
                source = sanitize_path(raw_path, self.project_root)
                if not source.is_file():
                    logger.warning(f"Not backing up {raw_path}: file does not exist")
                    continue

                relative = normalize_relative_path(source, self.project_root)
                target = backup_dir / relative
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(source, target)
                file_hashes[relative] = compute_file_hash(target)

            manifest = BackupManifest(
                id=backup_id,
                created_at=created_at,
                file_hashes=file_hashes,
                location=backup_dir,
            )
            save_json_file(manifest.to_dict(), backup_dir / BACKUP_MANIFEST_NAME)
        except (OSError, SecurityError) as e:
            shutil.rmtree(backup_dir, ignore_errors=True)
            raise BackupError(f"Backup {backup_id} failed and was discarded: {e}") from e

        logger.info(f"Backed up {manifest.file_count} file(s) to {backup_dir}")
        return manifest

    # ------------------------------------------------------------------
    # Manifest access
    # ------------------------------------------------------------------

    def _backup_dir(self, backup_id: str) -> Path:
        if not is_valid_backup_id(backup_id):
            raise BackupNotFoundError(f"Invalid backup id: {backup_id!r}")
        backup_dir = self.backup_root / backup_id
        if not backup_dir.is_dir():
            raise BackupNotFoundError(f"Backup not found: {backup_id}")
        return backup_dir

    def _read_manifest(self, backup_dir: Path) -> BackupManifest:
        manifest_path = backup_dir / BACKUP_MANIFEST_NAME
        if not manifest_path.exists():
            raise BackupError(f"Backup metadata not found: {manifest_path}")
        try:
            data = load_json_file(manifest_path)
            hashes = data["fileHashes"]
            if not isinstance(hashes, dict):
                raise TypeError("fileHashes must be a map")
            return BackupManifest(
                id=str(data["id"]),
                created_at=str(data["timestamp"]),
                file_hashes={str(k): str(v) for k, v in hashes.items()},
                location=Path(data.get("location", backup_dir)),
            )
        except (OSError, json.JSONDecodeError, KeyError, TypeError) as e:
            raise BackupError(f"Backup metadata unreadable: {manifest_path}: {e}") from e

    def get_manifest(self, backup_id: str) -> BackupManifest:
        return self._read_manifest(self._backup_dir(backup_id))

    # ------------------------------------------------------------------
    # Verification and restore
    # ------------------------------------------------------------------

    def verify_backup(self, backup_id: str) -> BackupVerification:
        """Recompute every copy's hash and compare it to the manifest."""
        backup_dir = self._backup_dir(backup_id)
        manifest = self._read_manifest(backup_dir)

        verified = missing = corrupted = 0
        for relative, expected in manifest.file_hashes.items():
            if not is_safe_relative_path(relative):
                logger.warning(f"Backup {backup_id}: unsafe manifest path {relative!r}")
                corrupted += 1
                continue
            copy = backup_dir / relative
            if not copy.is_file():
                missing += 1
            elif compute_file_hash(copy) != expected:
                corrupted += 1
            else:
                verified += 1

        return BackupVerification(
            total=manifest.file_count,
            verified=verified,
            missing=missing,
            corrupted=corrupted,
        )

    def restore_backup(self, backup_id: str) -> RestoreResult:
        """Copy verified files back over the project.

        Entries whose copy is missing or no longer matches its hash are
        reported and skipped; everything else is restored.
        """
        backup_dir = self._backup_dir(backup_id)
        manifest = self._read_manifest(backup_dir)
        result = RestoreResult(backup_id=backup_id)
        logger.info(f"Restoring backup {backup_id} ({manifest.file_count} file(s))")

        for relative, expected in manifest.file_hashes.items():
            if not is_safe_relative_path(relative):
                logger.warning(f"Refusing to restore unsafe path {relative!r}")
                result.failed.append(relative)
                continue

            copy = backup_dir / relative
            if not copy.is_file():
                logger.warning(f"Backup file missing: {relative}")
                result.missing.append(relative)
                continue

            if compute_file_hash(copy) != expected:
                logger.warning(f"Hash mismatch for {relative}; not restored")
                result.mismatched.append(relative)
                continue

            try:
                target = sanitize_path(relative, self.project_root)
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(copy, target)
            except (OSError, SecurityError) as e:
                logger.error(f"Failed to restore {relative}: {e}")
                result.failed.append(relative)
                continue

            result.restored.append(relative)

        logger.info(f"Restored {len(result.restored)} file(s) from backup {backup_id}")
        return result

    # ------------------------------------------------------------------
    # Listing and deletion
    # ------------------------------------------------------------------

    def list_backups(self) -> list[BackupManifest]:
        """All readable backups, newest first."""
        if not self.backup_root.exists():
            return []

        try:
            entries = list(self.backup_root.iterdir())
        except OSError as e:
            raise BackupError(f"Cannot read backup root {self.backup_root}: {e}") from e

        backups = []
        for entry in entries:
            if not entry.is_dir() or not is_valid_backup_id(entry.name):
                continue
            try:
                backups.append(self._read_manifest(entry))
            except BackupError as e:
                logger.warning(f"Skipping unreadable backup {entry.name}: {e}")

        backups.sort(key=lambda m: (m.created_at, m.id), reverse=True)
        return backups

    def delete_backup(self, backup_id: str) -> None:
        backup_dir = self._backup_dir(backup_id)
        try:
            shutil.rmtree(backup_dir)
        except OSError as e:
            raise BackupError(f"Could not delete backup {backup_id}: {e}") from e
        logger.info(f"Deleted backup {backup_id}")
