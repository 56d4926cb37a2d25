"""
Ledger state persistence
Stores the full ledger state as a single JSON document

Writes are atomic (temp file then rename) so a crash mid-save leaves
the previous committed state on disk.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from medledger.exceptions import StorageError


logger = logging.getLogger(__name__)


class StateStoreDefaults:
    """Default values for state store operations"""
    VERSION = 1
    FILE_PERMISSIONS = 0o600


class StateStore:
    """
    JSON file holding the committed ledger state

    Example:
        >>> store = StateStore('./data/ledger-state.json')
        >>> store.save(ledger_state.to_dict())
        >>> data = store.load()
    """

    def __init__(self, path: Union[str, Path]) -> None:
        """
        Raises:
            StorageError: If path is empty
        """
        if not path:
            raise StorageError("State store path is required", code="STORE01")
        self._path = Path(path).resolve()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> Optional[Dict[str, Any]]:
        """
        Load the stored state

        Returns:
            The state document without its version field, or None when
            nothing has been saved yet

        Raises:
            StorageError: If the file cannot be read, is not valid JSON,
                or has an unsupported version
        """
        if not self._path.exists():
            return None

        try:
            data = json.loads(self._path.read_text("utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(
                f"Failed to load ledger state: {str(e)}",
                code="STORE02",
                cause=e,
            ) from e

        version = data.pop("version", None) if isinstance(data, dict) else None
        if version != StateStoreDefaults.VERSION:
            raise StorageError(
                f"Unsupported ledger state version: {version}",
                code="STORE03",
            )

        return data

    def save(self, state: Dict[str, Any]) -> None:
        """
        Save the state document

        Raises:
            StorageError: If save fails
        """
        document = {"version": StateStoreDefaults.VERSION, **state}

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)

            temp_path = self._path.with_suffix(".tmp")
            temp_path.write_text(json.dumps(document, indent=2), "utf-8")
            os.chmod(temp_path, StateStoreDefaults.FILE_PERMISSIONS)
            temp_path.replace(self._path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(
                f"Failed to save ledger state: {str(e)}",
                code="STORE04",
                cause=e,
            ) from e

        logger.debug(f"Saved ledger state to {self._path}")

    def delete(self) -> bool:
        """
        Remove the state file

        Returns:
            True if a file was deleted, False if none existed
        """
        if not self._path.exists():
            return False
        self._path.unlink()
        return True
