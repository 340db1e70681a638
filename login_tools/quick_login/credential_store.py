#!/usr/bin/env python3
"""
Credential Storage for Quick Login

All credentials live under one top-level key of a persisted JSON document:

    {"credentialsByInstance": {"<instance key>": [{"username": ..., "secret": ...}]}}

The store never keeps a copy between calls. The CLI and the page injector
may run in different threads or processes and only see each other's
changes through the backend.
"""

import copy
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Sequence

from .exceptions import BackendUnavailableError, CredentialError

logger = logging.getLogger(__name__)

STORAGE_KEY = 'credentialsByInstance'

class CredentialRecord(NamedTuple):
    """A saved username/secret pair"""
    username: str
    secret: str

    def to_dict(self) -> Dict[str, str]:
        return {'username': self.username, 'secret': self.secret}

    @classmethod
    def from_dict(cls, data: Any) -> Optional['CredentialRecord']:
        """Build a record from stored data, None if the entry is malformed"""
        if not isinstance(data, Mapping):
            return None
        username = data.get('username')
        secret = data.get('secret')
        if not isinstance(username, str) or not isinstance(secret, str):
            return None
        return cls(username, secret)

class StorageBackend(ABC):
    """Key-value persistence the credential store is built on"""

    @abstractmethod
    def read(self, default: Dict[str, Any]) -> Dict[str, Any]:
        """
        Read the persisted document

        Args:
            default: Shape returned when nothing has been persisted yet

        Raises:
            BackendUnavailableError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def write(self, value: Dict[str, Any]) -> None:
        """
        Persist the whole document

        Raises:
            BackendUnavailableError: If the backend cannot be written
        """
        pass

class JsonFileBackend(StorageBackend):
    """Stores the document as a JSON file, replaced atomically on every write"""

    def __init__(self, path: Path):
        self.path = Path(path)

    def read(self, default: Dict[str, Any]) -> Dict[str, Any]:
        try:
            if not self.path.exists():
                return copy.deepcopy(default)
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise BackendUnavailableError(f"Cannot read {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise BackendUnavailableError(f"Unexpected document in {self.path}")
        merged = copy.deepcopy(default)
        merged.update(data)
        return merged

    def write(self, value: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix='.credentials-', suffix='.json',
                                            dir=str(self.path.parent))
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(value, f, indent=2, ensure_ascii=False)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except (OSError, TypeError, ValueError) as e:
            raise BackendUnavailableError(f"Cannot write {self.path}: {e}") from e

class MemoryBackend(StorageBackend):
    """In-process backend holding a serialized copy of the document"""

    def __init__(self, initial: Dict[str, Any] = None):
        self._data = json.dumps(initial or {})
        self.available = True

    def read(self, default: Dict[str, Any]) -> Dict[str, Any]:
        if not self.available:
            raise BackendUnavailableError("Memory backend marked unavailable")
        merged = copy.deepcopy(default)
        merged.update(json.loads(self._data))
        return merged

    def write(self, value: Dict[str, Any]) -> None:
        if not self.available:
            raise BackendUnavailableError("Memory backend marked unavailable")
        self._data = json.dumps(value)

class CredentialStore:
    """Per-instance ordered credential lists on top of a storage backend"""

    def __init__(self, backend: StorageBackend):
        self.backend = backend

    def _read_all(self) -> Dict[str, Any]:
        data = self.backend.read({STORAGE_KEY: {}})
        by_instance = data.get(STORAGE_KEY)
        if not isinstance(by_instance, dict):
            logger.warning(f"Ignoring malformed '{STORAGE_KEY}' entry in credential store")
            by_instance = {}
        data[STORAGE_KEY] = by_instance
        return data

    def get(self, key: str) -> List[CredentialRecord]:
        """
        Get the credentials saved for an instance

        Returns an empty list when the instance has none or the backend is
        unavailable. Malformed entries are skipped.
        """
        try:
            data = self._read_all()
        except BackendUnavailableError as e:
            logger.warning(f"Credential store unavailable, treating as empty: {e}")
            return []

        entries = data[STORAGE_KEY].get(key) or []
        if not isinstance(entries, list):
            logger.warning(f"Ignoring malformed credential list for {key}")
            return []

        records = []
        for position, entry in enumerate(entries):
            record = CredentialRecord.from_dict(entry)
            if record is None:
                logger.warning(f"Skipping malformed credential #{position} for {key}")
                continue
            records.append(record)
        return records

    @staticmethod
    def _coerce(record: Any) -> CredentialRecord:
        if isinstance(record, CredentialRecord):
            return record
        coerced = CredentialRecord.from_dict(record)
        if coerced is None:
            raise CredentialError(f"Not a credential record: {record!r}")
        return coerced

    def put(self, key: str, records: Sequence[CredentialRecord]) -> bool:
        """
        Replace the whole credential list of an instance

        Records may be ``CredentialRecord`` or ``{"username", "secret"}``
        mappings.

        Returns:
            True if written, False if the backend dropped the write

        Raises:
            CredentialError: If an entry is neither of the accepted shapes
        """
        entries = [self._coerce(record).to_dict() for record in records]
        try:
            data = self._read_all()
            data[STORAGE_KEY][key] = entries
            self.backend.write(data)
            logger.debug(f"Saved {len(entries)} credential(s) for {key}")
            return True
        except BackendUnavailableError as e:
            logger.warning(f"Credential store unavailable, dropping write for {key}: {e}")
            return False

    def add(self, key: str, record: CredentialRecord) -> Optional[List[CredentialRecord]]:
        """Append a record (read-modify-write); the new list, or None if the write was dropped"""
        records = self.get(key)
        records.append(self._coerce(record))
        if not self.put(key, records):
            return None
        return records

    def remove(self, key: str, position: int) -> Optional[List[CredentialRecord]]:
        """
        Remove the record at position (read-modify-write)

        Returns the new list, the unchanged list when position is out of
        range, or None if the write was dropped.
        """
        records = self.get(key)
        if not 0 <= position < len(records):
            logger.warning(f"No credential at position {position} for {key}")
            return records
        del records[position]
        if not self.put(key, records):
            return None
        return records

    def instance_keys(self) -> List[str]:
        """List the instance keys that have a stored credential list"""
        try:
            return sorted(self._read_all()[STORAGE_KEY].keys())
        except BackendUnavailableError as e:
            logger.warning(f"Credential store unavailable: {e}")
            return []
