"""Platform credential storage in the OS keychain via keyring."""

from __future__ import annotations

import json
import secrets
import threading
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import keyring
from pydantic import BaseModel

from .options import b64url_encode


class CredentialStoreError(RuntimeError):
    pass


class PlatformCredential(BaseModel):
    credential_id: str
    user_handle: str
    rp_id: str
    algorithm: int
    public_key: str
    private_key: str
    sign_count: int = 0

    @classmethod
    def new(
        cls,
        user_handle: str,
        rp_id: str,
        algorithm: int,
        public_key: bytes,
        private_key: bytes,
    ) -> "PlatformCredential":
        return cls(
            credential_id=b64url_encode(secrets.token_bytes(32)),
            user_handle=user_handle,
            rp_id=rp_id,
            algorithm=algorithm,
            public_key=b64url_encode(public_key),
            private_key=b64url_encode(private_key),
        )


class CredentialStore:
    """Secrets live in the keychain; a JSON index maps ids to relying parties.

    The keychain cannot be enumerated portably, hence the index file.
    """

    def __init__(self, service: str, index_path: str) -> None:
        self.service = service
        self.index_path = Path(index_path).expanduser()
        self._lock = threading.Lock()

    def _read_index(self) -> Dict[str, Dict[str, str]]:
        if not self.index_path.exists():
            return {}
        return json.loads(self.index_path.read_text())

    def _write_index(self, index: Dict[str, Dict[str, str]]) -> None:
        self.index_path.parent.mkdir(parents=True, exist_ok=True)
        self.index_path.write_text(json.dumps(index, indent=2))

    def save(self, credential: PlatformCredential) -> PlatformCredential:
        keyring.set_password(self.service, credential.credential_id, credential.model_dump_json())
        with self._lock:
            index = self._read_index()
            index[credential.credential_id] = {
                "rp_id": credential.rp_id,
                "user_handle": credential.user_handle,
            }
            self._write_index(index)
        return credential

    def delete(self, credential_id: str) -> None:
        keyring.delete_password(self.service, credential_id)
        with self._lock:
            index = self._read_index()
            if index.pop(credential_id, None) is not None:
                self._write_index(index)

    def load(self, credential_id: str) -> PlatformCredential:
        serialized = keyring.get_password(self.service, credential_id)
        if serialized is None:
            raise CredentialStoreError(f"Credential {credential_id} not found")
        return PlatformCredential.model_validate_json(serialized)

    def find_first(self, credential_ids: Iterable[str]) -> Optional[PlatformCredential]:
        for credential_id in credential_ids:
            try:
                return self.load(credential_id)
            except CredentialStoreError:
                continue
        return None

    def find_by_rp(self, rp_id: str) -> List[PlatformCredential]:
        return [
            self.load(credential_id)
            for credential_id, meta in self._read_index().items()
            if meta.get("rp_id") == rp_id
        ]
