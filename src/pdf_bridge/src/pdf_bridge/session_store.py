"""On-disk persistence of the document store device credential."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class SessionCredential(BaseModel):
    """Durable device token, stored as ``{"deviceToken": "..."}``."""

    model_config = ConfigDict(populate_by_name=True)

    device_token: str = Field(alias="deviceToken", min_length=1)


class SessionStore:
    """Reads and writes the single credential file of a bridge deployment."""

    def __init__(self, path: Path | str) -> None:
        """Bind the store to a credential file path."""
        self.path = Path(path)

    def exists(self) -> bool:
        """Return True when a credential file is present."""
        return self.path.is_file()

    def load(self) -> SessionCredential | None:
        """Return the stored credential, or None when none was ever saved.

        Raises:
            OSError: The file exists but cannot be read.
            ValueError: The file does not hold a valid credential.

        """
        if not self.exists():
            return None
        return SessionCredential.model_validate_json(self.path.read_text(encoding="utf-8"))

    def save(self, credential: SessionCredential) -> None:
        """Replace the stored credential.

        Raises:
            OSError: The data directory or file cannot be written.

        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        tmp_path.write_text(credential.model_dump_json(by_alias=True), encoding="utf-8")
        tmp_path.replace(self.path)
