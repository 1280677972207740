from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

ALLOWED_EXTENSIONS = (".pdf", ".docx", ".txt")
MAX_FILE_BYTES = 10 * 1024 * 1024


@dataclass(frozen=True)
class FileValidation:
    valid: bool
    reason: str | None = None


def validate_file(path: str | Path, *, max_bytes: int = MAX_FILE_BYTES) -> FileValidation:
    file_path = Path(path)
    if file_path.suffix.lower() not in ALLOWED_EXTENSIONS:
        allowed = ", ".join(ext.lstrip(".").upper() for ext in ALLOWED_EXTENSIONS)
        return FileValidation(False, f"Unsupported file type. Allowed: {allowed}")
    if not file_path.is_file():
        return FileValidation(False, f"File not found: {file_path}")
    size = file_path.stat().st_size
    if size == 0:
        return FileValidation(False, "File is empty")
    if size > max_bytes:
        return FileValidation(False, f"File is too large ({size // 1024} KB, max {max_bytes // 1024} KB)")
    return FileValidation(True)
