"""Surgical find-and-replace patches applied to files."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable


@dataclass
class FilePatch:
    """Replace every occurrence of ``original`` with ``replacement`` in a file."""

    file_path: Path
    original: str
    replacement: str

    def __post_init__(self) -> None:
        self.file_path = Path(self.file_path)


class PatchOutcome(Enum):
    """Kind of result produced when applying or verifying a patch."""

    SUCCESS = "success"
    FAILURE = "failure"
    FILE_NOT_FOUND = "file_not_found"
    CONTENT_MISMATCH = "content_mismatch"


@dataclass(frozen=True)
class PatchResult:
    """Outcome of a patch operation, with a message for failures."""

    outcome: PatchOutcome
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is PatchOutcome.SUCCESS


_SUCCESS = PatchResult(PatchOutcome.SUCCESS)
_NOT_FOUND = PatchResult(PatchOutcome.FILE_NOT_FOUND)
_MISMATCH = PatchResult(PatchOutcome.CONTENT_MISMATCH)


def _read(path: Path) -> str:
    with open(path, encoding="utf-8", newline="") as handle:
        return handle.read()


def _load(patch: FilePatch) -> str | PatchResult:
    """Return the file content, or the result that ends the operation."""
    if not patch.file_path.exists():
        return _NOT_FOUND
    try:
        return _read(patch.file_path)
    except (OSError, UnicodeDecodeError) as exc:
        return PatchResult(PatchOutcome.FAILURE, f"Failed to read file: {exc}")


def apply_patch(patch: FilePatch) -> PatchResult:
    """Apply a single patch, replacing all occurrences of the original text."""
    content = _load(patch)
    if isinstance(content, PatchResult):
        return content
    if patch.original not in content:
        return _MISMATCH
    try:
        with open(patch.file_path, "w", encoding="utf-8", newline="") as handle:
            handle.write(content.replace(patch.original, patch.replacement))
    except OSError as exc:
        return PatchResult(PatchOutcome.FAILURE, f"Failed to write file: {exc}")
    return _SUCCESS


def apply_patches(patches: Iterable[FilePatch]) -> list[tuple[Path, PatchResult]]:
    """Apply patches in order, pairing each file path with its result."""
    return [(patch.file_path, apply_patch(patch)) for patch in patches]


def verify_patch(patch: FilePatch) -> PatchResult:
    """Check that a patch could be applied, without changing the file."""
    content = _load(patch)
    if isinstance(content, PatchResult):
        return content
    return _SUCCESS if patch.original in content else _MISMATCH


def verify_patches(patches: Iterable[FilePatch]) -> list[tuple[Path, PatchResult]]:
    """Verify patches in order, pairing each file path with its result."""
    return [(patch.file_path, verify_patch(patch)) for patch in patches]