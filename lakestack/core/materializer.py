# Copyright 2026 Pramod Kumar Voola
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

# -----------------------------------------------------------------------------
# THE MATERIALIZER - LAYOUT PLAN -> FILESYSTEM
# -----------------------------------------------------------------------------
# Responsibility: Write a LayoutPlan under a root directory.
#
# Rules:
# - One invocation per root at a time (advisory lock file beside the root)
# - Destructive reset: an existing root is deleted and recreated
# - Each file is written to a temp sibling and renamed into place, then
#   read back and compared; a mismatch is ArtifactWriteFailed
# - Fail fast: the first failure propagates, nothing is rolled back
# -----------------------------------------------------------------------------

import os
import shutil
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

from rich.console import Console

from lakestack.domain.models import ArtifactCategory, LayoutPlan

console = Console()

SCRIPT_MODE = 0o755


class ArtifactWriteFailed(Exception):
    """Raised when an artifact cannot be written or does not verify after writing."""

    def __init__(self, path: str, reason: str = "") -> None:
        message = f"Failed to write artifact: {path}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.path = path
        self.reason = reason


class StructureCreationFailed(Exception):
    """Raised when the root or one of the plan's directories cannot be created."""

    def __init__(self, path: str, reason: str = "") -> None:
        super().__init__(f"Failed to create directory: {path}" + (f" ({reason})" if reason else ""))
        self.path = path


class WorkspaceLocked(Exception):
    """Raised when another invocation holds the lock for the same root."""

    def __init__(self, lock_path: Path) -> None:
        super().__init__(
            f"Workspace is locked by another run: {lock_path} "
            "(remove the file if no other run is active)"
        )
        self.lock_path = lock_path


@dataclass
class MaterializeResult:
    """What materialize() did."""

    root: Path
    written: list[str] = field(default_factory=list)
    reset: bool = False


def lock_path_for(root: Path) -> Path:
    """The lock lives beside the root, since the root itself gets destroyed."""
    root = Path(root).absolute()
    return root.parent / f".{root.name}.lock"


@contextmanager
def workspace_lock(root: Path):
    """
    Hold an exclusive advisory lock on `root` for the duration of the block.

    Raises:
        WorkspaceLocked: If the lock file already exists.
        StructureCreationFailed: If the parent directory cannot be created.
    """
    lock_path = lock_path_for(root)
    try:
        lock_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StructureCreationFailed(str(lock_path.parent), str(e))
    try:
        fd = os.open(lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
    except FileExistsError:
        console.print(f"[red][MATERIALIZER] Workspace locked: {lock_path}[/red]")
        raise WorkspaceLocked(lock_path)

    try:
        os.write(fd, str(os.getpid()).encode())
    finally:
        os.close(fd)

    try:
        yield lock_path
    finally:
        lock_path.unlink(missing_ok=True)


def _check_reset_target(root: Path) -> None:
    resolved = root.resolve()
    protected = {Path(resolved.anchor), Path.home().resolve(), Path.cwd().resolve()}
    if resolved in protected:
        raise StructureCreationFailed(str(root), "refusing to reset a protected directory")


def remove_work_dir(root: Path) -> bool:
    """
    Delete `root` if it exists.

    Returns:
        True if something was removed, False if there was nothing to remove.
    """
    root = Path(root)
    if not root.exists() and not root.is_symlink():
        return False

    _check_reset_target(root)
    console.print(f"[yellow][MATERIALIZER] Destroying existing directory: {root}[/yellow]")
    if root.is_dir() and not root.is_symlink():
        shutil.rmtree(root)
    else:
        root.unlink()
    return True


def _write_artifact(root: Path, relative_path: str, content: str, executable: bool) -> None:
    target = root / relative_path
    temp = target.with_name(f".{target.name}.tmp")
    data = content.encode("utf-8")

    try:
        temp.write_bytes(data)
        if executable:
            temp.chmod(SCRIPT_MODE)
        os.replace(temp, target)
    except OSError as e:
        try:
            temp.unlink(missing_ok=True)
        except OSError:
            console.print(f"[dim][MATERIALIZER] Could not remove temp file {temp}[/dim]")
        raise ArtifactWriteFailed(relative_path, str(e))

    if not target.is_file():
        raise ArtifactWriteFailed(relative_path, "file missing after write")
    if target.read_bytes() != data:
        raise ArtifactWriteFailed(relative_path, "content mismatch after write")


def materialize(plan: LayoutPlan, root_dir: Path | str) -> MaterializeResult:
    """
    Realize a LayoutPlan under `root_dir`.

    Args:
        plan: Artifacts and directories from the Layout Planner.
        root_dir: Output root. Destroyed and recreated if it already exists.

    Returns:
        MaterializeResult listing the written paths.

    Raises:
        WorkspaceLocked: Another run holds the root.
        StructureCreationFailed: The root or a directory could not be created.
        ArtifactWriteFailed: A file could not be written or verified.
    """
    root = Path(root_dir)
    result = MaterializeResult(root=root)

    with workspace_lock(root):
        result.reset = remove_work_dir(root)

        console.print(f"[cyan][MATERIALIZER] Creating structure under {root}[/cyan]")
        for directory in (".", *plan.directories):
            try:
                (root / directory).mkdir(parents=True, exist_ok=True)
            except OSError as e:
                console.print(f"[red][MATERIALIZER] Cannot create {directory}: {e}[/red]")
                raise StructureCreationFailed(directory, str(e))

        for artifact in plan.artifacts:
            _write_artifact(
                root,
                artifact.relative_path,
                artifact.content,
                executable=artifact.kind == ArtifactCategory.SCRIPT,
            )
            result.written.append(artifact.relative_path)
            console.print(f"[dim][MATERIALIZER] wrote {artifact.relative_path}[/dim]")

    console.print(f"[green][MATERIALIZER] {len(result.written)} artifacts written to {root}[/green]")
    return result
