"""Release scope for the uploaded file and temporary artifacts of one request."""

import os
import shutil
import tempfile
from pathlib import Path
from types import TracebackType

from task_resolver.logging.logger import Log
from task_resolver.resolution.models import UploadedFile


class ArtifactScope:
    """Tracks every path a request creates and removes them all on exit.

    Paths are registered before they are handed out, so a handler that raises
    right after creating an artifact still has it removed. Release errors are
    logged and swallowed; they never replace the request's own outcome.
    """

    def __init__(self, root: Path | None = None, request_id: str = "") -> None:
        self._root = root if root is not None else Path(tempfile.gettempdir())
        self._request_id = request_id
        self._paths: list[Path] = []
        self._closed = False

    @property
    def paths(self) -> tuple[Path, ...]:
        return tuple(self._paths)

    def track(self, path: Path) -> Path:
        """Register an existing path for removal when the scope closes."""
        if self._closed:
            raise RuntimeError("artifact scope is already released")
        self._paths.append(path)
        return path

    def adopt(self, uploaded: UploadedFile) -> UploadedFile:
        """Take ownership of an uploaded file for the rest of the request."""
        self.track(uploaded.path)
        return uploaded

    def make_dir(self, prefix: str = "artifact-") -> Path:
        """Create a uniquely named directory under the scope root."""
        self._root.mkdir(parents=True, exist_ok=True)
        return self.track(Path(tempfile.mkdtemp(prefix=prefix, dir=self._root)))

    def make_file(self, suffix: str = "", prefix: str = "artifact-") -> Path:
        """Create a uniquely named empty file under the scope root."""
        self._root.mkdir(parents=True, exist_ok=True)
        fd, name = tempfile.mkstemp(suffix=suffix, prefix=prefix, dir=self._root)
        os.close(fd)
        return self.track(Path(name))

    def release(self) -> None:
        """Remove tracked paths, newest first."""
        self._closed = True
        while self._paths:
            path = self._paths.pop()
            try:
                if path.is_dir() and not path.is_symlink():
                    shutil.rmtree(path)
                else:
                    path.unlink(missing_ok=True)
            except OSError as exc:
                Log.warning(
                    f"Failed to release artifact {path}: {exc}",
                    request_id=self._request_id,
                )

    def __enter__(self) -> "ArtifactScope":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()
