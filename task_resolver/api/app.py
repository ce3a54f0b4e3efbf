"""HTTP surface: a single multipart POST endpoint in front of the engine."""

import os
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, File, Form, UploadFile
from fastapi.responses import JSONResponse

from task_resolver.config.settings import Settings
from task_resolver.logging.logger import Log
from task_resolver.resolution.engine import ResolutionEngine, build_engine
from task_resolver.resolution.exceptions import RequestError
from task_resolver.resolution.models import UploadedFile

_CHUNK_SIZE = 1024 * 1024


class UploadTooLargeError(Exception):
    """Raised when an upload exceeds the configured size limit."""


def buffer_upload(upload: UploadFile, temp_root: Path, max_bytes: int) -> UploadedFile:
    """Copy an upload to a uniquely named file under temp_root.

    The caller owns the returned file. A partially written file is removed
    before an error propagates.
    """
    temp_root.mkdir(parents=True, exist_ok=True)
    suffix = Path(upload.filename or "").suffix
    fd, name = tempfile.mkstemp(prefix="upload-", suffix=suffix, dir=temp_root)
    path = Path(name)
    written = 0
    try:
        with os.fdopen(fd, "wb") as out:
            while True:
                chunk = upload.file.read(_CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_bytes:
                    raise UploadTooLargeError(f"upload exceeds {max_bytes} bytes")
                out.write(chunk)
    except BaseException:
        path.unlink(missing_ok=True)
        raise
    return UploadedFile(
        path=path,
        filename=upload.filename or "",
        content_type=upload.content_type or "",
    )


def _error(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"answer": f"Error: {message}"})


def create_app(settings: Settings, engine: ResolutionEngine | None = None) -> FastAPI:
    """Build the FastAPI application around a resolution engine."""
    resolver = engine if engine is not None else build_engine(settings)
    temp_root = Path(settings.temp_dir)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        resolver.close()

    app = FastAPI(title="Task Resolver", lifespan=lifespan)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/")
    def answer_question(
        question: str | None = Form(default=None),
        file: UploadFile | None = File(default=None),
    ) -> JSONResponse:
        uploaded: UploadedFile | None = None
        if file is not None and file.filename:
            try:
                uploaded = buffer_upload(file, temp_root, settings.max_upload_bytes)
            except UploadTooLargeError as exc:
                Log.warning(f"Rejected upload {file.filename}: {exc}")
                return _error(str(exc))
            finally:
                file.file.close()

        try:
            resolution = resolver.resolve(question, uploaded)
        except RequestError as exc:
            return _error(str(exc))
        except Exception as exc:
            Log.exception(f"Unexpected failure resolving question: {exc}")
            return _error(str(exc))

        if not resolution.succeeded:
            return JSONResponse(status_code=500, content={"answer": resolution.answer})
        return JSONResponse(status_code=200, content={"answer": resolution.answer})

    return app
