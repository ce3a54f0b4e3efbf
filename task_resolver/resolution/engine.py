import uuid
from collections.abc import Mapping
from pathlib import Path

from task_resolver.adapters.factory import AdapterFactory, Adapters
from task_resolver.config.settings import Settings
from task_resolver.logging.logger import Log
from task_resolver.resolution.classifier import TaskClassifier
from task_resolver.resolution.exceptions import (
    InputError,
    ParameterError,
    RequestError,
    TaskError,
)
from task_resolver.resolution.extractor import ParameterExtractor
from task_resolver.resolution.handlers import HandlerContext, TaskHandler, default_handlers
from task_resolver.resolution.models import Resolution, TaskKind, UploadedFile
from task_resolver.resolution.scope import ArtifactScope

NO_ANSWER = "No answer found"


class ResolutionEngine:
    """Resolves one question into one answer.

    Pipeline: classify -> extract -> check required inputs -> handle.
    The uploaded file and every artifact a handler creates live in a single
    ArtifactScope that is released on every exit path.
    """

    def __init__(
        self,
        classifier: TaskClassifier,
        extractor: ParameterExtractor,
        handlers: Mapping[TaskKind, TaskHandler],
        adapters: Adapters,
        temp_root: Path | None = None,
    ) -> None:
        self._classifier = classifier
        self._extractor = extractor
        self._handlers = dict(handlers)
        self._adapters = adapters
        self._temp_root = temp_root

    def resolve(self, question: str | None, file: UploadedFile | None = None) -> Resolution:
        """Answer a question, optionally using an uploaded file.

        Raises:
            RequestError: if the question is missing or blank. The uploaded
                file is still released.
        """
        request_id = uuid.uuid4().hex[:12]
        with ArtifactScope(root=self._temp_root, request_id=request_id) as scope:
            if file is not None:
                scope.adopt(file)
            if question is None or not question.strip():
                raise RequestError("question is required")

            kind = self._classifier.classify(question)
            Log.info(f"Classified question as {kind.value}", request_id=request_id)

            params = self._extractor.extract(question, kind)
            Log.debug(f"Extracted parameters {params!r}", request_id=request_id)

            handler = self._handlers.get(kind) or self._handlers[TaskKind.UNSUPPORTED]
            missing = params.missing(self._extractor.required_for(kind))
            try:
                self._check_inputs(kind, handler, missing, file)
                answer = handler.handle(
                    HandlerContext(
                        params=params,
                        adapters=self._adapters,
                        scope=scope,
                        file=file,
                        request_id=request_id,
                    )
                )
            except TaskError as exc:
                Log.warning(
                    f"Resolution failed: {type(exc).__name__}: {exc}",
                    request_id=request_id,
                    kind=kind.value,
                )
                return Resolution(answer=f"Error: {exc}", kind=kind, error=exc)

        Log.info("Resolution completed", request_id=request_id, kind=kind.value)
        return Resolution(answer=answer or NO_ANSWER, kind=kind)

    def _check_inputs(
        self,
        kind: TaskKind,
        handler: TaskHandler,
        missing: list[str],
        file: UploadedFile | None,
    ) -> None:
        if missing:
            raise ParameterError(
                f"missing required parameter(s) for {kind.value}: {', '.join(missing)}"
            )
        if handler.requires_file and file is None:
            raise InputError(f"{kind.value} requires an uploaded file")

    def close(self) -> None:
        self._adapters.close()


def build_engine(settings: Settings, adapters: Adapters | None = None) -> ResolutionEngine:
    """Build a ResolutionEngine with the default rules, schemas and handlers."""
    return ResolutionEngine(
        classifier=TaskClassifier(),
        extractor=ParameterExtractor(),
        handlers=default_handlers(),
        adapters=adapters if adapters is not None else AdapterFactory.create(settings),
        temp_root=Path(settings.temp_dir),
    )
