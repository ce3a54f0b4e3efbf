import json

from task_resolver.resolution.exceptions import FormatError


class JsonAdapter:
    """Parses and renders JSON documents."""

    def parse(self, content: str | bytes) -> object:
        try:
            return json.loads(content)
        except ValueError as exc:
            # JSONDecodeError, UnicodeDecodeError and the int digit limit
            raise FormatError(f"file is not valid JSON: {exc}") from exc
        except RecursionError as exc:
            raise FormatError("JSON document is nested too deeply") from exc

    def dumps(self, value: object) -> str:
        return json.dumps(value, ensure_ascii=False)
