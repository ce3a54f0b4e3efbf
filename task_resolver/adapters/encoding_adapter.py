import codecs

from task_resolver.resolution.exceptions import FormatError, ParameterError


class EncodingAdapter:
    """Decodes raw bytes using a named character encoding."""

    def decode(self, data: bytes, encoding: str) -> str:
        """Decode bytes strictly.

        Raises:
            ParameterError: if the encoding name is not recognized.
            FormatError: if the bytes are not valid in that encoding.
        """
        try:
            codec = codecs.lookup(encoding)
        except LookupError as exc:
            raise ParameterError(f"unsupported encoding '{encoding}'") from exc
        try:
            return data.decode(codec.name)
        except LookupError as exc:
            raise ParameterError(f"'{encoding}' is not a text encoding") from exc
        except UnicodeDecodeError as exc:
            raise FormatError(f"file is not valid {codec.name}: {exc}") from exc
