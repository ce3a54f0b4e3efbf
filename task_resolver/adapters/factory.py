from dataclasses import dataclass, field

from task_resolver.adapters.archive_adapter import ArchiveAdapter
from task_resolver.adapters.command_adapter import CommandAdapter
from task_resolver.adapters.encoding_adapter import EncodingAdapter
from task_resolver.adapters.html_adapter import HtmlAdapter
from task_resolver.adapters.http_adapter import HttpFetchAdapter
from task_resolver.adapters.json_adapter import JsonAdapter
from task_resolver.adapters.sqlite_adapter import SqliteAdapter
from task_resolver.adapters.tabular_adapter import TabularAdapter
from task_resolver.config.settings import Settings


@dataclass
class Adapters:
    """Every extraction capability a handler may call."""

    http: HttpFetchAdapter
    command: CommandAdapter
    archive: ArchiveAdapter = field(default_factory=ArchiveAdapter)
    tabular: TabularAdapter = field(default_factory=TabularAdapter)
    json: JsonAdapter = field(default_factory=JsonAdapter)
    encoding: EncodingAdapter = field(default_factory=EncodingAdapter)
    html: HtmlAdapter = field(default_factory=HtmlAdapter)
    sqlite: SqliteAdapter = field(default_factory=SqliteAdapter)

    def close(self) -> None:
        self.http.close()


class AdapterFactory:
    """Creates the adapter bundle from settings."""

    @classmethod
    def create(cls, settings: Settings) -> Adapters:
        return Adapters(
            http=HttpFetchAdapter(
                timeout_seconds=settings.adapter_timeout_seconds,
                user_agent=settings.http_user_agent,
            ),
            command=CommandAdapter(
                allowed_commands=settings.allowed_commands,
                timeout_seconds=settings.adapter_timeout_seconds,
            ),
        )
