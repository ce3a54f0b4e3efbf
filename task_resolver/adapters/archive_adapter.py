import zipfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from task_resolver.resolution.exceptions import ExternalResourceError, FormatError


@dataclass(frozen=True)
class ArchiveListing:
    """Member names of an opened zip archive."""

    path: Path
    names: tuple[str, ...]


class ArchiveAdapter:
    """Opens zip archives and extracts single members using zipfile."""

    def open(self, path: Path) -> ArchiveListing:
        try:
            with zipfile.ZipFile(path) as archive:
                names = tuple(info.filename for info in archive.infolist() if not info.is_dir())
        except zipfile.BadZipFile as exc:
            raise FormatError(f"uploaded file is not a valid zip archive: {exc}") from exc
        except OSError as exc:
            raise ExternalResourceError(f"cannot open archive {path.name}: {exc}") from exc
        return ArchiveListing(path=path, names=names)

    def find_member(self, listing: ArchiveListing, name: str) -> str:
        """Resolve a member by exact name, then by case-insensitive basename.

        Raises:
            FormatError: if no member matches.
        """
        if name in listing.names:
            return name
        wanted = PurePosixPath(name).name.lower()
        for member in listing.names:
            if PurePosixPath(member).name.lower() == wanted:
                return member
        raise FormatError(f"archive does not contain '{name}'")

    def extract_member(self, listing: ArchiveListing, name: str, target_dir: Path) -> Path:
        """Extract one member into target_dir and return its path on disk."""
        member = self.find_member(listing, name)
        try:
            with zipfile.ZipFile(listing.path) as archive:
                extracted = archive.extract(member, path=target_dir)
        except (zipfile.BadZipFile, RuntimeError) as exc:
            raise FormatError(f"cannot extract '{member}': {exc}") from exc
        except OSError as exc:
            raise ExternalResourceError(f"cannot extract '{member}': {exc}") from exc
        return Path(extracted)
