"""
Fetch pipeline: find folder, list candidates, select latest, download, extract.

Each stage runs once, in order. A failure in any stage is re-raised with the
stage name attached so the caller can report where the run stopped.
"""

from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from artifact_fetch.archive.extractor import ProgressCallback, extract_archive
from artifact_fetch.google_drive.client import GoogleDriveClient
from artifact_fetch.models import FetchResult, Options
from artifact_fetch.selector import select_latest
from artifact_fetch.utils.errors import ArtifactFetchError, InvalidOptionsError
from artifact_fetch.utils.logging import LogContext, get_logger

logger = get_logger(__name__)

# Stage names, in execution order
VALIDATE_OPTIONS = "validate options"
AUTHENTICATE = "authenticate"
FIND_FOLDER = "find folder"
LIST_CANDIDATES = "list files"
SELECT_LATEST = "select latest"
DOWNLOAD = "download artifact"
EXTRACT = "unzip artifact"


@contextmanager
def stage(name: str) -> Iterator[None]:
    """Run a block as a named stage, tagging logs and errors with the name."""
    with LogContext(stage=name):
        logger.info(f"{name} ...")
        try:
            yield
        except ArtifactFetchError as e:
            e.details.setdefault("stage", name)
            raise


def validate_options(options: Options) -> None:
    """
    Check that all required options are present.

    Raises:
        InvalidOptionsError: If any required option is empty
    """
    with stage(VALIDATE_OPTIONS):
        missing = options.missing_fields()
        if missing:
            raise InvalidOptionsError(missing)


class ArtifactFetcher:
    """Locate, download and unpack the newest artifact for a version."""

    def __init__(self, client: GoogleDriveClient) -> None:
        self.client = client

    def fetch(
        self,
        options: Options,
        download_progress: Optional[Callable[[float], None]] = None,
        extract_progress: Optional[ProgressCallback] = None,
    ) -> FetchResult:
        """
        Run every stage after authentication for the given options.

        Args:
            options: Validated options
            download_progress: Optional callback receiving download percent
            extract_progress: Optional callback receiving extraction progress

        Returns:
            Details of the extracted artifact

        Raises:
            ArtifactFetchError: From the first stage that fails
        """
        with stage(FIND_FOLDER):
            folder_id = self.client.find_folder(options.application)

        with stage(LIST_CANDIDATES):
            candidates = self.client.list_files(options.artifact_name, folder_id)

        with stage(SELECT_LATEST):
            artifact = select_latest(candidates)

        with stage(DOWNLOAD):
            data = self.client.download(artifact.id, progress_callback=download_progress)

        with stage(EXTRACT):
            extracted = extract_archive(
                data,
                options.destination_path,
                progress_callback=extract_progress,
            )

        return FetchResult(
            artifact=artifact,
            destination=options.destination_path,
            size_bytes=len(data),
            extracted=extracted,
        )
