import os
import shutil
import tarfile
from logging import getLogger
from pathlib import Path, PurePosixPath

import requests
import urllib3

from .config import InstallerSettings
from .errors import DownloadError, InstallError


logger = getLogger(__name__)

JAR_NAME = "DynamoDBLocal.jar"
LIB_DIR_NAME = "DynamoDBLocal_lib"

COPY_CHUNK_SIZE = 1024 * 1024


def _validated_member_path(name: str, dest_root: Path) -> Path:
    member_path = PurePosixPath(name)
    if member_path.is_absolute() or ".." in member_path.parts:
        raise InstallError(f"Archive member escapes install directory: {name}")
    target = (dest_root / Path(*member_path.parts)).resolve()
    if target != dest_root and dest_root not in target.parents:
        raise InstallError(f"Archive member escapes install directory: {name}")
    return target


def extract_tar_stream(fileobj, dest_dir: Path) -> int:
    """Extract a gzip-compressed tar read sequentially from ``fileobj``.

    The archive is never buffered as a whole: members are written out one by
    one as the stream is consumed. Returns the number of files written.
    """
    dest_root = Path(dest_dir).resolve()
    written = 0
    try:
        with tarfile.open(fileobj=fileobj, mode="r|gz") as tf:
            for member in tf:
                if member.islnk() or member.issym():
                    raise InstallError(
                        f"Archives containing links are not supported: {member.name}"
                    )

                target_path = _validated_member_path(member.name, dest_root)
                if member.isdir():
                    target_path.mkdir(parents=True, exist_ok=True)
                    continue
                if not member.isfile():
                    logger.debug(f"skipping special archive member {member.name}")
                    continue

                target_path.parent.mkdir(parents=True, exist_ok=True)
                source = tf.extractfile(member)
                if source is None:
                    raise InstallError(f"Could not read archive member: {member.name}")
                with source, open(target_path, "wb") as target:
                    shutil.copyfileobj(source, target, COPY_CHUNK_SIZE)
                os.chmod(target_path, member.mode & 0o777 or 0o644)
                written += 1
    except (tarfile.TarError, EOFError, OSError) as e:
        raise InstallError(f"Failed to extract DynamoDB Local archive: {e}") from e
    return written


class Installer:
    """Makes sure the emulator runtime files exist in the install directory."""

    def __init__(self, settings: InstallerSettings):
        self.settings = settings

    @property
    def jar_path(self) -> Path:
        return Path(self.settings.install_path) / JAR_NAME

    def is_installed(self) -> bool:
        try:
            return self.jar_path.is_file()
        except OSError:
            return False

    def ensure_installed(self) -> bool:
        """Install DynamoDB Local unless it is already present.

        Returns True when an archive was extracted, False when the jar was
        already in place. Every failure is raised as :class:`InstallError`.
        """
        install_path = self.settings.install_path
        logger.debug(f"Checking for DynamoDB Local in {install_path}")
        if self.is_installed():
            return False

        logger.info(f"DynamoDB Local not installed in {install_path}, installing")
        try:
            os.makedirs(install_path, exist_ok=True)
        except OSError as e:
            raise InstallError(f"Could not create install directory {install_path}: {e}") from e

        download_url = self.settings.download_url
        if os.path.isfile(download_url):
            logger.info(f"Installing from local file: {download_url}")
            try:
                archive = open(download_url, "rb")
            except OSError as e:
                raise InstallError(f"Could not open archive {download_url}: {e}") from e
            with archive:
                extract_tar_stream(archive, Path(install_path))
        else:
            self._download_and_extract(download_url, Path(install_path))

        if not self.is_installed():
            raise InstallError(f"Archive {download_url} did not contain {JAR_NAME}")

        logger.info(f"DynamoDB Local installed in {install_path}")
        return True

    def _download_and_extract(self, url: str, install_path: Path):
        logger.info(f"Downloading DynamoDB Local from {url}")
        try:
            response = requests.get(url, stream=True, allow_redirects=False)
        except requests.RequestException as e:
            raise DownloadError(f"Failed to download {url}: {e}") from e

        with response:
            if response.status_code != 200:
                location = response.headers.get("location")
                raise DownloadError(
                    f"Error getting DynamoDB Local archive {location}: {response.status_code}",
                    status_code=response.status_code,
                    location=location,
                )
            # The archive itself is gzip, transfer decoding must not touch it.
            response.raw.decode_content = False
            try:
                extract_tar_stream(response.raw, install_path)
            except (requests.RequestException, urllib3.exceptions.HTTPError) as e:
                raise DownloadError(f"Failed to download {url}: {e}") from e
