"""S3 / MinIO storage drive."""

from typing import TYPE_CHECKING, Any, BinaryIO, Optional, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..core.exceptions import StorageIOError, with_error_handling
from ..core.logging_config import get_logger
from ..core.models import DriveEntry
from ..core.protocols import EntryVisitor

if TYPE_CHECKING:
    from mypy_boto3_s3.client import S3Client
else:
    S3Client = Any

NOT_FOUND_CODES = ("404", "NoSuchKey", "NotFound")


class S3Drive:
    """
    Stores objects under ``prefix`` in an S3 bucket.

    Drive paths map to keys ``<prefix>/<path>``. Any boto error is raised
    as ``StorageIOError`` with the original exception chained.
    """

    def __init__(
        self,
        bucket: str,
        prefix: str = "",
        client: Optional[S3Client] = None,
        **client_kwargs: Any,
    ):
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        if client is None:
            session = boto3.Session()
            client = session.client("s3", **client_kwargs)
        self._client = client
        self.logger = get_logger("imgmanager.drives.s3")

    @property
    def client(self) -> S3Client:
        """Return the underlying boto3 client."""
        return self._client

    def key_for(self, path: str) -> str:
        path = path.strip("/")
        return f"{self.prefix}/{path}" if self.prefix else path

    @with_error_handling(StorageIOError)
    def upload(self, path: str, reader: BinaryIO, size: int) -> None:
        key = self.key_for(path)
        self.logger.debug(f"Uploading to s3://{self.bucket}/{key}")
        self._client.put_object(
            Bucket=self.bucket, Key=key, Body=reader.read(), ContentLength=size
        )

    @with_error_handling(StorageIOError)
    def download(self, path: str) -> Tuple[BinaryIO, int]:
        key = self.key_for(path)
        self.logger.debug(f"Downloading from s3://{self.bucket}/{key}")
        response = self._client.get_object(Bucket=self.bucket, Key=key)
        return response["Body"], int(response["ContentLength"])

    @with_error_handling(StorageIOError)
    def delete(self, path: str) -> None:
        self._client.delete_object(Bucket=self.bucket, Key=self.key_for(path))

    @with_error_handling(StorageIOError)
    def exists(self, path: str) -> bool:
        try:
            self._client.head_object(Bucket=self.bucket, Key=self.key_for(path))
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in NOT_FOUND_CODES:
                return False
            raise

    def enumerate(self, directory: str, visit: EntryVisitor) -> None:
        list_prefix = self.key_for(directory)
        if list_prefix and not list_prefix.endswith("/"):
            list_prefix += "/"

        paginator = self._client.get_paginator("list_objects_v2")
        pages = paginator.paginate(
            Bucket=self.bucket, Prefix=list_prefix, Delimiter="/"
        )
        try:
            for page in pages:
                for obj in page.get("Contents", []):
                    name = obj["Key"][len(list_prefix) :]
                    if not name:
                        continue
                    if not visit(DriveEntry(name=name, size=int(obj["Size"]))):
                        return
        except (ClientError, BotoCoreError) as e:
            raise StorageIOError(
                f"listing s3://{self.bucket}/{list_prefix}: {e}"
            ) from e
