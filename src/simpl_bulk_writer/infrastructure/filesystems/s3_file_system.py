"""S3-backed file system with streaming multipart uploads."""

from __future__ import annotations

import io
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Protocol, cast
from urllib.parse import urlparse

from simpl_bulk_writer.domain.errors import UnsupportedFileSystemError
from simpl_bulk_writer.domain.ports import FileSystemFacade, WritableSink

_MIN_MULTIPART_SIZE_MB = 5
_DEFAULT_MULTIPART_PART_SIZE_MB = 8
_DELETE_BATCH_SIZE = 1000
_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})

logger = logging.getLogger(__name__)


class S3Client(Protocol):
    """Subset of S3 client operations used by the file system."""

    def head_object(self, *, Bucket: str, Key: str) -> dict[str, Any]:
        """Return object metadata."""

    def list_objects_v2(self, **kwargs: Any) -> dict[str, Any]:
        """List one page of keys."""

    def delete_objects(self, *, Bucket: str, Delete: dict[str, Any]) -> dict[str, Any]:
        """Delete up to 1000 keys."""

    def put_object(self, *, Bucket: str, Key: str, Body: bytes) -> dict[str, Any]:
        """Upload an object in one request."""

    def create_multipart_upload(self, *, Bucket: str, Key: str) -> dict[str, Any]:
        """Start multipart upload."""

    def upload_part(
        self,
        *,
        Bucket: str,
        Key: str,
        UploadId: str,
        PartNumber: int,
        Body: bytes,
    ) -> dict[str, Any]:
        """Upload one multipart segment."""

    def complete_multipart_upload(
        self,
        *,
        Bucket: str,
        Key: str,
        UploadId: str,
        MultipartUpload: dict[str, list[dict[str, str | int]]],
    ) -> dict[str, Any]:
        """Finalize multipart upload."""

    def abort_multipart_upload(self, *, Bucket: str, Key: str, UploadId: str) -> dict[str, Any]:
        """Abort multipart upload."""

    def close(self) -> None:
        """Close underlying HTTP connections."""


class _S3MultipartSink(io.RawIOBase):
    """Stream bytes to one S3 object.

    Small objects are sent with a single `put_object` on close. Once the
    buffer reaches the part size a multipart upload is started and full
    parts are uploaded as they fill; close uploads the tail and completes.
    """

    def __init__(self, client: S3Client, bucket: str, key: str, part_size_bytes: int) -> None:
        super().__init__()
        self._client = client
        self._bucket = bucket
        self._key = key
        self._part_size_bytes = part_size_bytes
        self._buffer = bytearray()
        self._upload_id: str | None = None
        self._parts: list[dict[str, str | int]] = []
        self._aborted = False
        self._position = 0

    def tell(self) -> int:
        return self._position

    def writable(self) -> bool:
        return True

    def write(self, data: Any) -> int:
        if self.closed:
            raise ValueError(f"Sink for s3://{self._bucket}/{self._key} is closed.")
        chunk = bytes(data)
        self._position += len(chunk)
        self._buffer.extend(chunk)
        while len(self._buffer) >= self._part_size_bytes:
            self._upload_part(bytes(self._buffer[: self._part_size_bytes]))
            del self._buffer[: self._part_size_bytes]
        return len(chunk)

    def close(self) -> None:
        if self.closed:
            return
        try:
            if not self._aborted:
                self._finalize()
        finally:
            super().close()

    def abort(self) -> None:
        if self.closed:
            return
        self._aborted = True
        try:
            if self._upload_id is not None:
                self._client.abort_multipart_upload(
                    Bucket=self._bucket,
                    Key=self._key,
                    UploadId=self._upload_id,
                )
        finally:
            self._buffer.clear()
            super().close()

    def _finalize(self) -> None:
        if self._upload_id is None:
            self._client.put_object(Bucket=self._bucket, Key=self._key, Body=bytes(self._buffer))
            self._buffer.clear()
            return

        if self._buffer:
            self._upload_part(bytes(self._buffer))
            self._buffer.clear()
        self._client.complete_multipart_upload(
            Bucket=self._bucket,
            Key=self._key,
            UploadId=self._upload_id,
            MultipartUpload={"Parts": self._parts},
        )

    def _upload_part(self, body: bytes) -> None:
        if self._upload_id is None:
            response = self._client.create_multipart_upload(Bucket=self._bucket, Key=self._key)
            upload_id = response.get("UploadId")
            if not isinstance(upload_id, str) or not upload_id:
                raise RuntimeError("create_multipart_upload did not return UploadId")
            self._upload_id = upload_id

        part_number = len(self._parts) + 1
        response = self._client.upload_part(
            Bucket=self._bucket,
            Key=self._key,
            UploadId=self._upload_id,
            PartNumber=part_number,
            Body=body,
        )
        etag = response.get("ETag")
        if not isinstance(etag, str) or not etag:
            raise RuntimeError("upload_part did not return ETag")
        self._parts.append({"PartNumber": part_number, "ETag": etag})


class S3FileSystem(FileSystemFacade):
    """File system facade over one S3 bucket.

    ``s3://bucket`` is the default file system URI; the absolute path
    ``/out/day1__x`` maps to the key ``out/day1__x``. Directories are key
    prefixes, so a directory exists once any key lives under it.
    """

    def __init__(
        self,
        uri: str,
        client: S3Client,
        multipart_part_size_mb: int = _DEFAULT_MULTIPART_PART_SIZE_MB,
    ) -> None:
        parsed = urlparse(uri)
        if parsed.scheme.lower() != "s3" or not parsed.netloc:
            raise UnsupportedFileSystemError(
                f"Unsupported default file system '{uri}', expected s3://bucket."
            )
        self._bucket = parsed.netloc
        self._uri = f"s3://{self._bucket}"
        self._client = client
        part_size_mb = max(_MIN_MULTIPART_SIZE_MB, multipart_part_size_mb)
        self._part_size_bytes = part_size_mb * 1024 * 1024
        self._directory_identifiers: set[str] = set()

    @property
    def uri(self) -> str:
        return self._uri

    def exists(self, path: str) -> bool:
        key = path.strip("/")
        if not key:
            return True
        return self._object_exists(key) or self._has_keys_under(f"{key}/")

    def is_directory(self, path: str) -> bool:
        key = path.strip("/")
        if not key:
            return True
        if self._object_exists(key):
            return False
        return self._has_keys_under(f"{key}/")

    def list_entries(self, path: str, prefix: str | None = None) -> list[str]:
        directory = path.strip("/")
        directory_prefix = f"{directory}/" if directory else ""
        entries: list[str] = []
        for page in self._list_pages(f"{directory_prefix}{prefix or ''}", delimiter="/"):
            for item in page.get("Contents", []):
                key = item["Key"]
                if key != directory_prefix:
                    entries.append(self._identifier(key))
            for common_prefix in page.get("CommonPrefixes", []):
                identifier = self._identifier(common_prefix["Prefix"].rstrip("/"))
                self._directory_identifiers.add(identifier)
                entries.append(identifier)
        return sorted(entries)

    def delete(self, identifiers: Sequence[str]) -> Mapping[str, str | None]:
        results: dict[str, str | None] = {}
        owners: dict[str, str] = {}
        for identifier in identifiers:
            try:
                keys = self._keys_for(identifier)
            except ValueError as exc:
                results[identifier] = str(exc)
                continue
            results[identifier] = None
            for key in keys:
                owners[key] = identifier

        pending = list(owners)
        for start in range(0, len(pending), _DELETE_BATCH_SIZE):
            batch = pending[start : start + _DELETE_BATCH_SIZE]
            try:
                response = self._client.delete_objects(
                    Bucket=self._bucket,
                    Delete={"Objects": [{"Key": key} for key in batch], "Quiet": True},
                )
            except Exception as exc:  # noqa: BLE001
                for key in batch:
                    results[owners[key]] = f"delete_objects failed: {exc}"
                continue
            for error in response.get("Errors", []):
                owner = owners.get(error.get("Key", ""))
                if owner is not None:
                    results[owner] = f"{error.get('Code')}: {error.get('Message')}"
        return results

    def create_for_write(self, identifier: str) -> WritableSink:
        key = self._key(identifier)
        return cast(
            WritableSink,
            _S3MultipartSink(self._client, self._bucket, key, self._part_size_bytes),
        )

    def close(self) -> None:
        close = getattr(self._client, "close", None)
        if callable(close):
            close()

    def _keys_for(self, identifier: str) -> list[str]:
        key = self._key(identifier)
        if identifier not in self._directory_identifiers:
            return [key]
        nested = [
            item["Key"]
            for page in self._list_pages(f"{key}/", delimiter=None)
            for item in page.get("Contents", [])
        ]
        return nested or [key]

    def _object_exists(self, key: str) -> bool:
        try:
            self._client.head_object(Bucket=self._bucket, Key=key)
        except Exception as exc:
            if _error_code(exc) in _NOT_FOUND_CODES:
                return False
            raise
        return True

    def _has_keys_under(self, key_prefix: str) -> bool:
        response = self._client.list_objects_v2(
            Bucket=self._bucket,
            Prefix=key_prefix,
            MaxKeys=1,
        )
        return bool(response.get("Contents") or response.get("CommonPrefixes"))

    def _list_pages(self, key_prefix: str, delimiter: str | None) -> list[dict[str, Any]]:
        pages: list[dict[str, Any]] = []
        kwargs: dict[str, Any] = {"Bucket": self._bucket, "Prefix": key_prefix}
        if delimiter is not None:
            kwargs["Delimiter"] = delimiter
        while True:
            page = self._client.list_objects_v2(**kwargs)
            pages.append(page)
            if not page.get("IsTruncated"):
                return pages
            kwargs["ContinuationToken"] = page["NextContinuationToken"]

    def _identifier(self, key: str) -> str:
        return f"{self._uri}/{key}"

    def _key(self, identifier: str) -> str:
        if not identifier.startswith(f"{self._uri}/"):
            raise ValueError(f"Identifier '{identifier}' is outside bucket '{self._bucket}'.")
        return identifier[len(self._uri) + 1 :]


def _error_code(exc: Exception) -> str | None:
    response = getattr(exc, "response", None)
    if not isinstance(response, dict):
        return None
    code = response.get("Error", {}).get("Code")
    return None if code is None else str(code)


def build_boto3_s3_client(
    region: str | None,
    endpoint_url: str | None = None,
    force_path_style: bool = False,
) -> S3Client:
    """Create a boto3 S3 client lazily to avoid import-time hard dependency."""

    try:
        import boto3  # type: ignore[import-not-found]
        from botocore.config import Config  # type: ignore[import-not-found]
    except ModuleNotFoundError as exc:
        raise RuntimeError(
            "boto3 is required for the S3 file system. Install project dependencies first."
        ) from exc

    config = Config(s3={"addressing_style": "path"}) if force_path_style else None
    client = boto3.client(
        "s3",
        region_name=region,
        endpoint_url=endpoint_url,
        config=config,
    )
    logger.debug("Created S3 client for region '%s' endpoint '%s'.", region, endpoint_url)
    return cast(S3Client, client)


__all__ = ["S3Client", "S3FileSystem", "build_boto3_s3_client"]
