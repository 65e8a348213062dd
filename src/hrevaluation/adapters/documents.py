"""S3-compatible resume document storage."""

from __future__ import annotations

from typing import Any
from uuid import UUID

import structlog
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import NotFound, PersistenceFailure

_MISSING_CODES = {"NoSuchKey", "404", "NotFound"}


def document_key(candidate_id: int, vacancy_id: UUID) -> str:
    return f"{candidate_id}/{vacancy_id}"


class S3DocumentStore:
    """Resume documents in an S3 bucket, one object per candidate and vacancy."""

    def __init__(self, client: Any, bucket: str, *, link_ttl: int = 20 * 60) -> None:
        self._client = client
        self._bucket = bucket
        self._link_ttl = link_ttl
        self._logger = structlog.get_logger(__name__)

    def fetch_document(self, candidate_id: int, vacancy_id: UUID) -> bytes:
        key = document_key(candidate_id, vacancy_id)
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=key)
            return response["Body"].read()
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in _MISSING_CODES:
                raise NotFound(f"no resume uploaded for candidate {candidate_id}, vacancy {vacancy_id}") from exc
            raise PersistenceFailure(f"can't download object {key}: {exc}") from exc
        except BotoCoreError as exc:
            raise PersistenceFailure(f"can't download object {key}: {exc}") from exc

    def get_read_link(self, candidate_id: int, vacancy_id: UUID) -> str:
        key = document_key(candidate_id, vacancy_id)
        try:
            return self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self._bucket, "Key": key},
                ExpiresIn=self._link_ttl,
            )
        except (BotoCoreError, ClientError) as exc:
            raise PersistenceFailure(f"can't presign object {key}: {exc}") from exc

    def put_document(self, candidate_id: int, vacancy_id: UUID, data: bytes) -> None:
        key = document_key(candidate_id, vacancy_id)
        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=data,
                ContentType="application/pdf",
            )
        except (BotoCoreError, ClientError) as exc:
            raise PersistenceFailure(f"can't upload object {key}: {exc}") from exc
        self._logger.info("documents.uploaded", key=key, size=len(data))


__all__ = ["S3DocumentStore", "document_key"]
