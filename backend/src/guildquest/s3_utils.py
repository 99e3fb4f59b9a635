"""
S3 utility functions for quest proof files.
Generates presigned URLs so clients upload and view proofs directly.
"""
import os
from datetime import datetime, timezone

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import ClientError
from .config import config
from .errors import StorageUnavailable, ValidationError
from .logging import logger

PROOF_PREFIX = 'proofs/'

# Accepted upload types: images, videos, PDF and Word documents
ALLOWED_CONTENT_PREFIXES = ('image/', 'video/')
ALLOWED_CONTENT_TYPES = (
    'application/pdf',
    'application/msword',
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
)

# S3 client with custom signature version for presigned URLs
s3_client = boto3.client(
    's3',
    region_name=config.AWS_REGION,
    config=BotoConfig(signature_version='s3v4')
)


def is_allowed_content_type(content_type: str) -> bool:
    if not content_type:
        return False
    return content_type.startswith(ALLOWED_CONTENT_PREFIXES) or content_type in ALLOWED_CONTENT_TYPES


def build_proof_key(member_id: str, file_name: str, now: datetime = None) -> str:
    """
    Object key for a proof upload: proofs/{memberId}/{epoch millis}.{ext}

    The original file name is not kept, only its extension.
    """
    now = now or datetime.now(timezone.utc)
    extension = os.path.splitext(file_name or '')[1].lstrip('.').lower()
    stamp = int(now.timestamp() * 1000)
    key = f"{PROOF_PREFIX}{member_id}/{stamp}"
    return f"{key}.{extension}" if extension else key


def is_proof_key(s3_key: str, member_id: str = None) -> bool:
    """Check that a key lives under the proofs prefix (and the member's folder if given)."""
    if not s3_key or not s3_key.startswith(PROOF_PREFIX):
        return False
    if member_id is not None:
        return s3_key.startswith(f"{PROOF_PREFIX}{member_id}/")
    return True


def create_proof_upload(member_id: str, file_name: str, content_type: str) -> dict:
    """
    Presigned PUT for a member's proof file.

    Returns:
        dict: {'uploadUrl', 'fileKey', 'contentType', 'expiresIn'}
    """
    if not is_allowed_content_type(content_type):
        raise ValidationError(f"Unsupported proof file type: {content_type}")
    if not config.PROOFS_BUCKET:
        raise StorageUnavailable("No PROOFS_BUCKET configured")

    file_key = build_proof_key(member_id, file_name)
    try:
        upload_url = s3_client.generate_presigned_url(
            'put_object',
            Params={
                'Bucket': config.PROOFS_BUCKET,
                'Key': file_key,
                'ContentType': content_type
            },
            ExpiresIn=config.UPLOAD_URL_EXPIRATION
        )
    except ClientError as e:
        logger.error(f"Error generating upload URL for {file_key}: {e}")
        raise StorageUnavailable("Could not create proof upload URL") from e

    return {
        'uploadUrl': upload_url,
        'fileKey': file_key,
        'contentType': content_type,
        'expiresIn': config.UPLOAD_URL_EXPIRATION
    }


def generate_presigned_url(s3_key: str, expiration: int = 3600) -> str:
    """
    Generate a presigned URL for viewing a proof file.

    Returns:
        Presigned URL string or the original key if generation fails
    """
    if not s3_key:
        return s3_key

    if not config.PROOFS_BUCKET:
        logger.warning("No PROOFS_BUCKET configured, returning original key")
        return s3_key

    try:
        return s3_client.generate_presigned_url(
            'get_object',
            Params={
                'Bucket': config.PROOFS_BUCKET,
                'Key': s3_key
            },
            ExpiresIn=expiration
        )
    except ClientError as e:
        logger.error(f"Error generating presigned URL for {s3_key}: {e}")
        return s3_key
