"""Object-store writers."""

from .s3_writer import S3Writer, destination_key

__all__ = ["S3Writer", "destination_key"]
