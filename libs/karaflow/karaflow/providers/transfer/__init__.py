"""Transfer clients."""

from karaflow.providers.transfer.base import PayloadEncoding, TransferClient
from karaflow.providers.transfer.rest import HttpTransferClient
from karaflow.providers.transfer.s3 import S3TransferClient

__all__ = ["HttpTransferClient", "PayloadEncoding", "S3TransferClient", "TransferClient"]
