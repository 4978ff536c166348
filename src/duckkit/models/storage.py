"""
Storage credentials and external locations.

Credentials never carry secret material in configuration: each secret is
named by the environment variable that holds it and read at apply time.
"""

from __future__ import annotations

from typing import Optional

from .base import BaseSpecModel


class S3CredentialSpec(BaseSpecModel):
    key_id_from_env: str = ""
    secret_from_env: str = ""
    endpoint: str = ""
    region: str = ""
    url_style: str = ""


class AzureCredentialSpec(BaseSpecModel):
    account_name_from_env: str = ""
    account_key_from_env: str = ""
    client_id_from_env: str = ""
    client_secret_from_env: str = ""
    tenant_id: str = ""


class GCSCredentialSpec(BaseSpecModel):
    key_file_path: str = ""


class StorageCredentialSpec(BaseSpecModel):
    """Cloud storage credential; exactly one provider block is expected."""

    name: str = ""
    credential_type: str = ""
    comment: str = ""
    s3: Optional[S3CredentialSpec] = None
    azure: Optional[AzureCredentialSpec] = None
    gcs: Optional[GCSCredentialSpec] = None

    @property
    def path(self) -> str:
        return self.name


class ExternalLocationSpec(BaseSpecModel):
    name: str = ""
    url: str = ""
    credential_name: str = ""
    storage_type: str = ""
    comment: str = ""
    read_only: bool = False

    @property
    def path(self) -> str:
        return self.name
