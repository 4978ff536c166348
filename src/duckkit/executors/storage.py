"""
Storage credential and external location executors.

Credential secrets are read from the environment variables the
configuration names, at the moment the request is built.
"""

import logging
from typing import Any, Dict

from duckkit.models import ExternalLocationSpec, StorageCredentialSpec
from duckkit.models.enums import ResourceKind
from duckkit.plan import Action

from .base import BaseExecutor, ExecutionResult

logger = logging.getLogger(__name__)


class StorageCredentialExecutor(BaseExecutor[StorageCredentialSpec]):
    """Executor for S3, Azure and GCS credentials."""

    resource_kind = ResourceKind.STORAGE_CREDENTIAL

    def _payload(self, spec: StorageCredentialSpec) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": spec.name,
            "credential_type": spec.credential_type,
            "comment": spec.comment,
        }
        if spec.s3 is not None:
            payload.update({
                "s3_key_id": self.secret_from_env(spec.s3.key_id_from_env),
                "s3_secret": self.secret_from_env(spec.s3.secret_from_env),
                "s3_endpoint": spec.s3.endpoint,
                "s3_region": spec.s3.region,
                "s3_url_style": spec.s3.url_style,
            })
        if spec.azure is not None:
            payload.update({
                "azure_account_name": self.secret_from_env(spec.azure.account_name_from_env),
                "azure_account_key": self.secret_from_env(spec.azure.account_key_from_env),
                "azure_client_id": self.secret_from_env(spec.azure.client_id_from_env),
                "azure_client_secret": self.secret_from_env(spec.azure.client_secret_from_env),
                "azure_tenant_id": spec.azure.tenant_id,
            })
        if spec.gcs is not None:
            payload["gcs_key_file_path"] = spec.gcs.key_file_path
        return {k: v for k, v in payload.items() if v is not None}

    def create(self, action: Action) -> ExecutionResult:
        spec: StorageCredentialSpec = action.desired
        return self._create(
            action, "/storage-credentials", self._payload(spec),
            lookup=lambda: self._get_or_none(f"/storage-credentials/{spec.name}"),
        )

    def update(self, action: Action) -> ExecutionResult:
        spec: StorageCredentialSpec = action.desired
        self.client.patch(f"/storage-credentials/{spec.name}", json=self._payload(spec))
        return self._success(action, "Updated successfully")

    def delete(self, action: Action) -> ExecutionResult:
        self.client.delete(f"/storage-credentials/{action.resource_name}")
        self.index.forget(self.resource_kind, action.resource_name)
        return self._success(action, "Deleted successfully")


class ExternalLocationExecutor(BaseExecutor[ExternalLocationSpec]):
    """Executor for external locations."""

    resource_kind = ResourceKind.EXTERNAL_LOCATION

    @staticmethod
    def _payload(spec: ExternalLocationSpec) -> Dict[str, Any]:
        return {
            "name": spec.name,
            "url": spec.url,
            "credential_name": spec.credential_name,
            "storage_type": spec.storage_type,
            "comment": spec.comment,
            "read_only": spec.read_only,
        }

    def create(self, action: Action) -> ExecutionResult:
        spec: ExternalLocationSpec = action.desired
        return self._create(
            action, "/external-locations", self._payload(spec),
            lookup=lambda: self._get_or_none(f"/external-locations/{spec.name}"),
        )

    def update(self, action: Action) -> ExecutionResult:
        spec: ExternalLocationSpec = action.desired
        self.client.patch(f"/external-locations/{spec.name}", json=self._payload(spec))
        return self._success(action, "Updated successfully")

    def delete(self, action: Action) -> ExecutionResult:
        self.client.delete(f"/external-locations/{action.resource_name}")
        self.index.forget(self.resource_kind, action.resource_name)
        return self._success(action, "Deleted successfully")
