"""
hub_provisioner.providers.graph

Microsoft Graph client boundary used to create service principals.

Responsibilities:
- Attach a bearer token obtained from the caller-supplied token source.
- Create the application registration, its service principal and a password credential.
- Map Graph payloads into domain `ServicePrincipal` values.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

import httpx

from hub_provisioner.models import Credential, ServicePrincipal
from hub_provisioner.observability.logging import get_logger

TokenSource = Callable[[], Awaitable[str]]

log = get_logger(__name__)


class GraphClient:
    """
    `http` must be configured with the Graph base url (e.g. https://graph.microsoft.com/v1.0).
    """

    def __init__(self, *, http: httpx.AsyncClient, token_source: TokenSource) -> None:
        self._http = http
        self._token_source = token_source

    async def _authz(self) -> dict[str, str]:
        token = await self._token_source()
        return {"Authorization": f"Bearer {token}"}

    async def create_application(self, *, display_name: str) -> dict[str, Any]:
        r = await self._http.post(
            "/applications",
            headers=await self._authz(),
            json={"displayName": display_name, "signInAudience": "AzureADMyOrg"},
        )
        r.raise_for_status()
        return r.json()

    async def create_service_principal(self, *, app_id: str) -> dict[str, Any]:
        r = await self._http.post(
            "/servicePrincipals",
            headers=await self._authz(),
            json={"appId": app_id, "accountEnabled": True},
        )
        r.raise_for_status()
        return r.json()

    async def add_password(
        self,
        *,
        application_object_id: str,
        display_name: str,
        start: datetime,
        end: datetime,
    ) -> dict[str, Any]:
        r = await self._http.post(
            f"/applications/{application_object_id}/addPassword",
            headers=await self._authz(),
            json={
                "passwordCredential": {
                    "displayName": display_name,
                    "startDateTime": _graph_datetime(start),
                    "endDateTime": _graph_datetime(end),
                }
            },
        )
        r.raise_for_status()
        return r.json()

    async def create_principal(
        self, *, display_name: str, credential: Credential
    ) -> ServicePrincipal | None:
        app = await self.create_application(display_name=display_name)
        app_id = app.get("appId")
        app_object_id = app.get("id")
        if not app_id or not app_object_id:
            log.error("graph_application_incomplete", display_name=display_name)
            return None

        sp = await self.create_service_principal(app_id=app_id)
        sp_object_id = sp.get("id")
        if not sp_object_id:
            log.error("graph_service_principal_incomplete", app_id=app_id)
            return None

        pwd = await self.add_password(
            application_object_id=app_object_id,
            display_name=f"{display_name}-secret",
            start=credential.start,
            end=credential.end,
        )
        secret_text = pwd.get("secretText")
        if not secret_text:
            log.error("graph_password_missing_secret", app_id=app_id)
            return None

        # Graph mints the secret value itself; the requested validity window is kept.
        issued = Credential(
            secret=str(secret_text),
            start=credential.start,
            end=credential.end,
        )
        return ServicePrincipal(
            app_id=str(app_id),
            object_id=str(sp_object_id),
            display_name=display_name,
            credential=issued,
        )


def _graph_datetime(value: datetime) -> str:
    # Graph expects ISO-8601 UTC with a trailing Z.
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


# --- Module Notes -----------------------------------------------------------
# Graph v1.0 does not accept caller-chosen secret values on addPassword. The locally
# generated password is never returned: without a secretText there is no usable principal.
