"""Invoke downstream job runners over HTTP."""

import logging
from typing import Any

import httpx

from src.errors import JobInvocationError

logger = logging.getLogger(__name__)


class RemoteJobInvoker:
    """Calls remote job functions by name.

    Each job is reached at {base_url}/{job_name} with a JSON body and a
    bearer service key, and answers with a JSON object.
    """

    def __init__(self, base_url: str | None, service_key: str | None = None, timeout: float = 120.0):
        self.base_url = base_url.rstrip("/") if base_url else None
        self.service_key = service_key
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> "RemoteJobInvoker":
        return cls(base_url=settings.jobs_base_url, service_key=settings.jobs_service_key)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.service_key:
            headers["Authorization"] = f"Bearer {self.service_key}"
        return headers

    async def invoke(self, job_name: str, body: dict[str, Any] | None = None) -> dict[str, Any]:
        """Invoke a remote job and return its JSON response.

        Raises:
            JobInvocationError: On transport failure, non-2xx status,
                a non-JSON body, or a body reporting an error
        """
        if not self.base_url:
            raise JobInvocationError(job_name, "JOBS_BASE_URL not configured")

        url = f"{self.base_url}/{job_name}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(url, headers=self._headers(), json=body or {})
        except httpx.HTTPError as e:
            raise JobInvocationError(job_name, f"Failed to reach {job_name}: {e}", e)

        if response.status_code >= 400:
            raise JobInvocationError(
                job_name,
                f"{job_name} returned HTTP {response.status_code}: {response.text[:500]}",
            )

        try:
            data = response.json()
        except ValueError as e:
            raise JobInvocationError(job_name, f"{job_name} returned a non-JSON response", e)

        if not isinstance(data, dict):
            return {"result": data}

        if data.get("error"):
            message = data.get("message") or data["error"]
            raise JobInvocationError(job_name, f"{job_name} reported an error: {message}")

        return data
