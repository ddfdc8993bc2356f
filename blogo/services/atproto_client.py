import logging
from typing import Any, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel

from blogo.errors import NetworkError
from blogo.schemas.atproto import ListRecordsResponse, PutRecordResponse, RecordEntry

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

RETRYABLE_STATUS = {429}


def _is_retryable_status(status_code: int) -> bool:
    return status_code >= 500 or status_code in RETRYABLE_STATUS


class AtProtoClient:
    """
    Minimal XRPC client for a PDS. Call create_session() before any repo call.
    Every failure is raised as NetworkError; there is no automatic retry.
    """

    def __init__(
        self,
        service: str,
        handle: str,
        app_password: str,
        timeout: float = 10.0,
        http: Optional[httpx.AsyncClient] = None,
    ):
        self.service = service.rstrip("/")
        self.handle = handle
        self.app_password = app_password
        self.http = http or httpx.AsyncClient(timeout=httpx.Timeout(timeout))
        self.access_jwt: Optional[str] = None
        self.did: Optional[str] = None

    async def _xrpc(
        self,
        method: str,
        endpoint: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> Optional[dict]:
        headers = {}
        if authenticated:
            if not self.access_jwt:
                raise NetworkError(f"XRPC {endpoint} called without a session", retryable=False)
            headers["Authorization"] = f"Bearer {self.access_jwt}"

        url = f"{self.service}/xrpc/{endpoint}"
        try:
            response = await self.http.request(method, url, json=json, params=params, headers=headers)
        except httpx.TimeoutException as e:
            raise NetworkError(f"XRPC {endpoint} timed out", e) from e
        except httpx.RequestError as e:
            raise NetworkError(f"XRPC {endpoint} failed: {e}", e) from e

        if response.is_error:
            raise NetworkError(
                f"XRPC {endpoint} failed ({response.status_code}): {response.text}",
                retryable=_is_retryable_status(response.status_code),
            )

        if not response.content:
            return None
        return response.json()

    async def create_session(self) -> str:
        data = await self._xrpc(
            "POST",
            "com.atproto.server.createSession",
            json={"identifier": self.handle, "password": self.app_password},
            authenticated=False,
        )
        if not data or "accessJwt" not in data:
            raise NetworkError("Authentication with PDS returned no session", retryable=False)
        self.access_jwt = data["accessJwt"]
        self.did = data.get("did")
        logger.info(f"Authenticated with {self.service} as {self.did}")
        return self.did

    async def put_record(self, collection: str, rkey: str, record: dict) -> PutRecordResponse:
        data = await self._xrpc(
            "POST",
            "com.atproto.repo.putRecord",
            json={"repo": self.did, "collection": collection, "rkey": rkey, "record": record},
        )
        return PutRecordResponse.model_validate(data)

    async def get_record(self, collection: str, rkey: str, model: Type[T]) -> RecordEntry[T]:
        data = await self._xrpc(
            "GET",
            "com.atproto.repo.getRecord",
            params={"repo": self.did, "collection": collection, "rkey": rkey},
        )
        return RecordEntry[model].model_validate(data)

    async def list_records(
        self, collection: str, model: Type[T], limit: int = 100, cursor: Optional[str] = None
    ) -> ListRecordsResponse[T]:
        params = {"repo": self.did, "collection": collection, "limit": limit}
        if cursor:
            params["cursor"] = cursor
        data = await self._xrpc("GET", "com.atproto.repo.listRecords", params=params)
        return ListRecordsResponse[model].model_validate(data or {})

    async def delete_record(self, collection: str, rkey: str) -> None:
        await self._xrpc(
            "POST",
            "com.atproto.repo.deleteRecord",
            json={"repo": self.did, "collection": collection, "rkey": rkey},
        )

    async def aclose(self) -> None:
        await self.http.aclose()
