from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import pytest

from fleetlog._transport import JsonRpcTransport


@dataclass
class FakeGeotabBackend:
    """JSON-RPC backend double serving one database with two devices."""

    devices: list[dict[str, Any]] = field(
        default_factory=lambda: [
            {"id": "b1", "name": "Truck 1", "vehicleIdentificationNumber": "VIN-1"},
            {"id": "b2", "name": "Truck 2", "vehicleIdentificationNumber": "VIN-2"},
        ]
    )
    login_error: str | None = None
    redirect_path: str = "ThisServer"
    expire_once_types: set[str] = field(default_factory=set)
    calls: list[tuple[str, str]] = field(default_factory=list)
    status_data_searches: list[dict[str, Any]] = field(default_factory=list)
    urls: list[str] = field(default_factory=list)
    _sessions_issued: int = 0
    _expired_already: set[str] = field(default_factory=set)

    @staticmethod
    def _error(name: str, message: str = "") -> dict[str, Any]:
        return {"error": {"message": message or name, "name": "JSONRPCError", "errors": [{"name": name, "message": message}]}}

    def _session_id(self) -> str:
        return f"SID-{self._sessions_issued}"

    async def call(self, base_url: str, method: str, params: Mapping[str, Any]) -> dict[str, Any]:
        type_name = str(params.get("typeName", ""))
        self.calls.append((method, type_name))
        self.urls.append(base_url)

        if method == "Authenticate":
            if self.login_error is not None:
                return self._error(self.login_error, "Incorrect login credentials")
            self._sessions_issued += 1
            return {
                "result": {
                    "credentials": {
                        "database": params["database"],
                        "userName": params["userName"],
                        "sessionId": self._session_id(),
                    },
                    "path": self.redirect_path,
                }
            }

        assert method == "Get"
        credentials = params["credentials"]
        if credentials["sessionId"] != self._session_id():
            return self._error("InvalidUserException")
        if type_name in self.expire_once_types and type_name not in self._expired_already:
            self._expired_already.add(type_name)
            return self._error("InvalidUserException")

        search = params.get("search", {})
        if type_name == "Device":
            return {"result": self.devices}
        if type_name == "DeviceStatusInfo":
            device_id = search["deviceSearch"]["id"]
            if device_id == "missing":
                return {"result": []}
            return {
                "result": [
                    {
                        "device": {"id": device_id},
                        "dateTime": "2026-03-01T12:00:00.000Z",
                        "latitude": 43.65,
                        "longitude": -79.38,
                        "isDeviceCommunicating": True,
                    }
                ]
            }
        if type_name == "StatusData":
            self.status_data_searches.append(dict(search))
            return {
                "result": [
                    {"device": {"id": search["deviceSearch"]["id"]}, "dateTime": "2026-03-01T11:00:00Z", "data": 14000},
                    {"device": {"id": search["deviceSearch"]["id"]}, "dateTime": "2026-03-01T12:00:00Z", "data": 15000},
                ]
            }
        return self._error("ArgumentException", f"unknown type {type_name}")


@pytest.fixture
def backend(monkeypatch: pytest.MonkeyPatch) -> FakeGeotabBackend:
    fake = FakeGeotabBackend()

    async def _call(self: JsonRpcTransport, method: str, params: Mapping[str, Any]) -> dict[str, Any]:
        return await fake.call(self.base_url, method, params)

    monkeypatch.setattr(JsonRpcTransport, "call", _call)
    return fake
