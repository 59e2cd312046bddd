import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest
import requests

from creator_invoices.catalog import default_catalog
from creator_invoices.errors import RecordCreateFailed, SheetAppendFailed, UploadFailed
from creator_invoices.models import SheetReference, UploadResult

# 2026-10-18 12:00:00 UTC
FIXED_TS = 1792324800.5


def make_response(status: int = 200, payload: Optional[Any] = None) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp._content = b"" if payload is None else json.dumps(payload).encode()
    resp.url = "https://fake.test/"
    return resp


class FakeSession:
    """Stands in for ``requests.Session``; *responder* maps a call to a response."""

    def __init__(self, responder: Callable[[str, str, Dict[str, Any]], Any]) -> None:
        self.headers: Dict[str, str] = {}
        self.calls: List[Tuple[str, str, Dict[str, Any]]] = []
        self._responder = responder

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        self.calls.append((method, url, kwargs))
        result = self._responder(method, url, kwargs)
        if isinstance(result, Exception):
            raise result
        return result

    def post(self, url: str, **kwargs: Any) -> requests.Response:
        return self.request("POST", url, **kwargs)


class _FakeApiRequest:
    def __init__(self, responder, path: str, kwargs: Dict[str, Any]) -> None:
        self._responder = responder
        self._path = path
        self._kwargs = kwargs

    def execute(self) -> Any:
        result = self._responder(self._path, self._kwargs)
        if isinstance(result, Exception):
            raise result
        return result


class FakeGoogleService:
    """
    Stands in for a discovery-built client. ``files()`` or ``spreadsheets().values()``
    walk resources; a call with keyword arguments is a method whose ``execute()``
    asks *responder(path, kwargs)*, e.g. ``("files.create", {...})``.
    """

    def __init__(self, responder: Callable[[str, Dict[str, Any]], Any],
                 calls: Optional[List[Tuple[str, Dict[str, Any]]]] = None,
                 path: str = "") -> None:
        self._responder = responder
        self._path = path
        self.calls = [] if calls is None else calls

    def __getattr__(self, name: str):
        path = f"{self._path}.{name}" if self._path else name

        def call(**kwargs: Any):
            if not kwargs:
                return FakeGoogleService(self._responder, self.calls, path)
            self.calls.append((path, kwargs))
            return _FakeApiRequest(self._responder, path, kwargs)
        return call


class FakeUploader:
    def __init__(self, fail_on: Tuple[int, ...] = ()) -> None:
        self.calls: List[Dict[str, Any]] = []
        self.fail_on = set(fail_on)

    def upload(self, data, filename, kind, *, content_type=None, folder=()):
        self.calls.append({"data": data, "filename": filename, "kind": kind,
                           "content_type": content_type, "folder": tuple(folder)})
        n = len(self.calls)
        if n in self.fail_on:
            raise UploadFailed(f"upload {n} failed")
        return UploadResult(url=f"https://files.test/{filename}",
                            provider_id=f"id-{n}", filename=filename)


class FakeRecords:
    def __init__(self, fail: bool = False) -> None:
        self.created: List[Dict[str, Any]] = []
        self.fail = fail

    def create_record(self, properties):
        if self.fail:
            raise RecordCreateFailed("Notion API error 400: validation_error")
        self.created.append(dict(properties))
        return f"page-{len(self.created)}"


class FakeSheets:
    def __init__(self, fail: bool = False) -> None:
        self.rows: List[List[str]] = []
        self.fail = fail

    def append_row(self, record, brand, row):
        if self.fail:
            raise SheetAppendFailed("quota exceeded")
        self.rows.append(list(row))
        return SheetReference(spreadsheet_id="sheet-1", month="October", year="2026")


@pytest.fixture
def catalog():
    return default_catalog()


@pytest.fixture
def brand(catalog):
    return catalog.get("dr-dent")


@pytest.fixture
def clock():
    return lambda: FIXED_TS


@pytest.fixture
def retainer_fields():
    return {
        "name": "Jane Smith",
        "email": "jane@example.com",
        "brand": "dr-dent",
        "period": "October 2026",
        "submissionType": "individual",
        "invoiceType": "retainer",
        "selectedTier": "tier1",
        "invoiceMethod": "generate",
        "accounts": [{"handle": "@janesmith", "screenshots": 3}],
    }
