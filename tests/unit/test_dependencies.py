# tests/unit/test_dependencies.py
import pytest

from crosslist.core.exceptions import (
    AdapterNotConnectedError,
    BaseServiceError,
    EbayAPIError,
    InvalidStatusError,
    ItemNotFoundError,
    ListingValidationError,
    SyncInProgressError,
)
from crosslist.dependencies import http_error


@pytest.mark.parametrize("exc, status_code", [
    (ItemNotFoundError("x"), 404),
    (AdapterNotConnectedError("eBay"), 409),
    (SyncInProgressError("eBay"), 409),
    (EbayAPIError("bad gateway", status_code=503), 502),
    (ListingValidationError("no price"), 400),
    (InvalidStatusError("archived"), 400),
    (ValueError("platform is required"), 400),
    (BaseServiceError("boom"), 500),
])
def test_http_error_mapping(exc, status_code):
    error = http_error(exc)
    assert error.status_code == status_code
    assert error.detail == str(exc)
