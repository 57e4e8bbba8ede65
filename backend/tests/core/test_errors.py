"""Error hierarchy — codes, HTTP statuses and the REST envelope."""

from app.core.errors import (
    ConcurrencyError,
    CorruptRecordError,
    ErrorContext,
    FeatureDisabledError,
    InvalidInputError,
    LicenseAlreadyUsedError,
    LicenseNotFoundError,
    ProjectNotFoundError,
    ResourceNotFoundError,
    StoreUnavailableError,
)


def test_taxonomy_status_codes():
    assert InvalidInputError("bad", field="code").http_status == 400
    assert LicenseNotFoundError().http_status == 404
    assert ProjectNotFoundError("p-1").http_status == 404
    assert LicenseAlreadyUsedError().http_status == 409
    assert ConcurrencyError("conflict").http_status == 409
    assert StoreUnavailableError("down", "execute").http_status == 503
    assert FeatureDisabledError("x").http_status == 503


def test_already_used_and_concurrent_modification_are_distinct():
    used = LicenseAlreadyUsedError()
    conflict = ConcurrencyError("conflict")
    assert used.code != conflict.code
    assert used.retryable is False
    assert conflict.retryable is True


def test_not_found_subclasses_share_base():
    assert isinstance(LicenseNotFoundError(), ResourceNotFoundError)
    assert isinstance(ProjectNotFoundError("p-1"), ResourceNotFoundError)


def test_license_not_found_does_not_echo_code():
    body = LicenseNotFoundError().to_response()
    assert body["error"]["message"] == "Invalid license key"
    assert body["error"]["code"] == "LICENSE_NOT_FOUND"


def test_corrupt_record_is_store_class_but_not_retryable():
    err = CorruptRecordError("current_phase", "ARCHIVED")
    assert isinstance(err, StoreUnavailableError)
    assert err.retryable is False


def test_to_response_envelope_shape():
    err = ConcurrencyError("changed", ErrorContext(resource_id="p-1", attempt=3))
    body = err.to_response()["error"]
    assert body["code"] == "CONCURRENT_MODIFICATION"
    assert body["category"] == "conflict"
    assert body["retryable"] is True
    assert body["context"] == {"resource_id": "p-1", "attempt": 3}
    assert "timestamp" in body
