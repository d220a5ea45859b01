"""
Unit tests for app/core/result.py
"""

import pytest
from fastapi import HTTPException

from app.core.result import HTTP_STATUS_BY_KIND, Err, ErrorKind, Ok, raise_for_error


class TestResult:

    def test_ok_unwraps(self):
        assert raise_for_error(Ok(42)) == 42
        assert Ok(42).ok is True

    def test_err_raises_http_exception(self):
        with pytest.raises(HTTPException) as exc_info:
            raise_for_error(Err(ErrorKind.DUPLICATE, "Repository already exists in the database"))

        assert exc_info.value.status_code == 409
        assert exc_info.value.detail == "Repository already exists in the database"

    @pytest.mark.parametrize(
        "kind,status_code",
        [
            (ErrorKind.INVALID_INPUT, 400),
            (ErrorKind.UNAUTHENTICATED, 401),
            (ErrorKind.FORBIDDEN, 403),
            (ErrorKind.NOT_FOUND, 404),
            (ErrorKind.NOT_FOUND_UPSTREAM, 404),
            (ErrorKind.DUPLICATE, 409),
            (ErrorKind.PERSISTENCE_FAILURE, 500),
            (ErrorKind.UPSTREAM_FAILURE, 502),
            (ErrorKind.UPSTREAM_TIMEOUT, 502),
            (ErrorKind.INTERNAL, 500),
        ],
    )
    def test_status_mapping(self, kind, status_code):
        assert Err(kind, "x").status_code == status_code

    def test_every_kind_mapped(self):
        assert set(HTTP_STATUS_BY_KIND) == set(ErrorKind)
