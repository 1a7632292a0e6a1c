import json
import uuid
from datetime import datetime

from starlette.requests import Request

from vidshare.app.exceptions import ApiError, InternalError, NotFound, ValidationError
from vidshare.app.responses import (
    api_error_handler, api_response, camelize, error_response, unhandled_error_handler
)


def make_request(path: str = "/api/v1/test") -> Request:
    return Request({
        "type": "http",
        "method": "GET",
        "scheme": "http",
        "server": ("test", 80),
        "path": path,
        "root_path": "",
        "query_string": b"",
        "headers": [],
    })


def test_camelize_nested_documents():
    document = {"total_items": 1, "items": [{"owner": {"full_name": "A"}, "is_published": True}]}

    assert camelize(document) == {
        "totalItems": 1,
        "items": [{"owner": {"fullName": "A"}, "isPublished": True}],
    }


def test_success_envelope():
    video_id = uuid.uuid4()
    response = api_response(201, {"id": video_id, "created_at": datetime(2024, 1, 2)}, "Created")

    assert response.status_code == 201
    assert json.loads(response.body) == {
        "statusCode": 201,
        "data": {"id": str(video_id), "createdAt": "2024-01-02T00:00:00"},
        "message": "Created",
        "success": True,
    }


def test_error_envelope():
    response = error_response(404, "Video not found")

    assert json.loads(response.body) == {
        "statusCode": 404,
        "message": "Video not found",
        "success": False,
        "errors": [],
    }


def test_api_errors_carry_status_and_default_message():
    assert NotFound().status_code == 404
    assert NotFound().message == "Resource not found"
    assert ValidationError("Bad").message == "Bad"
    assert isinstance(InternalError(), ApiError)


async def test_api_error_handler_renders_envelope():
    response = await api_error_handler(make_request(), InternalError())

    assert response.status_code == 500
    body = json.loads(response.body)
    assert body["message"] == "Internal server error"
    assert body["success"] is False


async def test_api_error_handler_keeps_error_details():
    errors = [{"field": "title", "message": "Title is required"}]
    response = await api_error_handler(make_request(), ValidationError("Title is required", errors))

    assert json.loads(response.body)["errors"] == errors


async def test_unhandled_error_renders_internal_error():
    response = await unhandled_error_handler(make_request(), RuntimeError("db exploded"))

    assert response.status_code == 500
    body = json.loads(response.body)
    assert body["message"] == InternalError.default_message
    assert "db exploded" not in response.body.decode()
