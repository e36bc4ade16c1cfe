"""Tests for event image uploads."""

import base64
import re

import pytest

from conftest import make_request, response_json
from uploads.routes import upload_event_images
from uploads.service import decode_image_data, generate_file_name, image_payload

JPEG_BYTES = b"\xff\xd8\xff\xe0fake-jpeg"
PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-png"


def _b64(content: bytes) -> str:
    return base64.b64encode(content).decode("ascii")


@pytest.fixture
def indexed_container(container):
    container.set_index({"events": [{"id": "e1", "folder": "e1", "name": "Team Day"}]})
    return container


def _upload(body):
    return upload_event_images(make_request("POST", "/api/upload-event-images", body=body))


async def test_partial_batch_reports_each_failure(indexed_container):
    response = await _upload({
        "eventId": "e1",
        "images": [
            {"data": f"data:image/jpeg;base64,{_b64(JPEG_BYTES)}", "fileName": "first.jpg"},
            {"data": "%%% not base64 %%%", "fileName": "broken.jpg"},
            {"base64string": _b64(PNG_BYTES), "fileName": "third.png"},
        ],
    })

    assert response.status_code == 200
    summary = response_json(response)
    assert summary["success"] is True
    assert summary["uploaded"] == 2
    assert summary["total"] == 3
    assert summary["message"] == "Uploaded 2 of 3 images"
    assert len(summary["errors"]) == 1
    assert summary["errors"][0].startswith("Error uploading image 2:")

    uploads = {u["name"]: u for u in indexed_container.uploads}
    assert uploads["e1/first.jpg"]["data"] == JPEG_BYTES
    assert uploads["e1/first.jpg"]["content_type"] == "image/jpeg"
    assert uploads["e1/third.png"]["content_type"] == "image/png"
    assert all(u["overwrite"] for u in indexed_container.uploads)


async def test_all_failed_batch_is_500(indexed_container):
    response = await _upload({"eventId": "e1", "images": [{"data": ""}, {"fileName": "x.jpg"}]})

    assert response.status_code == 500
    summary = response_json(response)
    assert summary["success"] is False
    assert summary["uploaded"] == 0
    assert summary["total"] == 2
    assert len(summary["errors"]) == 2
    assert indexed_container.uploads == []


async def test_bare_string_gets_generated_name(indexed_container):
    response = await _upload({"eventId": "e1", "images": [_b64(JPEG_BYTES)]})

    assert response.status_code == 200
    result = response_json(response)["results"][0]
    assert re.fullmatch(r"image_\d+_[0-9a-f]{8}\.jpg", result["fileName"])
    assert result["blobName"] == f"e1/{result['fileName']}"
    assert "errors" not in response_json(response)


async def test_event_matched_by_id_uses_its_folder(container):
    container.set_index({"events": [{"id": "evt-42", "folder": "team-day-2024"}]})

    response = await _upload({"eventId": "evt-42", "images": [{"data": _b64(PNG_BYTES), "fileName": "a.png"}]})

    assert response.status_code == 200
    assert container.uploads[0]["name"] == "team-day-2024/a.png"


async def test_file_name_cannot_escape_event_folder(indexed_container):
    await _upload({"eventId": "e1", "images": [{"data": _b64(PNG_BYTES), "fileName": "../other/evil.png"}]})

    assert indexed_container.uploads[0]["name"] == "e1/evil.png"


async def test_unknown_event_is_404(indexed_container):
    response = await _upload({"eventId": "missing", "images": [_b64(JPEG_BYTES)]})

    assert response.status_code == 404
    assert "missing" in response_json(response)["message"]
    assert indexed_container.uploads == []


async def test_missing_index_is_404(container):
    response = await _upload({"eventId": "e1", "images": [_b64(JPEG_BYTES)]})

    assert response.status_code == 404


@pytest.mark.parametrize("body, error", [
    ({"images": ["abc="]}, "eventId parameter required"),
    ({"eventId": "e1"}, "images parameter required"),
    ({"eventId": "e1", "images": []}, "images parameter required"),
    ({"eventId": "e1", "images": "abc="}, "images parameter required"),
])
async def test_request_validation(indexed_container, body, error):
    response = await _upload(body)

    assert response.status_code == 400
    assert response_json(response)["error"] == error


async def test_invalid_json_is_400(indexed_container):
    response = await _upload(b"{ nope")

    assert response.status_code == 400
    assert response_json(response)["error"] == "Invalid JSON body"


async def test_missing_connection_string_is_500(monkeypatch):
    monkeypatch.delenv("STORAGE_CONNECTION_STRING")

    response = await _upload({"eventId": "e1", "images": ["abc="]})

    assert response.status_code == 500
    assert response_json(response)["error"] == "Missing configuration"


def test_decode_image_data_variants():
    assert decode_image_data(_b64(JPEG_BYTES)) == JPEG_BYTES
    assert decode_image_data(f"data:image/png;base64,{_b64(PNG_BYTES)}") == PNG_BYTES

    for bad in (None, "", "data:image/png;base64", "not*base64"):
        with pytest.raises(ValueError):
            decode_image_data(bad)


def test_image_payload_shapes():
    assert image_payload("abc") == ("abc", None)
    assert image_payload({"data": "abc", "fileName": "a.jpg"}) == ("abc", "a.jpg")
    assert image_payload({"base64string": "abc"}) == ("abc", None)
    assert image_payload(42) == (None, None)


def test_generated_names_are_unique():
    assert generate_file_name() != generate_file_name()


async def test_unpadded_and_url_safe_payloads_are_accepted(indexed_container):
    url_safe_bytes = b"\xfb\xff\xbf\xfe\xd8"
    url_safe = base64.urlsafe_b64encode(url_safe_bytes).decode("ascii")
    assert "-" in url_safe or "_" in url_safe

    response = await _upload({
        "eventId": "e1",
        "images": [
            {"data": _b64(JPEG_BYTES).rstrip("="), "fileName": "unpadded.jpg"},
            {"data": f"data:image/png;base64,{url_safe.rstrip('=')}", "fileName": "urlsafe.png"},
        ],
    })

    assert response.status_code == 200
    summary = response_json(response)
    assert summary["uploaded"] == 2
    assert "errors" not in summary

    uploads = {u["name"]: u["data"] for u in indexed_container.uploads}
    assert uploads["e1/unpadded.jpg"] == JPEG_BYTES
    assert uploads["e1/urlsafe.png"] == url_safe_bytes


async def test_numeric_index_id_matches_event_id(container):
    container.set_index({"events": [{"id": 7, "name": "Quiz Night"}]})

    response = await _upload({"eventId": 7, "images": [{"data": _b64(PNG_BYTES), "fileName": "a.png"}]})

    assert response.status_code == 200
    assert container.uploads[0]["name"] == "7/a.png"
