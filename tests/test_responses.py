"""Tests for response interpretation."""

from __future__ import annotations

import httpx

from canteen.responses import interpret_response


def test_json_content_type_is_parsed():
    response = httpx.Response(200, json={"success": True, "row": 3})
    assert interpret_response(response) == {"success": True, "row": 3}


def test_json_sent_as_text_is_parsed():
    response = httpx.Response(200, text='{"result": "ok"}')
    assert interpret_response(response) == {"result": "ok"}


def test_plain_text_is_wrapped():
    response = httpx.Response(200, text="Row appended")
    assert interpret_response(response) == {"success": True, "message": "Row appended"}


def test_empty_body_is_wrapped():
    response = httpx.Response(200)
    assert interpret_response(response) == {"success": True, "message": ""}


def test_broken_json_falls_back_to_acknowledgment():
    response = httpx.Response(200, content=b"{not json", headers={"content-type": "application/json"})
    assert interpret_response(response) == {"success": True, "message": "Order submitted successfully"}
