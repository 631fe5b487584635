import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from fundraise.config.settings import Settings
from fundraise.engine.errors import UpstreamPersistenceError
from fundraise.engine.models import LineItem
from fundraise.services.order_recorder import AirtableOrderRecorder, build_recorder


@pytest.fixture
def recorder():
    return AirtableOrderRecorder(base_id="app123", table="Orders 2025", token="key_test")


def test_url_encodes_table_name(recorder):
    assert recorder.url == "https://api.airtable.com/v0/app123/Orders%202025"


@patch('fundraise.services.order_recorder.requests.post')
def test_record_posts_one_row(mock_post, recorder):
    mock_post.return_value = MagicMock(ok=True, status_code=200)
    mock_post.return_value.json.return_value = {"records": [{"id": "recABC"}]}

    record_id = recorder.record("Marie", "Scouts", [LineItem("coffret", 2)], email="", total=50)

    assert record_id == "recABC"
    args, kwargs = mock_post.call_args
    assert args[0] == recorder.url
    assert kwargs["headers"]["Authorization"] == "Bearer key_test"
    assert kwargs["timeout"] == 10.0

    fields = kwargs["json"]["records"][0]["fields"]
    assert fields["buyer"] == "Marie"
    assert fields["group"] == "Scouts"
    assert fields["total"] == 50.0
    assert json.loads(fields["items"]) == [{"productId": "coffret", "quantity": 2}]


@patch('fundraise.services.order_recorder.requests.post')
def test_upstream_error_is_reported(mock_post, recorder):
    mock_post.return_value = MagicMock(ok=False, status_code=422, text="INVALID_VALUE")

    with pytest.raises(UpstreamPersistenceError) as excinfo:
        recorder.record("Marie", "Scouts", [LineItem("coffret", 1)])

    assert excinfo.value.status_code == 422
    assert excinfo.value.detail == "INVALID_VALUE"


@patch('fundraise.services.order_recorder.requests.post')
def test_unreachable_store_is_reported(mock_post, recorder):
    mock_post.side_effect = requests.ConnectionError("connection refused")

    with pytest.raises(UpstreamPersistenceError, match="unreachable"):
        recorder.record("Marie", "Scouts", [LineItem("coffret", 1)])


def test_build_recorder_needs_every_credential(tmp_path):
    settings = Settings(project_root=tmp_path, products_csv=tmp_path / "p.csv", tiers_csv=tmp_path / "t.csv",
                        airtable_base_id="app123", airtable_table_orders="Orders")
    assert build_recorder(settings) is None

    settings.airtable_token = "key_test"
    recorder = build_recorder(settings)
    assert isinstance(recorder, AirtableOrderRecorder)
    assert recorder.table == "Orders"


@patch('fundraise.services.order_recorder.requests.post')
def test_unreadable_success_body_is_reported(mock_post, recorder):
    mock_post.return_value = MagicMock(ok=True, status_code=200, text="<html>gateway</html>")
    mock_post.return_value.json.side_effect = ValueError("no JSON")

    with pytest.raises(UpstreamPersistenceError) as excinfo:
        recorder.record("Marie", "Scouts", [LineItem("gourde", 2)])

    assert excinfo.value.status_code == 200
    assert excinfo.value.detail == "<html>gateway</html>"
