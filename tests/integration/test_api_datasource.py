"""Integration tests for the datasource routes (/, /query, /search)."""
import pytest
from fastapi.testclient import TestClient

from stravasource.api.main import create_app
from stravasource.datasource import StravaDatasource
from stravasource.models.activity import ActivityRecord
from stravasource.strava.client import UpstreamError

QUERY = {
    "range": {"from": "2024-03-01T00:00:00Z", "to": "2024-03-03T00:00:00Z"},
    "targets": [
        {"refId": "A", "activityStat": "distance", "format": "timeseries"},
        {"refId": "B", "activityStat": "distance", "format": "table"},
        {"refId": "C", "activityStat": "moving_time", "format": "worldmap"},
    ],
}


@pytest.fixture(name="client")
def client_fixture(datasource):
    app = create_app(datasource=datasource)
    with TestClient(app) as c:
        yield c


class TestAppLifespan:
    def test_no_client_until_startup(self):
        app = create_app()
        assert not hasattr(app.state, "datasource")

    def test_owned_client_closed_on_shutdown(self):
        app = create_app()
        with TestClient(app):
            datasource = app.state.datasource
            assert isinstance(datasource, StravaDatasource)
            assert not datasource.client._http.is_closed
        assert datasource.client._http.is_closed


class TestHealthRoute:
    def test_success(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json() == {"status": "success", "message": "Data source is working"}

    def test_error_still_200(self, client, fake_client):
        fake_client.get_activities.side_effect = UpstreamError("down")
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json() == {"status": "error", "message": "Cannot connect to Strava API"}

    def test_unexpected_failure_is_error_status(self, client, fake_client):
        fake_client.get_activities.side_effect = KeyError("bug")
        resp = client.get("/")
        assert resp.status_code == 200
        assert resp.json()["status"] == "error"


class TestQueryRoute:
    def test_one_result_per_target(self, client, fake_client):
        resp = client.post("/query", json=QUERY)
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert len(data) == 3
        fake_client.get_activities.assert_awaited_once()

    def test_timeseries_shape(self, client):
        series = client.post("/query", json=QUERY).json()["data"][0]
        assert series["target"] == "distance"
        assert series["datapoints"][0] == [5000.0, 1709276400000]
        assert len(series["datapoints"]) == 4

    def test_table_shape(self, client):
        table = client.post("/query", json=QUERY).json()["data"][1]
        assert table["type"] == "table"
        assert table["columns"][0] == {"text": "Time"}
        assert table["columns"][2] == {"text": "distance", "unit": "lengthm"}
        assert len(table["rows"]) == 3
        # kilojoules is null for runs, not dropped
        assert table["rows"][0][7] is None
        assert len(table["rows"][0]) == 8

    def test_worldmap_shape(self, client):
        world = client.post("/query", json=QUERY).json()["data"][2]
        assert world["columns"] == [
            {"text": "value", "unit": "s"},
            {"text": "name"},
            {"text": "latitude"},
            {"text": "longitude"},
        ]
        assert world["rows"][1] == [900, "Commute", 10.0, 20.0]

    def test_time_range_alias(self, client, fake_client):
        body = {"timeRange": QUERY["range"], "targets": [{"activityStat": "distance"}]}
        resp = client.post("/query", json=body)
        assert resp.status_code == 200
        assert resp.json()["data"][0]["target"] == "distance"

    @pytest.mark.parametrize("fmt", [1, True, {}, "heatmap"])
    def test_unrecognised_format_is_timeseries(self, client, fmt):
        body = {"range": QUERY["range"], "targets": [{"activityStat": "distance", "format": fmt}]}
        resp = client.post("/query", json=body)
        assert resp.status_code == 200
        series = resp.json()["data"][0]
        assert series["target"] == "distance"
        assert len(series["datapoints"]) == 4

    def test_null_name_keeps_row(self, client, fake_client):
        fake_client.get_activities.return_value = [
            ActivityRecord.model_validate({
                "id": 7,
                "name": None,
                "start_date": "2024-03-01T07:00:00Z",
                "distance": 1000.0,
                "start_latitude": 10.0,
                "start_longitude": 20.0,
            })
        ]
        body = {"range": QUERY["range"], "targets": [{"activityStat": "distance", "format": "worldmap"}]}
        resp = client.post("/query", json=body)
        assert resp.status_code == 200
        assert resp.json()["data"][0]["rows"] == [[1000.0, None, 10.0, 20.0]]

    def test_unknown_stat_rejected(self, client):
        body = {"range": QUERY["range"], "targets": [{"activityStat": "heartrate"}]}
        resp = client.post("/query", json=body)
        assert resp.status_code == 422

    def test_upstream_failure_is_502(self, client, fake_client):
        fake_client.get_activities.side_effect = UpstreamError("down")
        resp = client.post("/query", json=QUERY)
        assert resp.status_code == 502


class TestSearchRoute:
    def test_lists_stats(self, client):
        resp = client.post("/search", json={})
        assert resp.status_code == 200
        assert "total_elevation_gain" in resp.json()
