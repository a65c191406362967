"""Integration tests for the trip endpoints."""

import uuid
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from tripcore.api.deps import get_itinerary_store
from tripcore.itinerary.store import ItineraryStore
from tripcore.main import app

OWNER = uuid.UUID("00000000-0000-0000-0000-000000000001")
STRANGER = uuid.UUID("00000000-0000-0000-0000-000000000002")

OWNER_HEADERS = {"Authorization": f"Bearer {OWNER}"}
STRANGER_HEADERS = {"Authorization": f"Bearer {STRANGER}"}


@pytest.fixture
def client(store: ItineraryStore) -> Generator[TestClient, None, None]:
    """Test client backed by an in-memory store."""
    app.dependency_overrides[get_itinerary_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


def create_trip(client: TestClient, **overrides: object) -> dict:
    body = {
        "title": "Medellín",
        "destination": "Colombia",
        "start_date": "2024-03-01",
        "end_date": "2024-03-03",
        **overrides,
    }
    response = client.post("/trips", json=body, headers=OWNER_HEADERS)
    assert response.status_code == 201
    return response.json()


def add_item(client: TestClient, trip_id: str, title: str, start_at: str | None) -> dict:
    body = {
        "item_type": "activity",
        "source_id": f"src-{title}",
        "title": title,
        "start_at": start_at,
        "latitude": 6.25,
        "longitude": -75.56,
    }
    response = client.post(f"/trips/{trip_id}/items", json=body, headers=OWNER_HEADERS)
    assert response.status_code == 201
    return response.json()


class TestTripCrud:
    def test_create_and_get(self, client: TestClient) -> None:
        trip = create_trip(client)

        assert trip["status"] == "draft"
        assert trip["user_id"] == str(OWNER)

        response = client.get(f"/trips/{trip['id']}", headers=OWNER_HEADERS)
        assert response.status_code == 200
        assert response.json()["items"] == []

    def test_create_requires_auth(self, client: TestClient) -> None:
        response = client.post(
            "/trips",
            json={"title": "x", "start_date": "2024-03-01", "end_date": "2024-03-02"},
        )

        assert response.status_code == 403

    def test_create_rejects_inverted_range(self, client: TestClient) -> None:
        response = client.post(
            "/trips",
            json={"title": "x", "start_date": "2024-03-05", "end_date": "2024-03-01"},
            headers=OWNER_HEADERS,
        )

        assert response.status_code == 422

    def test_malformed_token_is_401(self, client: TestClient) -> None:
        response = client.get("/trips", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401

    def test_anonymous_list_is_empty(self, client: TestClient) -> None:
        create_trip(client)

        response = client.get("/trips")

        assert response.status_code == 200
        assert response.json() == []

    def test_list_with_filters(self, client: TestClient) -> None:
        march = create_trip(client)
        june = create_trip(client, title="Beach", start_date="2024-06-01", end_date="2024-06-05")
        client.post(f"/trips/{june['id']}/archive", headers=OWNER_HEADERS)

        all_trips = client.get("/trips", headers=OWNER_HEADERS).json()
        drafts = client.get("/trips?status=draft", headers=OWNER_HEADERS).json()
        searched = client.get("/trips?search=beach", headers=OWNER_HEADERS).json()
        windowed = client.get("/trips?end=2024-03-31", headers=OWNER_HEADERS).json()

        assert [t["id"] for t in all_trips] == [june["id"], march["id"]]
        assert [t["id"] for t in drafts] == [march["id"]]
        assert [t["id"] for t in searched] == [june["id"]]
        assert [t["id"] for t in windowed] == [march["id"]]

    def test_other_users_cannot_read_or_write(self, client: TestClient) -> None:
        trip = create_trip(client)

        read = client.get(f"/trips/{trip['id']}", headers=STRANGER_HEADERS)
        write = client.patch(
            f"/trips/{trip['id']}", json={"title": "Mine now"}, headers=STRANGER_HEADERS
        )

        assert read.status_code == 404
        assert write.status_code == 403

    def test_update_rejects_inverted_range(self, client: TestClient) -> None:
        trip = create_trip(client)

        response = client.patch(
            f"/trips/{trip['id']}", json={"end_date": "2024-02-01"}, headers=OWNER_HEADERS
        )

        assert response.status_code == 422

    @pytest.mark.parametrize("field", ["title", "start_date", "end_date", "status"])
    def test_update_rejects_null_required_field(self, client: TestClient, field: str) -> None:
        trip = create_trip(client)

        response = client.patch(f"/trips/{trip['id']}", json={field: None}, headers=OWNER_HEADERS)

        assert response.status_code == 422
        current = client.get(f"/trips/{trip['id']}", headers=OWNER_HEADERS).json()
        assert current["title"] == "Medellín"
        assert current["start_date"] == "2024-03-01"
        assert current["status"] == "draft"

    def test_soft_delete(self, client: TestClient) -> None:
        trip = create_trip(client)

        response = client.delete(f"/trips/{trip['id']}", headers=OWNER_HEADERS)

        assert response.status_code == 204
        assert client.get(f"/trips/{trip['id']}", headers=OWNER_HEADERS).status_code == 404
        assert client.get("/trips", headers=OWNER_HEADERS).json() == []

    def test_archive_unarchive_and_upcoming(self, client: TestClient) -> None:
        trip = create_trip(client)

        upcoming = client.get("/trips/upcoming", headers=OWNER_HEADERS).json()
        assert [t["id"] for t in upcoming] == [trip["id"]]

        archived = client.post(f"/trips/{trip['id']}/archive", headers=OWNER_HEADERS).json()
        assert archived["status"] == "completed"
        assert client.get("/trips/upcoming", headers=OWNER_HEADERS).json() == []

        restored = client.post(f"/trips/{trip['id']}/unarchive", headers=OWNER_HEADERS).json()
        assert restored["status"] == "draft"


class TestItemsAndTimeline:
    def test_timeline_buckets_items_by_day(self, client: TestClient) -> None:
        trip = create_trip(client)
        dinner = add_item(client, trip["id"], "Dinner", "2024-03-02T20:00:00")
        tour = add_item(client, trip["id"], "Tour", "2024-03-02T10:00:00")
        add_item(client, trip["id"], "Someday", None)

        response = client.get(f"/trips/{trip['id']}/timeline", headers=OWNER_HEADERS)

        assert response.status_code == 200
        days = response.json()
        assert [d["date"] for d in days] == ["2024-03-01", "2024-03-02", "2024-03-03"]
        assert days[0]["items"] == []
        assert [i["id"] for i in days[1]["items"]] == [tour["id"], dinner["id"]]
        assert days[2]["items"] == []

    def test_update_and_remove_item(self, client: TestClient) -> None:
        trip = create_trip(client)
        item = add_item(client, trip["id"], "Tour", "2024-03-02T10:00:00")

        patched = client.patch(
            f"/items/{item['id']}", json={"title": "Graffiti tour"}, headers=OWNER_HEADERS
        )
        assert patched.status_code == 200
        assert patched.json()["title"] == "Graffiti tour"

        forbidden = client.delete(f"/items/{item['id']}", headers=STRANGER_HEADERS)
        assert forbidden.status_code == 403

        removed = client.delete(f"/items/{item['id']}", headers=OWNER_HEADERS)
        assert removed.status_code == 204
        assert client.get(f"/trips/{trip['id']}", headers=OWNER_HEADERS).json()["items"] == []

    def test_item_patch_rejects_null_title(self, client: TestClient) -> None:
        trip = create_trip(client)
        item = add_item(client, trip["id"], "Tour", "2024-03-02T10:00:00")

        response = client.patch(f"/items/{item['id']}", json={"title": None}, headers=OWNER_HEADERS)

        assert response.status_code == 422
        items = client.get(f"/trips/{trip['id']}", headers=OWNER_HEADERS).json()["items"]
        assert [i["title"] for i in items] == ["Tour"]

    def test_get_trip_with_naive_and_offset_start_times(self, client: TestClient) -> None:
        trip = create_trip(client)
        evening = add_item(client, trip["id"], "Evening", "2024-03-02T12:00:00-05:00")
        morning = add_item(client, trip["id"], "Morning", "2024-03-02T10:00:00")

        response = client.get(f"/trips/{trip['id']}", headers=OWNER_HEADERS)

        assert response.status_code == 200
        assert [i["id"] for i in response.json()["items"]] == [morning["id"], evening["id"]]

    def test_add_item_rejects_bad_coordinates(self, client: TestClient) -> None:
        trip = create_trip(client)

        response = client.post(
            f"/trips/{trip['id']}/items",
            json={"item_type": "event", "source_id": "e", "title": "x", "latitude": 120},
            headers=OWNER_HEADERS,
        )

        assert response.status_code == 422


class TestApplyOrder:
    def test_apply_order_reassigns_slots(self, client: TestClient) -> None:
        trip = create_trip(client)
        a = add_item(client, trip["id"], "A", "2024-03-02T09:00:00")
        b = add_item(client, trip["id"], "B", "2024-03-02T12:00:00")

        response = client.post(
            f"/trips/{trip['id']}/days/1/apply-order",
            json={"ordered_item_ids": [b["id"], a["id"]]},
            headers=OWNER_HEADERS,
        )

        assert response.status_code == 200
        result = response.json()
        assert [i["id"] for i in result] == [b["id"], a["id"]]
        assert result[0]["start_at"] == "2024-03-02T09:00:00Z"
        assert result[1]["start_at"] == "2024-03-02T12:00:00Z"

    def test_apply_order_rejects_items_from_other_day(self, client: TestClient) -> None:
        trip = create_trip(client)
        a = add_item(client, trip["id"], "A", "2024-03-01T09:00:00")
        b = add_item(client, trip["id"], "B", "2024-03-02T12:00:00")

        response = client.post(
            f"/trips/{trip['id']}/days/1/apply-order",
            json={"ordered_item_ids": [b["id"], a["id"]]},
            headers=OWNER_HEADERS,
        )

        assert response.status_code == 422

    def test_apply_order_unknown_day(self, client: TestClient) -> None:
        trip = create_trip(client)

        response = client.post(
            f"/trips/{trip['id']}/days/7/apply-order",
            json={"ordered_item_ids": [str(uuid.uuid4())]},
            headers=OWNER_HEADERS,
        )

        assert response.status_code == 404
