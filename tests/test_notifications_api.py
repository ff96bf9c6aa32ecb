"""Tests for the notification and preference endpoints."""
import uuid

import pytest
from sqlalchemy import select

from app.models import User, UserPreferences
from conftest import candidate


@pytest.fixture()
def notify(checker, price_source, make_tracked_flight, db_session):
    """Create a tracked flight and run one check that raises a below-target alert"""
    async def _notify(origin="STN", destination="VLC", owner=None):
        flight = await make_tracked_flight(
            origin=origin, destination=destination, target_price="90.00", initial_price="100.00", owner=owner
        )
        price_source.fares[(origin, destination)] = [candidate("85.00")]
        await checker.check_flight(db_session, flight)
        return flight

    return _notify


@pytest.mark.asyncio
async def test_list_notifications(client, auth_headers, notify):
    flight = await notify()

    response = await client.get("/notifications", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 1
    assert body["unread"] == 1
    [notification] = body["notifications"]
    assert notification["type"] == "below-target"
    assert notification["is_read"] is False
    assert notification["metadata"]["newPrice"] == 85.0
    assert notification["metadata"]["oldPrice"] == 100.0
    assert notification["tracked_flight"]["id"] == str(flight.id)
    assert notification["tracked_flight"]["origin"] == "STN"


@pytest.mark.asyncio
async def test_list_only_shows_own_notifications(client, auth_headers, notify, other_user):
    await notify(owner=other_user)

    body = (await client.get("/notifications", headers=auth_headers)).json()

    assert body == {"notifications": [], "total": 0, "unread": 0}


@pytest.mark.asyncio
async def test_mark_one_read(client, auth_headers, notify):
    await notify()
    [notification] = (await client.get("/notifications", headers=auth_headers)).json()["notifications"]

    response = await client.patch(f"/notifications/{notification['id']}/read", headers=auth_headers)

    assert response.status_code == 200
    body = (await client.get("/notifications", headers=auth_headers)).json()
    assert body["unread"] == 0
    assert body["notifications"][0]["is_read"] is True


@pytest.mark.asyncio
async def test_mark_unknown_notification_read(client, auth_headers):
    response = await client.patch(f"/notifications/{uuid.uuid4()}/read", headers=auth_headers)

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_mark_all_read(client, auth_headers, notify):
    await notify()
    await notify(origin="LGW", destination="VCE")

    response = await client.put("/notifications/read-all", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["updated"] == 2
    assert (await client.get("/notifications", headers=auth_headers)).json()["unread"] == 0


@pytest.mark.asyncio
async def test_preferences_created_with_defaults(client, auth_headers, session_factory, user):
    response = await client.get("/users/me/preferences", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["user_id"] == str(user.id)
    assert body["email_notifications"] is True
    assert body["in_app_notifications"] is True
    assert body["currency"] == "EUR"

    async with session_factory() as session:
        rows = (await session.execute(select(UserPreferences))).scalars().all()
    assert len(rows) == 1


@pytest.mark.asyncio
async def test_update_preferences(client, auth_headers, session_factory, user):
    response = await client.put(
        "/users/me/preferences",
        json={"email_notifications": False, "currency": "gbp", "name": "Robin T."},
        headers=auth_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["email_notifications"] is False
    assert body["in_app_notifications"] is True
    assert body["currency"] == "GBP"

    again = (await client.get("/users/me/preferences", headers=auth_headers)).json()
    assert again["email_notifications"] is False

    async with session_factory() as session:
        stored = await session.get(User, user.id)
        assert stored.name == "Robin T."


@pytest.mark.asyncio
async def test_delete_notification(client, auth_headers, notify):
    await notify()
    [notification] = (await client.get("/notifications", headers=auth_headers)).json()["notifications"]

    response = await client.delete(f"/notifications/{notification['id']}", headers=auth_headers)

    assert response.status_code == 200
    assert (await client.get("/notifications", headers=auth_headers)).json()["total"] == 0
    assert (await client.delete(f"/notifications/{notification['id']}", headers=auth_headers)).status_code == 404
