"""End-to-end HTTP tests over the ASGI app."""

import pytest

from conftest import login_headers
from edunexus.db.models import Message


async def register(client, username: str, full_name: str = "Test User", **extra):
    response = await client.post(
        "/auth/register", json={"username": username, "full_name": full_name, **extra}
    )
    client.cookies.clear()
    return response


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


async def test_register_admin_hint_then_login_then_duplicate(client):
    first = await register(client, "admin_test", email="admin_test@school.edu")
    assert first.status_code == 201
    created = first.json()["account"]
    assert created["role"] == "ADMIN"
    assert "password_hash" not in created

    headers = await login_headers(client, "admin_test")
    me = await client.get("/auth/me", headers=headers)
    assert me.json()["role"] == "ADMIN"

    second = await register(client, "admin_test", full_name="Someone Else")
    assert second.status_code == 409

    me = await client.get("/auth/me", headers=headers)
    assert me.json()["full_name"] == "Test User"
    assert me.json()["id"] == created["id"]


async def test_maintenance_rejects_student_login_but_not_admin(client):
    await register(client, "student1")
    admin = await login_headers(client, "admin")

    toggled = await client.post("/admin/settings/toggle/maintenance_mode", headers=admin)
    assert toggled.json()["maintenance_mode"] is True

    rejected = await client.post("/auth/login", json={"username": "student1"})
    assert rejected.status_code == 503
    assert rejected.json()["detail"] == "MAINTENANCE ACTIVE: Admin access only."

    allowed = await client.post("/auth/login", json={"username": "admin"})
    assert allowed.status_code == 200
    assert allowed.json()["account"]["role"] == "ADMIN"


async def test_maintenance_locks_existing_student_sessions(client):
    token = (await register(client, "student1")).json()["access_token"]
    student = {"Authorization": f"Bearer {token}"}
    admin = await login_headers(client, "admin")

    assert (await client.get("/groups", headers=student)).status_code == 200
    await client.post("/admin/settings/toggle/maintenance_mode", headers=admin)

    assert (await client.get("/groups", headers=student)).status_code == 503
    assert (await client.get("/groups", headers=admin)).status_code == 200


async def test_login_errors(client):
    missing = await client.post("/auth/login", json={"username": "ghost"})
    assert missing.status_code == 401
    assert missing.json()["detail"] == "Identity not found."

    await register(client, "secure", password="hunter22")
    wrong = await client.post("/auth/login", json={"username": "secure", "password": "nope"})
    assert wrong.status_code == 401


async def test_blocked_account_loses_session(client):
    response = await register(client, "student1")
    token = response.json()["access_token"]
    account_id = response.json()["account"]["id"]
    admin = await login_headers(client, "admin")

    blocked = await client.post(f"/admin/accounts/{account_id}/block", headers=admin)
    assert blocked.json()["is_blocked"] is True

    me = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 401

    login = await client.post("/auth/login", json={"username": "student1"})
    assert login.status_code == 403
    assert login.json()["detail"] == "Access Denied: Account Blocked."


async def test_founder_is_protected(client):
    admin = await login_headers(client, "admin")

    assert (await client.post("/admin/accounts/founder_001/block", headers=admin)).status_code == 403
    assert (await client.delete("/admin/accounts/founder_001", headers=admin)).status_code == 403


async def test_admin_routes_require_staff(client):
    token = (await register(client, "student1")).json()["access_token"]
    student = {"Authorization": f"Bearer {token}"}

    assert (await client.get("/admin/accounts", headers=student)).status_code == 403
    assert (await client.get("/admin/accounts")).status_code == 401


async def test_public_settings_and_replace(client):
    public = await client.get("/settings")
    assert public.status_code == 200
    assert public.json()["system_announcement"] == "Welcome to EduNexus AI V2.0"
    assert public.json()["is_default"] is False

    admin = await login_headers(client, "admin")
    body = {**public.json(), "system_announcement": "Finals week", "enable_ads": False}
    body.pop("is_default")
    body["expected_version"] = body.pop("version")

    replaced = await client.put("/admin/settings", json=body, headers=admin)
    assert replaced.status_code == 200
    assert replaced.json()["system_announcement"] == "Finals week"

    stale = await client.put("/admin/settings", json=body, headers=admin)
    assert stale.status_code == 409


async def test_guest_session(client):
    response = await client.post("/auth/guest")
    assert response.status_code == 200
    assert response.json()["account"]["role"] == "GUEST"

    client.cookies.clear()
    headers = {"Authorization": f"Bearer {response.json()['access_token']}"}
    me = await client.get("/auth/me", headers=headers)
    assert me.json()["id"] == response.json()["account"]["id"]


async def test_logout_clears_cookie(client):
    await client.post("/auth/login", json={"username": "admin"})
    assert (await client.get("/auth/me")).status_code == 200

    response = await client.post("/auth/logout")

    assert response.status_code == 204
    assert (await client.get("/auth/me")).status_code == 401


async def test_groups_visibility_and_invites(client):
    owner = {"Authorization": f"Bearer {(await register(client, 'owner')).json()['access_token']}"}
    other = {"Authorization": f"Bearer {(await register(client, 'other')).json()['access_token']}"}

    public = await client.post("/groups", json={"name": "Open Lab"}, headers=owner)
    private = await client.post("/groups", json={"name": "Study Pod", "type": "PRIVATE"}, headers=owner)
    assert public.status_code == 201
    assert public.json()["invite_code"] is None
    invite_code = private.json()["invite_code"]
    assert invite_code

    visible = {g["name"] for g in (await client.get("/groups", headers=other)).json()}
    assert visible == {"Open Lab"}

    joined = await client.post("/groups/join", json={"invite_code": invite_code}, headers=other)
    assert joined.status_code == 200
    assert len(joined.json()["members"]) == 2

    visible = {g["name"] for g in (await client.get("/groups", headers=other)).json()}
    assert visible == {"Open Lab", "Study Pod"}

    # Joining twice is a no-op
    await client.post(f"/groups/{public.json()['id']}/join", headers=other)
    again = await client.post(f"/groups/{public.json()['id']}/join", headers=other)
    assert len(again.json()["members"]) == 2
    assert len(set(again.json()["members"])) == 2

    forbidden = await client.delete(f"/groups/{public.json()['id']}", headers=other)
    assert forbidden.status_code == 403
    deleted = await client.delete(f"/groups/{public.json()['id']}", headers=owner)
    assert deleted.status_code == 204


async def test_messages_in_group(client):
    owner = {"Authorization": f"Bearer {(await register(client, 'owner')).json()['access_token']}"}
    group = (await client.post("/groups", json={"name": "Chemistry"}, headers=owner)).json()

    for text in ["one", "two", "three"]:
        posted = await client.post(f"/groups/{group['id']}/messages", json={"content": text}, headers=owner)
        assert posted.status_code == 201
        assert len(posted.json()) == 1

    page = (await client.get(f"/groups/{group['id']}/messages", headers=owner)).json()
    assert [m["content"] for m in page["messages"]] == ["one", "two", "three"]

    await client.post(f"/groups/{group['id']}/messages", json={"content": "four"}, headers=owner)
    newer = await client.get(
        f"/groups/{group['id']}/messages", params={"after": page["next_cursor"]}, headers=owner
    )
    assert [m["content"] for m in newer.json()["messages"]] == ["four"]


async def test_message_page_is_in_timestamp_order(client, store):
    owner = {"Authorization": f"Bearer {(await register(client, 'owner')).json()['access_token']}"}
    group = (await client.post("/groups", json={"name": "History"}, headers=owner)).json()
    await store.messages.create(Message(group_id=group["id"], user_id="u_1", content="later", timestamp=200))
    await store.messages.create(Message(group_id=group["id"], user_id="u_1", content="earlier", timestamp=100))

    page = (await client.get(f"/groups/{group['id']}/messages", headers=owner)).json()

    assert [m["content"] for m in page["messages"]] == ["earlier", "later"]
    assert page["next_cursor"] == max(m["seq"] for m in page["messages"])
    newer = await client.get(
        f"/groups/{group['id']}/messages", params={"after": page["next_cursor"]}, headers=owner
    )
    assert newer.json()["messages"] == []


async def test_ai_lab_without_api_key_replies_softly(client):
    headers = {"Authorization": f"Bearer {(await register(client, 'learner')).json()['access_token']}"}

    posted = await client.post("/groups/ai_lab/messages", json={"content": "Teach me vectors"}, headers=headers)

    assert posted.status_code == 201
    user_msg, ai_msg = posted.json()
    assert ai_msg["is_ai"] is True
    assert ai_msg["user_name"] == "Prof. Nexus"
    assert "Missing API Key" in ai_msg["content"]
    assert user_msg["group_id"] == ai_msg["group_id"]


@pytest.mark.parametrize("body", [{}, {"content": "   "}])
async def test_empty_message_is_422(client, body):
    headers = {"Authorization": f"Bearer {(await register(client, 'learner')).json()['access_token']}"}

    response = await client.post("/groups/ai_lab/messages", json=body, headers=headers)

    assert response.status_code == 422


async def test_private_group_messages_hidden(client):
    owner = {"Authorization": f"Bearer {(await register(client, 'owner')).json()['access_token']}"}
    other = {"Authorization": f"Bearer {(await register(client, 'other')).json()['access_token']}"}
    group = (await client.post("/groups", json={"name": "Pod", "type": "PRIVATE"}, headers=owner)).json()

    response = await client.get(f"/groups/{group['id']}/messages", headers=other)

    assert response.status_code == 404


async def test_tickets_flow(client):
    student = {"Authorization": f"Bearer {(await register(client, 'student1')).json()['access_token']}"}
    admin = await login_headers(client, "admin")

    created = await client.post(
        "/tickets", json={"subject": "Upload broken", "message": "PDF fails"}, headers=student
    )
    assert created.status_code == 201
    ticket_id = created.json()["id"]
    assert created.json()["status"] == "OPEN"

    mine = await client.get("/tickets/mine", headers=student)
    assert [t["id"] for t in mine.json()] == [ticket_id]
    assert (await client.get("/tickets", headers=student)).status_code == 403

    resolved = await client.post(f"/tickets/{ticket_id}/resolve", json={"reply": "Fixed"}, headers=admin)
    assert resolved.json()["status"] == "RESOLVED"
    assert resolved.json()["admin_reply"] == "Fixed"

    again = await client.post(f"/tickets/{ticket_id}/resolve", json={"reply": "Again"}, headers=admin)
    assert again.status_code == 409


async def test_subscription_upgrade(client):
    student = {"Authorization": f"Bearer {(await register(client, 'student1')).json()['access_token']}"}

    upgraded = await client.patch("/accounts/me/subscription", json={"plan": "PRO"}, headers=student)
    assert upgraded.status_code == 200
    assert upgraded.json()["subscription"] == "PRO"
    assert upgraded.json()["subscription_expiry"] > upgraded.json()["created_at"]

    admin = await login_headers(client, "admin")
    await client.post("/admin/settings/toggle/enable_payments", headers=admin)

    refused = await client.patch("/accounts/me/subscription", json={"plan": "ENTERPRISE"}, headers=student)
    assert refused.status_code == 403
