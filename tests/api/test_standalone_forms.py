"""Tests for the standalone-user API: save, share-by-id, submit, amend, delete."""

from httpx import AsyncClient

FIELDS = [{"id": "color", "type": "select", "options": ["red", "blue"]}]


async def _save(client: AsyncClient, headers, **body) -> dict:
    response = await client.post("/api/v1/forms", json={"fields": FIELDS, **body}, headers=headers)
    assert response.status_code in (200, 201), response.text
    return response.json()["data"]


async def test_save_creates_then_updates(client: AsyncClient, register_standalone) -> None:
    headers = await register_standalone()
    created = await client.post(
        "/api/v1/forms", json={"title": "Colors", "fields": FIELDS}, headers=headers
    )
    assert created.status_code == 201
    form = created.json()["data"]
    assert form["owner_role"] == "standalone_user"

    updated = await client.post(
        "/api/v1/forms",
        json={"formId": form["id"], "title": "Colours", "fields": FIELDS},
        headers=headers,
    )
    assert updated.status_code == 200
    assert updated.json()["data"]["title"] == "Colours"

    mine = (await client.get("/api/v1/forms", headers=headers)).json()["data"]
    assert [f["id"] for f in mine] == [form["id"]]


async def test_save_requires_a_valid_field(client: AsyncClient, register_standalone) -> None:
    headers = await register_standalone()
    missing = await client.post("/api/v1/forms", json={"title": "Empty"}, headers=headers)
    assert missing.status_code == 400
    empty = await client.post("/api/v1/forms", json={"fields": []}, headers=headers)
    assert empty.status_code == 400
    assert empty.json()["message"] == "At least one valid field is required"


async def test_save_foreign_form_id_is_404(client: AsyncClient, register_standalone) -> None:
    owner = await register_standalone("Ann", "ann@example.com")
    other = await register_standalone("Bob", "bob@example.com")
    form = await _save(client, owner, title="Ann's")
    response = await client.post(
        "/api/v1/forms", json={"form_id": form["id"], "fields": FIELDS}, headers=other
    )
    assert response.status_code == 404


async def test_shared_form_submit_and_amend(client: AsyncClient, register_standalone) -> None:
    owner = await register_standalone("Ann", "ann@example.com")
    guest = await register_standalone("Bob", "bob@example.com")
    form = await _save(client, owner, title="Poll")

    shared = await client.get(f"/api/v1/forms/{form['id']}", headers=guest)
    assert shared.status_code == 200

    submitted = await client.post(
        f"/api/v1/forms/{form['id']}/submit", json={"answers": {"color": "red"}}, headers=guest
    )
    assert submitted.status_code == 201
    submission = submitted.json()["data"]
    assert submission["tenant_id"] == form["owner_id"]

    amended = await client.patch(
        f"/api/v1/forms/submissions/{submission['id']}",
        json={"answers": {"color": "blue"}},
        headers=guest,
    )
    assert amended.status_code == 200
    assert amended.json()["data"]["answers"] == {"color": "blue"}

    # Only the submitter may amend; others see it as missing.
    foreign = await client.patch(
        f"/api/v1/forms/submissions/{submission['id']}",
        json={"answers": {"color": "red"}},
        headers=owner,
    )
    assert foreign.status_code == 404

    mine = (await client.get("/api/v1/forms/submissions", headers=guest)).json()["data"]
    assert [s["id"] for s in mine] == [submission["id"]]

    owner_view = await client.get(f"/api/v1/forms/{form['id']}/submissions", headers=owner)
    assert [s["answers"] for s in owner_view.json()["data"]] == [{"color": "blue"}]
    guest_view = await client.get(f"/api/v1/forms/{form['id']}/submissions", headers=guest)
    assert guest_view.status_code == 403


async def test_tenant_forms_are_not_shared_with_standalone_users(
    client: AsyncClient, owner_headers, create_form, register_standalone
) -> None:
    form = await create_form(owner_headers)
    headers = await register_standalone()
    response = await client.get(f"/api/v1/forms/{form['id']}", headers=headers)
    assert response.status_code == 403
    submit = await client.post(
        f"/api/v1/forms/{form['id']}/submit", json={"answers": {"name": "x"}}, headers=headers
    )
    assert submit.status_code == 403


async def test_delete_is_owner_scoped(client: AsyncClient, register_standalone) -> None:
    owner = await register_standalone("Ann", "ann@example.com")
    other = await register_standalone("Bob", "bob@example.com")
    form = await _save(client, owner)
    await client.post(
        f"/api/v1/forms/{form['id']}/submit", json={"answers": {"color": "red"}}, headers=other
    )

    denied = await client.delete(f"/api/v1/forms/{form['id']}", headers=other)
    assert denied.status_code == 404

    deleted = await client.delete(f"/api/v1/forms/{form['id']}", headers=owner)
    assert deleted.status_code == 200
    assert deleted.json()["data"] == {"deleted_submissions": 1}
    assert (await client.get("/api/v1/forms/submissions", headers=other)).json()["data"] == []


async def test_standalone_routes_reject_tenant_owners(client: AsyncClient, owner_headers) -> None:
    response = await client.get("/api/v1/forms", headers=owner_headers)
    assert response.status_code == 403
