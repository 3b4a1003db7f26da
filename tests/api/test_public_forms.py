"""Tests for the public API: published form view, anonymous and identified submissions, caps."""

from httpx import AsyncClient


async def _published(client: AsyncClient, headers, create_form, **settings) -> tuple[dict, str]:
    form = await create_form(headers)
    if settings:
        await client.put(
            f"/api/v1/admin/forms/{form['id']}",
            json={"public_settings": settings},
            headers=headers,
        )
    result = (
        await client.post(f"/api/v1/admin/forms/{form['id']}/publish", headers=headers)
    ).json()["data"]
    return result["form"], result["form"]["public_token"]


async def test_unpublished_and_unknown_tokens_are_404(
    client: AsyncClient, owner_headers, create_form
) -> None:
    form, token = await _published(client, owner_headers, create_form)
    await client.post(f"/api/v1/admin/forms/{form['id']}/unpublish", headers=owner_headers)
    for url in (f"/api/v1/public/forms/{token}", "/api/v1/public/forms/unknown"):
        response = await client.get(url)
        assert response.status_code == 404
    submit = await client.post(
        f"/api/v1/public/forms/{token}/submit", json={"answers": {"name": "x"}}
    )
    assert submit.status_code == 404


async def test_list_published_forms(client: AsyncClient, owner_headers, create_form) -> None:
    await create_form(owner_headers, title="Draft")
    form, token = await _published(client, owner_headers, create_form)
    response = await client.get("/api/v1/public/forms")
    listed = response.json()["data"]
    assert [f["public_token"] for f in listed] == [token]
    assert "owner_id" not in listed[0]


async def test_anonymous_submission(client: AsyncClient, owner_headers, create_form) -> None:
    form, token = await _published(client, owner_headers, create_form)
    response = await client.post(
        f"/api/v1/public/forms/{token}/submit",
        json={"answers": {"name": "Anon", "age": 30}},
        headers={"User-Agent": "pytest-agent"},
    )
    assert response.status_code == 201
    submission = response.json()["data"]
    assert submission["submitted_by"].startswith("anon_")
    assert "ip_address" not in submission

    admin_view = (
        await client.get(f"/api/v1/admin/forms/{form['id']}/submissions", headers=owner_headers)
    ).json()["data"]
    assert admin_view[0]["user_agent"] == "pytest-agent"
    assert admin_view[0]["form_title"] == "Survey"


async def test_submission_cap_is_enforced(client: AsyncClient, owner_headers, create_form) -> None:
    form, token = await _published(client, owner_headers, create_form, submission_limit=2)
    url = f"/api/v1/public/forms/{token}/submit"
    for _ in range(2):
        assert (await client.post(url, json={"answers": {"name": "x"}})).status_code == 201
    capped = await client.post(url, json={"answers": {"name": "x"}})
    assert capped.status_code == 400
    assert capped.json()["error"]["code"] == "LIMIT_EXCEEDED"

    refreshed = (
        await client.get(f"/api/v1/admin/forms/{form['id']}", headers=owner_headers)
    ).json()["data"]
    assert refreshed["submission_count"] == 2


async def test_capped_identified_submission_creates_no_user(
    client: AsyncClient, owner_headers, create_form
) -> None:
    """A submission refused by the cap leaves no managed user or assignment behind."""
    form, token = await _published(client, owner_headers, create_form, submission_limit=1)
    url = f"/api/v1/public/forms/{token}/submit"
    assert (await client.post(url, json={"answers": {"name": "x"}})).status_code == 201

    capped = await client.post(url, json={"answers": {"name": "x"}, "email": "late@example.com"})
    assert capped.status_code == 400
    assert capped.json()["error"]["code"] == "LIMIT_EXCEEDED"

    users = (await client.get("/api/v1/admin/users", headers=owner_headers)).json()["data"]
    assert users == []
    refreshed = (
        await client.get(f"/api/v1/admin/forms/{form['id']}", headers=owner_headers)
    ).json()["data"]
    assert refreshed["assigned_users"] == []
    assert refreshed["submission_count"] == 1


async def test_identified_submission_enrols_user_once(
    client: AsyncClient, owner_headers, create_form
) -> None:
    """With an email the submitter becomes a passwordless managed user; one submission each."""
    form, token = await _published(client, owner_headers, create_form)
    url = f"/api/v1/public/forms/{token}/submit"

    first = await client.post(url, json={"answers": {"name": "Jo"}, "email": "jo@example.com"})
    assert first.status_code == 201
    users = (await client.get("/api/v1/admin/users", headers=owner_headers)).json()["data"]
    assert [u["email"] for u in users] == ["jo@example.com"]
    assert users[0]["assigned_forms"] == [form["id"]]
    assert first.json()["data"]["submitted_by"] == users[0]["id"]

    second = await client.post(url, json={"answers": {"name": "Jo"}, "email": "jo@example.com"})
    assert second.status_code == 400
    assert second.json()["message"] == "You have already submitted this form."

    # The passwordless account takes the password given on the form link.
    login = await client.post(
        "/api/v1/auth/public-form/login",
        json={"email": "jo@example.com", "password": "secret123", "public_form_token": token},
    )
    assert login.status_code == 200
    assert login.json()["data"]["user"]["id"] == users[0]["id"]


async def test_multiple_submissions_allowed_when_enabled(
    client: AsyncClient, owner_headers, create_form
) -> None:
    _form, token = await _published(
        client, owner_headers, create_form, allow_multiple_submissions=True
    )
    url = f"/api/v1/public/forms/{token}/submit"
    for _ in range(2):
        response = await client.post(
            url, json={"answers": {"name": "Jo"}, "email": "jo@example.com"}
        )
        assert response.status_code == 201


async def test_public_submit_requires_answers(
    client: AsyncClient, owner_headers, create_form
) -> None:
    _form, token = await _published(client, owner_headers, create_form)
    response = await client.post(f"/api/v1/public/forms/{token}/submit", json={})
    assert response.status_code == 400
