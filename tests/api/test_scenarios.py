"""End-to-end tenant scenarios over HTTP: users, assignment, submit, publish, delete, isolation."""

from httpx import AsyncClient

from formdesk.infrastructure.security.jwt import verify_token


async def _tenant_with_user_and_form(client: AsyncClient, signup_owner) -> dict:
    owner = await signup_owner("tee", "t@example.com")
    me = (await client.get("/api/v1/auth/me", headers=owner)).json()["data"]
    user = (
        await client.post(
            "/api/v1/admin/users",
            json={"username": "u", "email": "u@x.com", "password": "secret1"},
            headers=owner,
        )
    ).json()["data"]
    form = (
        await client.post(
            "/api/v1/admin/forms",
            json={
                "title": "Feedback",
                "fields": [{"id": "q1", "type": "text", "label": "Say hi", "required": True}],
            },
            headers=owner,
        )
    ).json()["data"]
    return {"owner": owner, "owner_id": me["id"], "user": user, "form": form}


async def test_scenario_a_managed_user_login(client: AsyncClient, signup_owner) -> None:
    """Managed user login returns a managed_user token bound to the owner's tenant."""
    ctx = await _tenant_with_user_and_form(client, signup_owner)
    response = await client.post(
        "/api/v1/auth/user/login", json={"email": "u@x.com", "password": "secret1"}
    )
    assert response.status_code == 200
    claims = verify_token(response.json()["data"]["access_token"])
    assert claims["role"] == "managed_user"
    assert claims["tenant_id"] == ctx["owner_id"]
    assert claims["sub"] == ctx["user"]["id"]

    wrong = await client.post(
        "/api/v1/auth/user/login", json={"email": "u@x.com", "password": "wrong-pass"}
    )
    assert wrong.status_code == 401
    assert wrong.json()["error"]["code"] == "AUTHENTICATION_ERROR"


async def test_scenario_b_assignment_is_mirrored(
    client: AsyncClient, signup_owner, login_managed_user
) -> None:
    """New forms are unpublished; assignment shows on both the form and the user."""
    ctx = await _tenant_with_user_and_form(client, signup_owner)
    form, user = ctx["form"], ctx["user"]
    assert form["is_published"] is False
    assert form["public_token"] is None
    assert form["submission_count"] == 0

    response = await client.post(
        f"/api/v1/admin/forms/{form['id']}/assign-users",
        json={"user_ids": [user["id"]]},
        headers=ctx["owner"],
    )
    assert response.status_code == 200
    assert response.json()["data"]["assigned_users"] == [user["id"]]

    users = (await client.get("/api/v1/admin/users", headers=ctx["owner"])).json()["data"]
    assert users[0]["assigned_forms"] == [form["id"]]

    user_headers = await login_managed_user("u@x.com", "secret1")
    assigned = (await client.get("/api/v1/user/forms", headers=user_headers)).json()["data"]
    assert [f["id"] for f in assigned] == [form["id"]]


async def test_scenario_c_submission_counts_and_tenant(
    client: AsyncClient, signup_owner, login_managed_user
) -> None:
    ctx = await _tenant_with_user_and_form(client, signup_owner)
    form_id = ctx["form"]["id"]
    await client.post(
        f"/api/v1/admin/forms/{form_id}/assign-users",
        json={"userIds": [ctx["user"]["id"]]},
        headers=ctx["owner"],
    )
    user_headers = await login_managed_user("u@x.com", "secret1")

    response = await client.post(
        f"/api/v1/user/forms/{form_id}/submit",
        json={"answers": {"q1": "hello"}},
        headers=user_headers,
    )
    assert response.status_code == 201
    submission = response.json()["data"]
    assert submission["tenant_id"] == ctx["owner_id"]
    assert submission["submitted_by"] == ctx["user"]["id"]
    assert submission["status"] == "submitted"

    form = (
        await client.get(f"/api/v1/admin/forms/{form_id}", headers=ctx["owner"])
    ).json()["data"]
    assert form["submission_count"] == 1

    mine = (await client.get("/api/v1/user/submissions", headers=user_headers)).json()["data"]
    assert [s["id"] for s in mine] == [submission["id"]]
    own = await client.get(f"/api/v1/user/submissions/{submission['id']}", headers=user_headers)
    assert own.status_code == 200


async def test_unassigned_user_cannot_submit(
    client: AsyncClient, signup_owner, login_managed_user
) -> None:
    ctx = await _tenant_with_user_and_form(client, signup_owner)
    user_headers = await login_managed_user("u@x.com", "secret1")
    response = await client.post(
        f"/api/v1/user/forms/{ctx['form']['id']}/submit",
        json={"answers": {"q1": "hello"}},
        headers=user_headers,
    )
    assert response.status_code == 403
    assert response.json()["error"]["details"]["reason"] == "not_assigned"


async def test_unassignment_takes_effect_despite_token_snapshot(
    client: AsyncClient, signup_owner, login_managed_user
) -> None:
    """The token's assigned_forms snapshot is ignored; the live record decides."""
    ctx = await _tenant_with_user_and_form(client, signup_owner)
    form_id = ctx["form"]["id"]
    assign_url = f"/api/v1/admin/forms/{form_id}/assign-users"
    await client.post(assign_url, json={"user_ids": [ctx["user"]["id"]]}, headers=ctx["owner"])
    user_headers = await login_managed_user("u@x.com", "secret1")
    assert form_id in verify_token(user_headers["Authorization"][7:])["assigned_forms"]

    await client.post(assign_url, json={"user_ids": []}, headers=ctx["owner"])

    response = await client.get(f"/api/v1/user/forms/{form_id}", headers=user_headers)
    assert response.status_code == 403
    assert (await client.get("/api/v1/user/forms", headers=user_headers)).json()["data"] == []


async def test_scenario_d_publish_is_idempotent(client: AsyncClient, signup_owner) -> None:
    ctx = await _tenant_with_user_and_form(client, signup_owner)
    form_id = ctx["form"]["id"]

    first = await client.post(f"/api/v1/admin/forms/{form_id}/publish", headers=ctx["owner"])
    assert first.status_code == 200
    data = first.json()["data"]
    token = data["form"]["public_token"]
    assert token
    assert data["form"]["is_published"] is True
    assert data["public_url"] == f"http://frontend.test/form/{token}"

    public = await client.get(f"/api/v1/public/forms/{token}")
    assert public.status_code == 200
    view = public.json()["data"]
    assert set(view) == {"id", "title", "description", "public_token", "fields"}
    assert view["title"] == "Feedback"

    second = await client.post(f"/api/v1/admin/forms/{form_id}/publish", headers=ctx["owner"])
    assert second.json()["data"]["form"]["public_token"] == token
    assert second.json()["data"]["form"]["is_published"] is True


async def test_unpublish_hides_form_and_republish_keeps_token(
    client: AsyncClient, signup_owner
) -> None:
    ctx = await _tenant_with_user_and_form(client, signup_owner)
    form_id = ctx["form"]["id"]
    publish_url = f"/api/v1/admin/forms/{form_id}/publish"
    token = (await client.post(publish_url, headers=ctx["owner"])).json()["data"]["form"][
        "public_token"
    ]

    response = await client.post(f"/api/v1/admin/forms/{form_id}/unpublish", headers=ctx["owner"])
    assert response.json()["data"]["is_published"] is False
    hidden = await client.get(f"/api/v1/public/forms/{token}")
    assert hidden.status_code == 404

    again = await client.post(publish_url, headers=ctx["owner"])
    assert again.json()["data"]["form"]["public_token"] == token


async def test_scenario_e_delete_cascades(
    client: AsyncClient, signup_owner, login_managed_user
) -> None:
    """Deleting a form removes its submissions and no others."""
    ctx = await _tenant_with_user_and_form(client, signup_owner)
    owner = ctx["owner"]
    form_id = ctx["form"]["id"]
    other = (
        await client.post(
            "/api/v1/admin/forms",
            json={"title": "Other", "fields": [{"id": "x", "type": "text"}]},
            headers=owner,
        )
    ).json()["data"]
    for fid in (form_id, other["id"]):
        await client.post(
            f"/api/v1/admin/forms/{fid}/assign-users",
            json={"user_ids": [ctx["user"]["id"]]},
            headers=owner,
        )
    user_headers = await login_managed_user("u@x.com", "secret1")
    await client.post(
        f"/api/v1/user/forms/{form_id}/submit", json={"answers": {"q1": "hello"}}, headers=user_headers
    )
    kept = (
        await client.post(
            f"/api/v1/user/forms/{other['id']}/submit",
            json={"answers": {"x": "y"}},
            headers=user_headers,
        )
    ).json()["data"]

    response = await client.delete(f"/api/v1/admin/forms/{form_id}", headers=owner)
    assert response.status_code == 200
    assert response.json()["data"] == {"deleted_submissions": 1}

    missing = await client.get(f"/api/v1/admin/forms/{form_id}", headers=owner)
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "RESOURCE_NOT_FOUND"

    tenant_subs = (await client.get("/api/v1/admin/submissions", headers=owner)).json()["data"]
    assert [s["id"] for s in tenant_subs] == [kept["id"]]
    mine = (await client.get("/api/v1/user/submissions", headers=user_headers)).json()["data"]
    assert [s["id"] for s in mine] == [kept["id"]]


async def test_scenario_f_foreign_tenant_is_forbidden(
    client: AsyncClient, signup_owner
) -> None:
    ctx = await _tenant_with_user_and_form(client, signup_owner)
    intruder = await signup_owner("t2", "t2@example.com")
    form_id = ctx["form"]["id"]

    for method, url in (
        ("GET", f"/api/v1/admin/forms/{form_id}"),
        ("DELETE", f"/api/v1/admin/forms/{form_id}"),
        ("POST", f"/api/v1/admin/forms/{form_id}/publish"),
        ("GET", f"/api/v1/admin/forms/{form_id}/submissions"),
        ("DELETE", f"/api/v1/admin/users/{ctx['user']['id']}"),
        ("GET", f"/api/v1/admin/users/{ctx['user']['id']}/submissions"),
    ):
        response = await client.request(method, url, headers=intruder)
        assert response.status_code == 403, (method, url)
        body = response.json()
        assert body["success"] is False
        assert body["error"]["details"]["reason"] == "foreign_tenant"
        assert "data" not in body

    still_there = await client.get(f"/api/v1/admin/forms/{form_id}", headers=ctx["owner"])
    assert still_there.status_code == 200


async def test_assign_users_rejects_foreign_users(client: AsyncClient, signup_owner) -> None:
    ctx = await _tenant_with_user_and_form(client, signup_owner)
    other_owner = await signup_owner("t2", "t2@example.com")
    stranger = (
        await client.post(
            "/api/v1/admin/users",
            json={"username": "s", "email": "s@example.com", "password": "secret1"},
            headers=other_owner,
        )
    ).json()["data"]

    response = await client.post(
        f"/api/v1/admin/forms/{ctx['form']['id']}/assign-users",
        json={"user_ids": [ctx["user"]["id"], stranger["id"], "nope"]},
        headers=ctx["owner"],
    )
    assert response.status_code == 400
    assert response.json()["error"]["details"]["user_ids"] == [stranger["id"], "nope"]
    form = (
        await client.get(f"/api/v1/admin/forms/{ctx['form']['id']}", headers=ctx["owner"])
    ).json()["data"]
    assert form["assigned_users"] == []


async def test_delete_user_removes_assignments(client: AsyncClient, signup_owner) -> None:
    ctx = await _tenant_with_user_and_form(client, signup_owner)
    form_id = ctx["form"]["id"]
    await client.post(
        f"/api/v1/admin/forms/{form_id}/assign-users",
        json={"user_ids": [ctx["user"]["id"]]},
        headers=ctx["owner"],
    )
    response = await client.delete(f"/api/v1/admin/users/{ctx['user']['id']}", headers=ctx["owner"])
    assert response.status_code == 200
    form = (await client.get(f"/api/v1/admin/forms/{form_id}", headers=ctx["owner"])).json()["data"]
    assert form["assigned_users"] == []
    assert (await client.get("/api/v1/admin/users", headers=ctx["owner"])).json()["data"] == []


async def test_update_form_applies_only_given_attributes(
    client: AsyncClient, owner_headers, create_form
) -> None:
    form = await create_form(owner_headers, title="Before")
    url = f"/api/v1/admin/forms/{form['id']}"

    response = await client.put(url, json={"description": "Details"}, headers=owner_headers)
    data = response.json()["data"]
    assert data["title"] == "Before"
    assert data["description"] == "Details"
    assert len(data["fields"]) == 2

    response = await client.put(
        url,
        json={"title": "  ", "description": "", "public_settings": {"submission_limit": 3}},
        headers=owner_headers,
    )
    data = response.json()["data"]
    assert data["title"] == "Untitled Form"
    assert data["description"] == ""
    assert data["public_settings"]["submission_limit"] == 3


async def test_create_form_with_only_invalid_fields_is_rejected(
    client: AsyncClient, owner_headers
) -> None:
    response = await client.post(
        "/api/v1/admin/forms",
        json={"title": "Bad", "fields": [{"label": "no id"}]},
        headers=owner_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_create_form_accepts_json_encoded_fields(client: AsyncClient, owner_headers) -> None:
    response = await client.post(
        "/api/v1/admin/forms",
        json={"fields": ['[{"id": "a", "kind": "number", "min": "1"}]']},
        headers=owner_headers,
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["title"] == "Untitled Form"
    assert data["fields"][0]["type"] == "number"
    assert data["fields"][0]["min"] == 1


async def test_admin_routes_reject_other_roles(client: AsyncClient, register_standalone) -> None:
    headers = await register_standalone()
    response = await client.get("/api/v1/admin/forms", headers=headers)
    assert response.status_code == 403
    assert response.json()["error"]["details"]["reason"] == "wrong_role"


async def test_admin_routes_require_token(client: AsyncClient) -> None:
    response = await client.get("/api/v1/admin/forms")
    assert response.status_code == 401
    bad = await client.get("/api/v1/admin/forms", headers={"Authorization": "Bearer nope"})
    assert bad.status_code == 401
