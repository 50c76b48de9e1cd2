from tasktrack.models import TaskStatus, UserRole


def test_health(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_register_and_login(client) -> None:
    body = {
        "name": "New User",
        "email": "new.user@tasktrack.io",
        "password": "pass1234",
    }
    response = client.post("/auth/register", json=body)
    assert response.status_code == 200, response.text
    assert response.json()["user"]["role"] == "member"

    response = client.post("/auth/login", json={"email": "new.user@tasktrack.io", "password": "pass1234"})
    assert response.status_code == 200, response.text
    assert response.json()["access_token"]

    response = client.post("/auth/login", json={"email": "new.user@tasktrack.io", "password": "wrong"})
    assert response.status_code == 401


def test_self_registration_always_creates_member(client) -> None:
    body = {
        "name": "Eager User",
        "email": "eager.user@tasktrack.io",
        "password": "pass1234",
        "role": "admin",
    }
    response = client.post("/auth/register", json=body)
    assert response.status_code == 200, response.text
    assert response.json()["user"]["role"] == "member"

    headers = {"Authorization": f"Bearer {response.json()['access_token']}"}
    assert client.get("/users/", headers=headers).status_code == 403
    assert client.post("/tasks/", json={"title": "T0"}, headers=headers).status_code == 403


def test_requests_without_token_are_rejected(client) -> None:
    assert client.get("/tasks/").status_code == 401


def test_end_to_end_approval_flow(client, make_user, auth_header) -> None:
    admin = make_user(UserRole.ADMIN)
    member = make_user(UserRole.MEMBER)
    admin_auth = auth_header(admin)
    member_auth = auth_header(member)

    response = client.post(
        "/tasks/",
        json={"title": "T1", "description": "D1", "assigned_to_id": member.id, "progress_percentage": 0},
        headers=admin_auth,
    )
    assert response.status_code == 200, response.text
    task = response.json()
    assert task["status"] == "assigned"
    task_url = f"/tasks/{task['id']}"

    response = client.put(task_url, json={"status": "in_progress"}, headers=member_auth)
    assert response.status_code == 200, response.text
    assert response.json()["status"] == "in_progress"

    response = client.put(task_url, json={"progress_percentage": 100, "status": "pending_approval"}, headers=member_auth)
    assert response.status_code == 200, response.text
    assert response.json()["status"] == "pending_approval"

    response = client.post(f"{task_url}/approve", json={"comments": "ok"}, headers=admin_auth)
    assert response.status_code == 200, response.text
    approved = response.json()
    assert approved["status"] == "approved"
    assert approved["completion_locked"] is True
    assert [entry["action"] for entry in approved["audit_trail"]] == ["approved"]

    response = client.put(task_url, json={"status": "in_progress"}, headers=admin_auth)
    assert response.status_code == 409

    response = client.get(f"{task_url}/audit", headers=member_auth)
    assert response.status_code == 200
    assert [entry["comments"] for entry in response.json()] == ["ok"]


def test_member_cannot_create_or_retitle(client, make_user, auth_header) -> None:
    admin = make_user(UserRole.ADMIN)
    member = make_user(UserRole.MEMBER)

    response = client.post("/tasks/", json={"title": "T1", "assigned_to_id": member.id}, headers=auth_header(member))
    assert response.status_code == 403

    task = client.post("/tasks/", json={"title": "T1", "assigned_to_id": member.id}, headers=auth_header(admin)).json()
    response = client.put(
        f"/tasks/{task['id']}",
        json={"title": "Mine now", "progress_percentage": 40},
        headers=auth_header(member),
    )
    assert response.status_code == 403


def test_manager_rejects_task_of_report(client, make_user, auth_header) -> None:
    manager = make_user(UserRole.MANAGER)
    member = make_user(UserRole.MEMBER, manager=manager)
    outsider = make_user(UserRole.MANAGER)

    task = client.post("/tasks/", json={"title": "T2", "assigned_to_id": member.id}, headers=auth_header(manager)).json()
    task_url = f"/tasks/{task['id']}"
    client.put(task_url, json={"status": "in_progress"}, headers=auth_header(member))
    client.put(task_url, json={"progress_percentage": 100, "status": "pending_approval"}, headers=auth_header(member))

    response = client.post(f"{task_url}/reject", json={"reason": "Missing tests"}, headers=auth_header(outsider))
    assert response.status_code == 403

    response = client.post(f"{task_url}/reject", json={"comments": "no reason"}, headers=auth_header(manager))
    assert response.status_code == 400

    response = client.post(f"{task_url}/reject", json={"reason": "Missing tests", "comments": "Add tests"}, headers=auth_header(manager))
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["status"] == "rejected"
    assert body["rejection_reason"] == "Missing tests"


def test_admin_manages_hierarchy(client, make_user, auth_header) -> None:
    admin = make_user(UserRole.ADMIN)
    top = make_user(UserRole.MANAGER)
    middle = make_user(UserRole.MANAGER, manager=top)
    bottom = make_user(UserRole.MEMBER, manager=middle)

    response = client.get(f"/users/{top.id}/subordinates", headers=auth_header(top))
    assert response.status_code == 200
    assert {user["id"] for user in response.json()} == {middle.id, bottom.id}

    response = client.put(f"/users/{top.id}", json={"manager_id": top.id}, headers=auth_header(admin))
    assert response.status_code == 400

    response = client.put(f"/users/{top.id}", json={"manager_id": bottom.id}, headers=auth_header(admin))
    assert response.status_code == 400

    response = client.put(f"/users/{bottom.id}", json={"manager_id": top.id}, headers=auth_header(admin))
    assert response.status_code == 200
    assert response.json()["manager_id"] == top.id

    response = client.get("/users/", headers=auth_header(top))
    assert response.status_code == 403


def test_can_edit_reports_permissions_per_actor(client, make_user, make_task, auth_header) -> None:
    manager = make_user(UserRole.MANAGER)
    member = make_user(UserRole.MEMBER, manager=manager)
    outsider = make_user(UserRole.MANAGER)
    task = make_task(manager, member, status=TaskStatus.PENDING_APPROVAL, progress=100)
    url = f"/tasks/{task.id}/can-edit"

    response = client.get(url, headers=auth_header(manager))
    assert response.status_code == 200, response.text
    assert response.json() == {
        "task_id": task.id,
        "user_id": manager.id,
        "user_role": "manager",
        "can_access": True,
        "can_update_details": True,
        "can_decide": True,
    }

    body = client.get(url, headers=auth_header(member)).json()
    assert body["user_role"] == "member"
    assert body["can_access"] is True
    assert body["can_update_details"] is False
    assert body["can_decide"] is False

    body = client.get(url, headers=auth_header(outsider)).json()
    assert body["can_access"] is False
    assert body["can_decide"] is False

    assert client.get("/tasks/9999/can-edit", headers=auth_header(manager)).status_code == 404


def test_can_edit_after_approval_is_read_only(client, make_user, make_task, auth_header) -> None:
    admin = make_user(UserRole.ADMIN)
    member = make_user(UserRole.MEMBER)
    task = make_task(admin, member, status=TaskStatus.APPROVED, progress=100, completion_locked=True)

    body = client.get(f"/tasks/{task.id}/can-edit", headers=auth_header(admin)).json()
    assert body["can_access"] is True
    assert body["can_update_details"] is False
    assert body["can_decide"] is False
