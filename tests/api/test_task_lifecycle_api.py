"""End-to-end task lifecycle over HTTP, checking status history and the audit trail."""

from httpx import AsyncClient


async def test_create_assign_review_complete(client: AsyncClient, users, auth_headers) -> None:
    """Secretary creates, leader assigns, officer submits, leader completes."""
    secretary, leader, officer, admin = (
        users["secretary"],
        users["leader"],
        users["officer"],
        users["admin"],
    )
    create_body = {"description": "Prepare budget summary", "assigned_to_id": leader.id}
    response = await client.post(
        "/api/v1/tasks", json=create_body, headers=auth_headers(secretary)
    )
    assert response.status_code == 201
    task = response.json()
    task_id = task["id"]
    assert task["status"] == "NotStarted"
    assert task["remaining_time"]["text"] == "no deadline"
    assert len(task["status_history"]) == 1

    response = await client.put(
        f"/api/v1/tasks/{task_id}/assign",
        json={"assigned_to_id": officer.id},
        headers=auth_headers(leader),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "Processing"

    response = await client.put(
        f"/api/v1/tasks/{task_id}/submit-review", headers=auth_headers(officer)
    )
    assert response.status_code == 200
    reviewed = response.json()
    assert reviewed["status"] == "Review"
    assert reviewed["assigned_to_id"] == leader.id

    response = await client.put(
        f"/api/v1/tasks/{task_id}/status",
        json={"status": "Completed", "notes": "Approved"},
        headers=auth_headers(leader),
    )
    assert response.status_code == 200
    done = response.json()
    assert done["status"] == "Completed"
    assert done["completion_date"] is not None

    response = await client.get(
        f"/api/v1/tasks/{task_id}/history", headers=auth_headers(leader)
    )
    history = response.json()
    assert [(h["old_status"], h["new_status"]) for h in history] == [
        ("", "NotStarted"),
        ("NotStarted", "Processing"),
        ("Processing", "Review"),
        ("Review", "Completed"),
    ]
    assert history[-1]["notes"] == "Approved"

    response = await client.get(
        f"/api/v1/audit/entity-trail/task/{task_id}", headers=auth_headers(admin)
    )
    assert response.status_code == 200
    trail = response.json()["items"]
    assert [r["action"] for r in trail] == [
        "task_create",
        "task_assign",
        "task_update",
        "task_update",
    ]
    assert all(r["success"] for r in trail)
    assert [r["user_id"] for r in trail] == [secretary.id, leader.id, officer.id, leader.id]
    first = trail[0]
    assert first["entity_id"] == task_id
    assert first["description"] == "Created new task"
    assert first["new_values"] == create_body
    assert first["metadata"]["status_code"] == 201
    assert first["metadata"]["method"] == "POST"
    assert first["user_agent"] == "pytest-client"
    assert first["request_id"]
    assert trail[3]["description"] == "Updated task status"


async def test_workflow_view(client: AsyncClient, users, auth_headers) -> None:
    leader, officer = users["leader"], users["officer"]
    response = await client.post(
        "/api/v1/tasks",
        json={"description": "Check contracts", "assigned_to_id": officer.id},
        headers=auth_headers(leader),
    )
    task_id = response.json()["id"]
    await client.put(
        f"/api/v1/tasks/{task_id}/assign",
        json={"assigned_to_id": officer.id},
        headers=auth_headers(leader),
    )
    response = await client.get(
        f"/api/v1/tasks/{task_id}/workflow", headers=auth_headers(officer)
    )
    assert response.status_code == 200
    workflow = response.json()
    assert workflow["current_status"] == "Processing"
    assert workflow["progress_percent"] == 25
    assert [s["reached"] for s in workflow["stages"]] == [True, True, False, False]


async def test_forward_leaves_comment(client: AsyncClient, users, auth_headers) -> None:
    secretary, leader, officer, officer2 = (
        users["secretary"],
        users["leader"],
        users["officer"],
        users["officer2"],
    )
    response = await client.post(
        "/api/v1/tasks",
        json={"description": "Draft letter", "assigned_to_id": officer.id},
        headers=auth_headers(secretary),
    )
    task_id = response.json()["id"]
    response = await client.post(
        f"/api/v1/tasks/{task_id}/forward",
        json={"assigned_to_id": officer2.id, "comment": "urgent"},
        headers=auth_headers(leader),
    )
    assert response.status_code == 200
    assert response.json()["assigned_to_id"] == officer2.id

    response = await client.get(
        f"/api/v1/tasks/{task_id}/comments", headers=auth_headers(leader)
    )
    assert [c["content"] for c in response.json()] == [
        "Forwarded task from Officer Ngo to Officer Vo. Note: urgent"
    ]


async def test_list_is_scoped_by_role(client: AsyncClient, users, auth_headers) -> None:
    secretary, officer, officer2 = users["secretary"], users["officer"], users["officer2"]
    for assignee in (officer, officer2, officer2):
        await client.post(
            "/api/v1/tasks",
            json={"description": "Filing", "assigned_to_id": assignee.id},
            headers=auth_headers(secretary),
        )

    response = await client.get("/api/v1/tasks", headers=auth_headers(officer2))
    body = response.json()
    assert body["pagination"]["total_items"] == 2
    assert all(t["assigned_to_id"] == officer2.id for t in body["items"])

    response = await client.get(
        "/api/v1/tasks", params={"limit": 2}, headers=auth_headers(secretary)
    )
    body = response.json()
    assert body["pagination"] == {
        "current_page": 1,
        "total_pages": 2,
        "total_items": 3,
        "items_per_page": 2,
    }

    response = await client.get(
        "/api/v1/tasks", params={"status": "Received"}, headers=auth_headers(secretary)
    )
    assert response.json()["pagination"]["total_items"] == 3

    response = await client.get(
        "/api/v1/tasks", params={"status": "Done"}, headers=auth_headers(secretary)
    )
    assert response.status_code == 400
    assert response.json()["error_code"] == "VALIDATION_ERROR"

    response = await client.get(
        "/api/v1/tasks",
        params={"page": "99999999999999999999"},
        headers=auth_headers(secretary),
    )
    assert response.status_code == 422


async def test_submit_for_review_from_not_started_is_rejected(
    client: AsyncClient, users, auth_headers
) -> None:
    response = await client.post(
        "/api/v1/tasks",
        json={"description": "Review minutes", "assigned_to_id": users["officer"].id},
        headers=auth_headers(users["secretary"]),
    )
    task_id = response.json()["id"]
    response = await client.put(
        f"/api/v1/tasks/{task_id}/submit-review", headers=auth_headers(users["officer"])
    )
    assert response.status_code == 400
    assert response.json()["error_code"] == "INVALID_STATE"


async def test_delete_task_and_missing_task(client: AsyncClient, users, auth_headers) -> None:
    secretary = users["secretary"]
    response = await client.post(
        "/api/v1/tasks",
        json={"description": "Temporary", "assigned_to_id": users["officer"].id},
        headers=auth_headers(secretary),
    )
    task_id = response.json()["id"]
    response = await client.delete(f"/api/v1/tasks/{task_id}", headers=auth_headers(secretary))
    assert response.status_code == 204
    response = await client.get(f"/api/v1/tasks/{task_id}", headers=auth_headers(secretary))
    assert response.status_code == 404
    assert response.json()["error_code"] == "RESOURCE_NOT_FOUND"


async def test_task_deadline_validation(client: AsyncClient, users, auth_headers) -> None:
    response = await client.post(
        "/api/v1/tasks",
        json={
            "description": "Bad deadline",
            "assigned_to_id": users["officer"].id,
            "deadline": "31/12/2024",
        },
        headers=auth_headers(users["secretary"]),
    )
    assert response.status_code == 400
    assert response.json()["details"] == {"field": "deadline"}


async def test_linked_document_task(
    client: AsyncClient, users, auth_headers, incoming_document_id
) -> None:
    response = await client.post(
        "/api/v1/tasks",
        json={
            "description": "Process incoming request",
            "assigned_to_id": users["officer"].id,
            "linked_document_id": incoming_document_id,
            "deadline": "2030-01-15",
        },
        headers=auth_headers(users["secretary"]),
    )
    assert response.status_code == 201
    task = response.json()
    assert task["task_type"] == "document_linked"
    assert task["remaining_time"]["urgency"] == "normal"
