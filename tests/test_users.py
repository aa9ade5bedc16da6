# tests/test_users.py

from __future__ import annotations


async def test_update_photo_sets_value(client, user):
    response = await client.patch(
        "/api/user/update-photo",
        json={"userId": user["id"], "photo": "data:image/png;base64,AAAA"},
    )

    assert response.status_code == 200
    assert response.json() == {"message": "Profile updated", "profilePhoto": "data:image/png;base64,AAAA"}

    login = await client.post("/api/login", json={"email": "a@x.com", "password": "p1"})
    assert login.json()["user"]["profilePhoto"] == "data:image/png;base64,AAAA"


async def test_update_photo_with_null_clears_it(client, user):
    await client.patch("/api/user/update-photo", json={"userId": user["id"], "photo": "https://img/x.png"})

    response = await client.patch("/api/user/update-photo", json={"userId": user["id"], "photo": None})

    assert response.status_code == 200
    assert response.json()["profilePhoto"] == ""


async def test_update_photo_requires_user_id(client):
    response = await client.patch("/api/user/update-photo", json={"photo": "https://img/x.png"})

    assert response.status_code == 400
    assert response.json() == {"message": "userId is required"}


async def test_update_photo_unknown_user_is_404(client):
    response = await client.patch("/api/user/update-photo", json={"userId": "nobody", "photo": ""})

    assert response.status_code == 404


async def test_delete_account_removes_tasks_and_login(client, user):
    for text in ("a", "b"):
        await client.post("/api/tasks", json={"userId": user["id"], "text": text})

    response = await client.delete(f"/api/user/{user['id']}")

    assert response.status_code == 200
    assert response.json() == {"message": "Account and all associated data deleted forever."}
    tasks = await client.get(f"/api/tasks/{user['id']}")
    assert tasks.json() == []
    login = await client.post("/api/login", json={"email": "a@x.com", "password": "p1"})
    assert login.status_code == 401


async def test_delete_unknown_account_is_404(client):
    response = await client.delete("/api/user/nobody")

    assert response.status_code == 404
    assert response.json() == {"message": "User not found"}


async def test_delete_account_leaves_other_users_alone(client, register_user, user):
    other = await register_user(email="b@x.com", password="p2")
    await client.post("/api/tasks", json={"userId": other["id"], "text": "keep me"})

    await client.delete(f"/api/user/{user['id']}")

    tasks = await client.get(f"/api/tasks/{other['id']}")
    assert [t["text"] for t in tasks.json()] == ["keep me"]


async def test_update_photo_with_any_falsy_value_clears_it(client, user):
    for falsy in (False, 0, ""):
        await client.patch("/api/user/update-photo", json={"userId": user["id"], "photo": "https://img/x.png"})

        response = await client.patch("/api/user/update-photo", json={"userId": user["id"], "photo": falsy})

        assert response.status_code == 200
        assert response.json()["profilePhoto"] == ""
