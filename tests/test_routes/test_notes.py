"""Tests for /notes routes.

Tests cover:
- Create defaults and response envelope
- Newest-first listing scoped to the caller
- Partial update preserving untouched fields
- Cross-owner get/update/delete answered as not found
"""

from tests.support import USER_B, as_user


async def test_create_note_applies_defaults(client):
    response = await client.post("/notes", json={})

    assert response.status_code == 201
    note = response.json()["note"]
    assert note["title"] == "Untitled Note"
    assert note["content"] == ""
    assert isinstance(note["id"], int)
    assert note["created_at"]
    assert note["updated_at"]


async def test_blank_title_falls_back_to_default(client):
    response = await client.post("/notes", json={"title": "   ", "content": "Body"})

    note = response.json()["note"]
    assert note["title"] == "Untitled Note"

    response = await client.put(f"/notes/{note['id']}", json={"title": "  Plan  "})
    assert response.json()["note"]["title"] == "Plan"

    response = await client.put(f"/notes/{note['id']}", json={"title": " "})
    assert response.json()["note"]["title"] == "Untitled Note"


async def test_list_notes_newest_first(client):
    for title in ("first", "second", "third"):
        await client.post("/notes", json={"title": title})

    response = await client.get("/notes")

    assert response.status_code == 200
    assert [note["title"] for note in response.json()["notes"]] == ["third", "second", "first"]


async def test_list_notes_empty_is_not_an_error(client):
    response = await client.get("/notes")

    assert response.status_code == 200
    assert response.json() == {"notes": []}


async def test_list_notes_only_returns_callers_rows(client):
    await client.post("/notes", json={"title": "mine"})
    await client.post("/notes", json={"title": "theirs"}, headers=as_user(USER_B))

    response = await client.get("/notes")

    assert [note["title"] for note in response.json()["notes"]] == ["mine"]


async def test_partial_update_keeps_other_fields(client):
    created = (await client.post("/notes", json={"title": "Plan", "content": "Body"})).json()

    response = await client.put(f"/notes/{created['note']['id']}", json={"content": "New body"})

    assert response.status_code == 200
    note = response.json()["note"]
    assert note["title"] == "Plan"
    assert note["content"] == "New body"
    assert note["updated_at"] >= created["note"]["updated_at"]


async def test_get_missing_note_is_404(client):
    response = await client.get("/notes/999")

    assert response.status_code == 404
    assert response.json() == {"error": "Note not found"}


async def test_other_users_note_is_not_found(client):
    note_id = (await client.post("/notes", json={"title": "private"})).json()["note"]["id"]

    get_response = await client.get(f"/notes/{note_id}", headers=as_user(USER_B))
    put_response = await client.put(
        f"/notes/{note_id}", json={"title": "hijacked"}, headers=as_user(USER_B)
    )

    assert get_response.status_code == 404
    assert get_response.json() == {"error": "Note not found"}
    assert put_response.status_code == 404

    still_there = await client.get(f"/notes/{note_id}")
    assert still_there.json()["note"]["title"] == "private"


async def test_delete_other_users_note_leaves_it_in_place(client):
    note_id = (await client.post("/notes", json={"title": "keep"})).json()["note"]["id"]

    response = await client.delete(f"/notes/{note_id}", headers=as_user(USER_B))

    assert response.status_code == 404
    assert response.json() == {"error": "Note not found"}
    assert (await client.get(f"/notes/{note_id}")).status_code == 200


async def test_delete_note(client):
    note_id = (await client.post("/notes", json={"title": "gone"})).json()["note"]["id"]

    response = await client.delete(f"/notes/{note_id}")

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert (await client.get(f"/notes/{note_id}")).status_code == 404
