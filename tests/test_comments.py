"""Task comments and single-level replies."""

from tests.conftest import auth


def _setup(client, board, alice, bob, role="viewer"):
    client.post(f"/boards/{board['id']}/members", json={"email": bob.email, "role": role}, headers=auth(alice))
    resp = client.post(f"/columns/{board['columns'][0]['id']}/tasks", json={"title": "Read"}, headers=auth(alice))
    return resp.json()


def _comment(client, task, user, content, parent_id=None):
    return client.post(
        f"/tasks/{task['id']}/comments", json={"content": content, "parent_id": parent_id}, headers=auth(user)
    )


def test_viewer_can_comment(client, board, alice, bob):
    task = _setup(client, board, alice, bob)

    resp = _comment(client, task, bob, "  Which chapter?  ")
    assert resp.status_code == 201
    body = resp.json()
    assert body["content"] == "Which chapter?"
    assert body["user"]["email"] == bob.email
    assert body["parent_id"] is None


def test_outsider_cannot_comment(client, board, alice, bob, carol):
    task = _setup(client, board, alice, bob)
    assert _comment(client, task, carol, "hi").status_code == 403


def test_empty_comment_is_rejected(client, board, alice, bob):
    task = _setup(client, board, alice, bob)
    assert _comment(client, task, alice, "   ").status_code == 400


def test_replies_are_grouped_under_parent(client, board, alice, bob):
    task = _setup(client, board, alice, bob)
    first = _comment(client, task, alice, "first").json()
    second = _comment(client, task, bob, "second").json()
    _comment(client, task, bob, "reply one", first["id"])
    _comment(client, task, alice, "reply two", first["id"])

    threads = client.get(f"/tasks/{task['id']}/comments", headers=auth(bob)).json()
    assert [t["content"] for t in threads] == ["first", "second"]
    assert [r["content"] for r in threads[0]["replies"]] == ["reply one", "reply two"]
    assert threads[1]["id"] == second["id"]
    assert threads[1]["replies"] == []


def test_reply_to_reply_is_rejected(client, board, alice, bob):
    task = _setup(client, board, alice, bob)
    top = _comment(client, task, alice, "top").json()
    reply = _comment(client, task, bob, "reply", top["id"]).json()

    assert _comment(client, task, alice, "nested", reply["id"]).status_code == 400


def test_parent_must_belong_to_the_task(client, board, alice, bob):
    task = _setup(client, board, alice, bob)
    other = client.post(
        f"/columns/{board['columns'][1]['id']}/tasks", json={"title": "Other"}, headers=auth(alice)
    ).json()
    foreign = _comment(client, other, alice, "elsewhere").json()

    assert _comment(client, task, alice, "reply", foreign["id"]).status_code == 404
    assert _comment(client, task, alice, "reply", 9999).status_code == 404


def test_comment_on_missing_task(client, alice):
    resp = client.post("/tasks/9999/comments", json={"content": "hello"}, headers=auth(alice))
    assert resp.status_code == 404
