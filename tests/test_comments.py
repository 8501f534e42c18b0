from bson import ObjectId


def comment(client, user, post_id, text="nice post"):
    return client.post(f"/comments/{post_id}", json={"text": text}, headers=user["headers"])


def test_create_and_list_comments(client, make_user, make_post):
    author, reader = make_user(), make_user(full_name="Reader")
    post_id = make_post(author)

    response = comment(client, reader, post_id, "  first!  ")
    assert response.status_code == 201
    body = response.json()
    assert body["text"] == "first!"
    assert body["post"] == post_id
    assert body["author"] == {"id": reader["id"], "fullName": "Reader", "email": reader["email"]}

    comment(client, author, post_id, "second")

    # listing is public
    listed = client.get(f"/comments/{post_id}").json()
    assert [c["text"] for c in listed] == ["second", "first!"]


def test_comment_requires_auth_and_text(client, make_user, make_post):
    user = make_user()
    post_id = make_post(user)

    assert client.post(f"/comments/{post_id}", json={"text": "hi"}).status_code == 401
    assert comment(client, user, post_id, "   ").status_code == 400
    assert client.post(f"/comments/{post_id}", json={}, headers=user["headers"]).status_code == 400


def test_comment_on_bad_or_missing_post(client, make_user):
    user = make_user()
    assert comment(client, user, "nope").status_code == 400
    assert comment(client, user, str(ObjectId())).status_code == 404
    assert client.get("/comments/nope").status_code == 400


def test_only_author_updates_comment(client, make_user, make_post):
    author, other = make_user(), make_user()
    post_id = make_post(author)
    comment_id = comment(client, author, post_id).json()["id"]

    response = client.put(f"/comments/comment/{comment_id}", json={"text": "edited"}, headers=other["headers"])
    assert response.status_code == 403

    response = client.put(f"/comments/comment/{comment_id}", json={"text": "edited"}, headers=author["headers"])
    assert response.status_code == 200
    assert response.json()["text"] == "edited"

    missing = client.put(f"/comments/comment/{ObjectId()}", json={"text": "x"}, headers=author["headers"])
    assert missing.status_code == 404


def test_comment_author_can_delete(client, make_user, make_post):
    post_author, commenter = make_user(), make_user()
    post_id = make_post(post_author)
    comment_id = comment(client, commenter, post_id).json()["id"]

    response = client.delete(f"/comments/comment/{comment_id}", headers=commenter["headers"])
    assert response.status_code == 200
    assert response.json() == {"message": "Comment deleted"}
    assert client.get(f"/comments/{post_id}").json() == []


def test_post_author_can_delete_any_comment_on_their_post(client, make_user, make_post):
    post_author, commenter = make_user(), make_user()
    post_id = make_post(post_author)
    comment_id = comment(client, commenter, post_id).json()["id"]

    response = client.delete(f"/comments/comment/{comment_id}", headers=post_author["headers"])
    assert response.status_code == 200


def test_third_user_cannot_delete_comment(client, make_user, make_post):
    post_author, commenter, stranger = make_user(), make_user(), make_user()
    post_id = make_post(post_author)
    comment_id = comment(client, commenter, post_id).json()["id"]

    response = client.delete(f"/comments/comment/{comment_id}", headers=stranger["headers"])
    assert response.status_code == 403
    assert len(client.get(f"/comments/{post_id}").json()) == 1

    assert client.delete(f"/comments/comment/{ObjectId()}", headers=stranger["headers"]).status_code == 404
