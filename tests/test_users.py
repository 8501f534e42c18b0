def test_profile_requires_auth(client):
    assert client.get("/users").status_code == 401
    assert client.put("/users", data={"fullName": "x"}).status_code == 401


def test_get_profile(client, make_user):
    user = make_user(full_name="Dana")
    response = client.get("/users", headers=user["headers"])
    assert response.status_code == 200
    assert response.json()["fullName"] == "Dana"
    assert "password" not in response.json()


def test_update_name_email_and_avatar(client, make_user, media):
    user = make_user(full_name="Dana")
    files = {"avatar": ("me.jpg", b"jpegbytes", "image/jpeg")}
    response = client.put(
        "/users",
        data={"fullName": "Dana Scully", "email": "Dana.S@Example.com"},
        files=files,
        headers=user["headers"],
    )
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Profile updated successfully"
    assert body["user"]["fullName"] == "Dana Scully"
    assert body["user"]["email"] == "dana.s@example.com"
    assert body["user"]["avatar"] == "https://media.example.com/uploads/me.jpg"

    # new email works for sign-in
    response = client.post("/auth/sign-in", json={"email": "dana.s@example.com", "password": "secret123"})
    assert response.status_code == 200


def test_update_email_taken_by_someone_else(client, make_user):
    first, second = make_user(), make_user()
    response = client.put("/users", data={"email": first["email"]}, headers=second["headers"])
    assert response.status_code == 400
    assert response.json()["detail"] == "Email already exists"

    # keeping your own email is fine
    response = client.put("/users", data={"email": second["email"]}, headers=second["headers"])
    assert response.status_code == 200


def test_update_email_must_be_an_address(client, make_user):
    user = make_user()
    response = client.put("/users", data={"email": "not-an-email"}, headers=user["headers"])
    assert response.status_code == 400
    assert response.json()["detail"] == "email is invalid"

    profile = client.get("/users", headers=user["headers"]).json()
    assert profile["email"] == user["email"]
