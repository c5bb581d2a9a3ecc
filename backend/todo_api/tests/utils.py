def register(client, email="alice@example.com", password="pw123456", name="Alice"):
    return client.post("/auth/register", json={"email": email, "password": password, "name": name})


def login(client, email="alice@example.com", password="pw123456"):
    return client.post("/auth/login", json={"email": email, "password": password})


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}
