from conftest import auth


def test_add_list_and_ids(client, customer_token):
    headers = auth(customer_token)
    r = client.post("/favorites", json={"productId": 5}, headers=headers)
    assert r.status_code == 201
    r = client.post("/favorites", json={"productId": 5}, headers=headers)
    assert r.status_code == 200

    client.post("/favorites", json={"productId": 2}, headers=headers)
    favorites = client.get("/favorites", headers=headers).json()
    assert [f["id"] for f in favorites] == [2, 5]
    assert favorites[1]["name"] == "Reloj Inteligente"
    assert favorites[1]["favoritedAt"]
    assert sorted(client.get("/favorites/ids", headers=headers).json()) == [2, 5]


def test_add_unknown_product(client, customer_token):
    assert client.post("/favorites", json={"productId": 404}, headers=auth(customer_token)).status_code == 404


def test_remove(client, customer_token):
    headers = auth(customer_token)
    assert client.delete("/favorites/5", headers=headers).status_code == 404
    client.post("/favorites", json={"productId": 5}, headers=headers)
    assert client.delete("/favorites/5", headers=headers).status_code == 200
    assert client.get("/favorites/ids", headers=headers).json() == []


def test_toggle_twice_restores_membership(client, customer_token):
    headers = auth(customer_token)
    for start in ([], [7]):
        if start:
            client.post("/favorites", json={"productId": 7}, headers=headers)
        before = client.get("/favorites/ids", headers=headers).json()
        first = client.post("/favorites/toggle", json={"productId": 7}, headers=headers).json()
        second = client.post("/favorites/toggle", json={"productId": 7}, headers=headers).json()
        assert {first["action"], second["action"]} == {"added", "removed"}
        assert client.get("/favorites/ids", headers=headers).json() == before


def test_toggle_unknown_product(client, customer_token):
    r = client.post("/favorites/toggle", json={"productId": 404}, headers=auth(customer_token))
    assert r.status_code == 404


def test_favorites_require_auth(client):
    assert client.get("/favorites").status_code == 401
    assert client.get("/favorites/ids").status_code == 401
