from tests.conftest import register

ACME = {"name": "Acme", "email": "a@acme.com"}


def _create(client, headers, **fields):
    r = client.post("/api/clients", headers=headers, json={**ACME, **fields})
    assert r.status_code == 201, r.text
    return r.json()


def test_clients_require_auth(client):
    assert client.get("/api/clients").status_code == 401
    assert client.post("/api/clients", json=ACME).status_code == 401


def test_create_and_get_client(client):
    headers = register(client, "alice")
    created = _create(client, headers, client_type="PJ", tax_id="12.345.678/0001-90")
    assert created["name"] == "Acme"
    assert created["classification"] == "potential"
    assert created["country"] == "Brasil"

    r = client.get(f"/api/clients/{created['id']}", headers=headers)
    assert r.status_code == 200
    assert r.json()["tax_id"] == "12.345.678/0001-90"


def test_owner_is_taken_from_token_not_payload(client):
    alice = register(client, "alice")
    bob = register(client, "bob")
    bob_id = client.get("/api/user", headers=bob).json()["id"]
    alice_id = client.get("/api/user", headers=alice).json()["id"]

    created = _create(client, alice, owner_id=bob_id)
    assert created["owner_id"] == alice_id
    assert client.get("/api/clients", headers=bob).json() == []


def test_alice_client_invisible_to_bob(client):
    alice = register(client, "alice", "alice@x.com", "pw123456")
    acme = _create(client, alice)
    bob = register(client, "bob")

    assert client.get("/api/clients", headers=bob).json() == []
    assert client.get(f"/api/clients/{acme['id']}", headers=bob).status_code == 404
    assert client.put(
        f"/api/clients/{acme['id']}", headers=bob, json={"name": "Hijacked"}
    ).status_code == 404
    assert client.delete(f"/api/clients/{acme['id']}", headers=bob).status_code == 404

    still = client.get(f"/api/clients/{acme['id']}", headers=alice).json()
    assert still["name"] == "Acme"


def test_foreign_id_and_missing_id_look_the_same(client):
    alice = register(client, "alice")
    acme = _create(client, alice)
    bob = register(client, "bob")

    foreign = client.get(f"/api/clients/{acme['id']}", headers=bob)
    missing = client.get("/api/clients/99999", headers=bob)
    assert foreign.status_code == missing.status_code == 404
    assert foreign.json() == missing.json()


def test_list_is_newest_first(client):
    headers = register(client, "alice")
    first = _create(client, headers, name="First")
    second = _create(client, headers, name="Second")
    ids = [c["id"] for c in client.get("/api/clients", headers=headers).json()]
    assert ids == [second["id"], first["id"]]


def test_search_matches_any_field_case_insensitive(client):
    headers = register(client, "alice")
    _create(client, headers, name="Padaria Central", city="Recife")
    _create(client, headers, name="Oficina", email="contato@oficina.com", business_area="Mecânica")
    _create(client, headers, name="Loja", email="loja@x.com", mobile_phone="81 99999-0000")

    def names(q):
        r = client.get("/api/clients", headers=headers, params={"search": q})
        return sorted(c["name"] for c in r.json())

    assert names("recife") == ["Padaria Central"]
    assert names("MEC") == ["Oficina"]
    assert names("99999") == ["Loja"]
    assert names("x.com") == ["Loja"]
    assert names("o") == ["Loja", "Oficina", "Padaria Central"]
    assert names("nothing-like-this") == []


def test_search_never_crosses_tenants(client):
    alice = register(client, "alice")
    _create(client, alice, name="Acme Recife", city="Recife")
    bob = register(client, "bob")
    r = client.get("/api/clients", headers=bob, params={"search": "Recife"})
    assert r.json() == []


def test_partial_update(client):
    headers = register(client, "alice")
    acme = _create(client, headers, city="Recife")
    r = client.put(
        f"/api/clients/{acme['id']}", headers=headers, json={"classification": "active"}
    )
    assert r.status_code == 200
    body = r.json()
    assert body["classification"] == "active"
    assert body["city"] == "Recife"
    assert body["name"] == "Acme"


def test_validation_errors(client):
    headers = register(client, "alice")
    assert client.post("/api/clients", headers=headers, json={"name": "X"}).status_code == 422
    assert client.post(
        "/api/clients", headers=headers, json={**ACME, "email": "not-an-email"}
    ).status_code == 422
    assert client.post(
        "/api/clients", headers=headers, json={**ACME, "client_type": "XX"}
    ).status_code == 422
    assert client.get("/api/clients/abc", headers=headers).status_code == 422


def test_delete_client(client):
    headers = register(client, "alice")
    acme = _create(client, headers)
    assert client.delete(f"/api/clients/{acme['id']}", headers=headers).status_code == 204
    assert client.get(f"/api/clients/{acme['id']}", headers=headers).status_code == 404
    assert client.delete(f"/api/clients/{acme['id']}", headers=headers).status_code == 404


def test_search_treats_wildcards_literally(client):
    headers = register(client, "alice")
    _create(client, headers, name="Acme")
    _create(client, headers, name="Desconto 50%", email="promo@x.com")
    _create(client, headers, name="Loja_Centro", email="centro@x.com")

    def names(q):
        r = client.get("/api/clients", headers=headers, params={"search": q})
        return sorted(c["name"] for c in r.json())

    assert names("%") == ["Desconto 50%"]
    assert names("_") == ["Loja_Centro"]
    assert names("e_c") == []
