import pytest

from maladireta.models.orm import (
    Campaign,
    CampaignAttachment,
    CampaignSend,
    Client,
    EmailConfiguration,
    User,
)
from maladireta.services import accounts
from tests.conftest import login, register

CAROL = {
    "username": "carol",
    "email": "carol@x.com",
    "password": "pw123456",
    "role": "user",
    "can_access_direct_mail": True,
    "can_access_email_config": False,
}


def _seed_data(client, headers):
    client.post("/api/clients", headers=headers, json={"name": "Acme", "email": "a@acme.com"})
    client.post(
        "/api/campaigns", headers=headers, json={"name": "N", "channel": "email", "body": "Oi"}
    )
    client.post(
        "/api/email-config",
        headers=headers,
        json={
            "smtp_host": "smtp.x.com",
            "smtp_user": "u",
            "smtp_pass": "p",
            "from_email": "u@x.com",
        },
    )


def _owned_counts(db, owner_id):
    return (
        db.query(Client).filter(Client.owner_id == owner_id).count(),
        db.query(Campaign).filter(Campaign.owner_id == owner_id).count(),
        db.query(EmailConfiguration).filter(EmailConfiguration.owner_id == owner_id).count(),
    )


def test_admin_routes_reject_regular_users(client):
    headers = register(client, "alice")
    assert client.get("/api/admin/users", headers=headers).status_code == 403
    assert client.post("/api/admin/users", headers=headers, json=CAROL).status_code == 403
    assert client.delete("/api/admin/users/clear-all", headers=headers).status_code == 403


def test_admin_routes_require_auth(client):
    assert client.get("/api/admin/users").status_code == 401


def test_list_excludes_caller_by_default(client, admin_headers):
    register(client, "alice")
    names = [u["username"] for u in client.get("/api/admin/users", headers=admin_headers).json()]
    assert names == ["alice"]
    everyone = client.get(
        "/api/admin/users", headers=admin_headers, params={"include_self": True}
    ).json()
    assert sorted(u["username"] for u in everyone) == ["alice", "root"]


def test_admin_created_user_with_email_config_disabled_is_forbidden(client, admin_headers):
    r = client.post("/api/admin/users", headers=admin_headers, json=CAROL)
    assert r.status_code == 201
    assert r.json()["can_access_email_config"] is False

    carol = login(client, "carol")
    assert client.get("/api/email-config", headers=carol).status_code == 403
    assert client.get("/api/campaigns", headers=carol).status_code == 200


def test_admin_can_create_admin(client, admin_headers):
    r = client.post(
        "/api/admin/users", headers=admin_headers, json={**CAROL, "role": "admin"}
    )
    assert r.status_code == 201
    carol = login(client, "carol")
    # admins hold every capability regardless of flags
    assert client.get("/api/email-config", headers=carol).status_code == 200
    assert client.get("/api/admin/users", headers=carol).status_code == 200


def test_admin_create_duplicate_conflicts(client, admin_headers):
    register(client, "carol", "carol@x.com")
    r = client.post("/api/admin/users", headers=admin_headers, json=CAROL)
    assert r.status_code == 409


def test_update_flags_take_effect_on_existing_token(client, admin_headers):
    alice = register(client, "alice")
    alice_id = client.get("/api/user", headers=alice).json()["id"]
    assert client.get("/api/campaigns", headers=alice).status_code == 200

    r = client.put(
        f"/api/admin/users/{alice_id}",
        headers=admin_headers,
        json={"can_access_direct_mail": False},
    )
    assert r.status_code == 200
    assert r.json()["can_access_direct_mail"] is False
    assert client.get("/api/campaigns", headers=alice).status_code == 403


def test_update_password_and_status(client, admin_headers):
    alice = register(client, "alice")
    alice_id = client.get("/api/user", headers=alice).json()["id"]

    client.put(f"/api/admin/users/{alice_id}", headers=admin_headers, json={"password": "changed1"})
    login(client, "alice", "changed1")

    client.put(f"/api/admin/users/{alice_id}", headers=admin_headers, json={"status": "inactive"})
    r = client.post("/api/login", json={"username": "alice", "password": "changed1"})
    assert r.status_code == 401


def test_update_rejects_taken_username(client, admin_headers):
    register(client, "alice")
    bob = register(client, "bob")
    bob_id = client.get("/api/user", headers=bob).json()["id"]
    r = client.put(f"/api/admin/users/{bob_id}", headers=admin_headers, json={"username": "alice"})
    assert r.status_code == 409


def test_admin_cannot_demote_or_deactivate_self(client, admin_headers):
    me = client.get("/api/user", headers=admin_headers).json()["id"]
    assert client.put(
        f"/api/admin/users/{me}", headers=admin_headers, json={"role": "user"}
    ).status_code == 400
    assert client.put(
        f"/api/admin/users/{me}", headers=admin_headers, json={"status": "inactive"}
    ).status_code == 400


def test_update_unknown_user(client, admin_headers):
    r = client.put("/api/admin/users/9999", headers=admin_headers, json={"status": "inactive"})
    assert r.status_code == 404


def test_delete_user_cascades_owned_data(client, db, admin_headers):
    alice = register(client, "alice")
    alice_id = client.get("/api/user", headers=alice).json()["id"]
    _seed_data(client, alice)
    bob = register(client, "bob")
    bob_id = client.get("/api/user", headers=bob).json()["id"]
    _seed_data(client, bob)
    assert _owned_counts(db, alice_id) == (1, 1, 1)

    r = client.delete(f"/api/admin/users/{alice_id}", headers=admin_headers)
    assert r.status_code == 204

    db.expire_all()
    assert db.get(User, alice_id) is None
    assert _owned_counts(db, alice_id) == (0, 0, 0)
    assert _owned_counts(db, bob_id) == (1, 1, 1)
    assert client.get("/api/user", headers=alice).status_code == 401


def test_delete_unknown_user(client, admin_headers):
    assert client.delete("/api/admin/users/9999", headers=admin_headers).status_code == 404


def test_admin_cannot_delete_self(client, admin_headers):
    me = client.get("/api/user", headers=admin_headers).json()["id"]
    assert client.delete(f"/api/admin/users/{me}", headers=admin_headers).status_code == 400


def test_clear_all_keeps_caller(client, db, admin_headers):
    for name in ("alice", "bob", "carol"):
        _seed_data(client, register(client, name))
    root_id = client.get("/api/user", headers=admin_headers).json()["id"]
    _seed_data(client, admin_headers)

    r = client.delete("/api/admin/users/clear-all", headers=admin_headers)
    assert r.status_code == 200
    assert r.json() == {"deleted": 3}

    db.expire_all()
    assert [u.id for u in db.query(User).all()] == [root_id]
    assert db.query(Client).count() == 1
    assert db.query(Campaign).count() == 1
    assert db.query(EmailConfiguration).count() == 1
    assert _owned_counts(db, root_id) == (1, 1, 1)


def test_clear_all_with_nobody_else(client, admin_headers):
    r = client.delete("/api/admin/users/clear-all", headers=admin_headers)
    assert r.json() == {"deleted": 0}


def _seed_send_and_attachment(db, owner_id):
    campaign = db.query(Campaign).filter(Campaign.owner_id == owner_id).one()
    target = db.query(Client).filter(Client.owner_id == owner_id).one()
    db.add(CampaignSend(campaign_id=campaign.id, client_id=target.id))
    db.add(
        CampaignAttachment(campaign_id=campaign.id, file_name="promo.pdf", file_path="/files/promo.pdf")
    )
    db.commit()
    return campaign.id


def test_delete_user_removes_sends_and_attachments(client, db, admin_headers):
    alice = register(client, "alice")
    alice_id = client.get("/api/user", headers=alice).json()["id"]
    _seed_data(client, alice)
    alice_campaign = _seed_send_and_attachment(db, alice_id)
    bob = register(client, "bob")
    bob_id = client.get("/api/user", headers=bob).json()["id"]
    _seed_data(client, bob)
    bob_campaign = _seed_send_and_attachment(db, bob_id)

    assert client.delete(f"/api/admin/users/{alice_id}", headers=admin_headers).status_code == 204

    db.expire_all()
    assert db.query(CampaignSend).filter(CampaignSend.campaign_id == alice_campaign).count() == 0
    assert db.query(CampaignAttachment).filter(CampaignAttachment.campaign_id == alice_campaign).count() == 0
    assert db.query(CampaignSend).filter(CampaignSend.campaign_id == bob_campaign).count() == 1
    assert db.query(CampaignAttachment).filter(CampaignAttachment.campaign_id == bob_campaign).count() == 1


def test_failed_cascade_leaves_everything_in_place(client, db, admin_headers, monkeypatch):
    alice = register(client, "alice")
    alice_id = client.get("/api/user", headers=alice).json()["id"]
    _seed_data(client, alice)
    campaign_id = _seed_send_and_attachment(db, alice_id)
    root_id = client.get("/api/user", headers=admin_headers).json()["id"]

    real_purge = accounts._purge_owned

    def _purge_then_fail(session, owner_ids):
        real_purge(session, owner_ids)
        raise RuntimeError("disk full")

    monkeypatch.setattr(accounts, "_purge_owned", _purge_then_fail)

    with pytest.raises(RuntimeError):
        accounts.delete_account(db, alice_id, root_id)
    with pytest.raises(RuntimeError):
        accounts.delete_all_accounts_except(db, root_id)

    db.expire_all()
    assert db.get(User, alice_id) is not None
    assert _owned_counts(db, alice_id) == (1, 1, 1)
    assert db.query(CampaignSend).filter(CampaignSend.campaign_id == campaign_id).count() == 1
    assert db.query(CampaignAttachment).filter(CampaignAttachment.campaign_id == campaign_id).count() == 1
    assert client.get("/api/clients", headers=alice).status_code == 200


def test_admin_update_rejects_password_over_72_bytes(client, admin_headers):
    alice = register(client, "alice")
    alice_id = client.get("/api/user", headers=alice).json()["id"]
    r = client.put(
        f"/api/admin/users/{alice_id}", headers=admin_headers, json={"password": "ç" * 40}
    )
    assert r.status_code == 422
    r = client.post("/api/admin/users", headers=admin_headers, json={**CAROL, "password": "ç" * 40})
    assert r.status_code == 422


def test_account_created_outside_the_api_can_log_in(client, db):
    # e.g. an operator bootstrapping with a local-only address
    accounts.create_account_as_admin(
        db, username="op", email="admin@localhost", password="admin123", role="admin"
    )
    r = client.post("/api/login", json={"username": "op", "password": "admin123"})
    assert r.status_code == 200
    assert r.json()["user"]["email"] == "admin@localhost"
    assert r.json()["user"]["username"] == "op"

    headers = login(client, "op", "admin123")
    listed = client.get("/api/admin/users", headers=headers, params={"include_self": True})
    assert listed.status_code == 200
    assert [u["username"] for u in listed.json()] == ["op"]
