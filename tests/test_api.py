# tests/test_api.py
import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from app.core.security import PasswordHasher
from app.database import engine
from app.main import app
from app.models.user import User
from app.services.vendor_service import MAX_IMAGE_BYTES

API = "/api/v1"


@pytest.fixture
def client(tables):
    with TestClient(app) as c:
        yield c


def _sign_up(client, payload):
    return client.post(f"{API}/auth/sign-up", json=payload)


def _sign_in(client, mobile, password):
    return client.post(
        f"{API}/auth/sign-in", json={"mobile": mobile, "password": password}
    )


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


def _token_for(client, payload):
    assert _sign_up(client, payload).status_code == 201
    resp = _sign_in(client, payload["mobile"], payload["password"])
    assert resp.status_code == 200
    return resp.json()["access_token"]


@pytest.fixture
def admin_token(client):
    with Session(engine) as session:
        session.add(
            User(
                mobile="9000000000",
                password_hash=PasswordHasher().hash("admin pass"),
                name="Admin",
                role="admin",
            )
        )
        session.commit()
    return _sign_in(client, "9000000000", "admin pass").json()["access_token"]


def test_health(client):
    assert client.get("/").json()["status"] == "ok"


# -------- Auth --------


def test_sign_up_customer(client, customer_payload):
    resp = _sign_up(client, customer_payload)

    assert resp.status_code == 201
    body = resp.json()
    assert body["role"] == "customer"
    assert body["mobile"] == "9000000001"
    assert "password_hash" not in body
    assert "password" not in body


def test_sign_up_vendor_requires_shop_fields(client, vendor_payload):
    payload = dict(vendor_payload)
    del payload["category"]

    assert _sign_up(client, payload).status_code == 422


def test_sign_up_as_admin_is_rejected(client, customer_payload):
    assert _sign_up(client, customer_payload | {"role": "admin"}).status_code == 422


def test_duplicate_mobile_is_conflict(client, customer_payload):
    _sign_up(client, customer_payload)

    resp = _sign_up(client, customer_payload)

    assert resp.status_code == 409
    assert resp.json()["detail"] == "Mobile number already registered"


def test_sign_in_returns_bearer_token(client, customer_payload):
    _sign_up(client, customer_payload)

    resp = _sign_in(client, "9000000001", "correct horse")

    assert resp.status_code == 200
    body = resp.json()
    assert body["token_type"] == "bearer"
    assert body["access_token"]
    assert body["expires_at"]
    assert body["user"]["mobile"] == "9000000001"
    assert "password_hash" not in body["user"]


def test_bad_credentials_share_one_response(client, customer_payload):
    _sign_up(client, customer_payload)

    wrong_password = _sign_in(client, "9000000001", "wrong")
    unknown_mobile = _sign_in(client, "9111111111", "correct horse")

    assert wrong_password.status_code == unknown_mobile.status_code == 401
    assert wrong_password.json() == unknown_mobile.json()


def test_sign_out(client, customer_payload):
    token = _token_for(client, customer_payload)

    resp = client.post(f"{API}/auth/sign-out", headers=_auth(token))

    assert resp.status_code == 200
    assert client.post(f"{API}/auth/sign-out").status_code == 200


# -------- Users --------


def test_me_requires_token(client):
    assert client.get(f"{API}/users/me").status_code == 401
    assert (
        client.get(f"{API}/users/me", headers=_auth("garbage")).status_code == 401
    )


def test_me_and_profile_update(client, customer_payload):
    token = _token_for(client, customer_payload)

    me = client.get(f"{API}/users/me", headers=_auth(token))
    assert me.status_code == 200
    assert me.json()["name"] == "Asha"

    resp = client.patch(
        f"{API}/users/me",
        json={"name": "Asha K", "language_preference": "hi"},
        headers=_auth(token),
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "Asha K"
    assert resp.json()["language_preference"] == "hi"
    assert resp.json()["mobile"] == "9000000001"


def test_profile_update_rejects_role_change(client, customer_payload):
    token = _token_for(client, customer_payload)

    resp = client.patch(
        f"{API}/users/me", json={"role": "admin"}, headers=_auth(token)
    )

    assert resp.status_code == 422


def test_admin_endpoints_require_admin(client, customer_payload):
    token = _token_for(client, customer_payload)

    assert client.get(f"{API}/users", headers=_auth(token)).status_code == 403


def test_admin_lists_and_deactivates_users(client, admin_token, customer_payload):
    customer_token = _token_for(client, customer_payload)

    listing = client.get(
        f"{API}/users", params={"role": "customer"}, headers=_auth(admin_token)
    )
    assert listing.status_code == 200
    assert [u["mobile"] for u in listing.json()] == ["9000000001"]
    customer_id = listing.json()[0]["id"]

    resp = client.patch(
        f"{API}/users/{customer_id}/active",
        json={"is_active": False},
        headers=_auth(admin_token),
    )
    assert resp.status_code == 200
    assert resp.json()["is_active"] is False

    # Existing token stops resolving, and sign-in is refused.
    assert client.get(f"{API}/users/me", headers=_auth(customer_token)).status_code == 401
    assert _sign_in(client, "9000000001", "correct horse").status_code == 401


def test_admin_cannot_deactivate_self(client, admin_token):
    me = client.get(f"{API}/users/me", headers=_auth(admin_token)).json()

    resp = client.patch(
        f"{API}/users/{me['id']}/active",
        json={"is_active": False},
        headers=_auth(admin_token),
    )

    assert resp.status_code == 400


def test_admin_get_unknown_user_is_404(client, admin_token):
    resp = client.get(
        f"{API}/users/00000000-0000-0000-0000-000000000000",
        headers=_auth(admin_token),
    )

    assert resp.status_code == 404


# -------- Vendors --------


def test_vendor_shop_and_online_toggle(client, vendor_payload):
    token = _token_for(client, vendor_payload)

    shop = client.get(f"{API}/vendors/me", headers=_auth(token))
    assert shop.status_code == 200
    assert shop.json()["shop_name"] == "Test Shop"
    assert shop.json()["is_online"] is True
    assert [v["shop_name"] for v in client.get(f"{API}/vendors").json()] == ["Test Shop"]

    resp = client.patch(
        f"{API}/vendors/me",
        json={"is_online": False, "offers": ["10% off", "  "]},
        headers=_auth(token),
    )
    assert resp.status_code == 200
    assert resp.json()["is_online"] is False
    assert resp.json()["offers"] == ["10% off"]

    assert client.get(f"{API}/vendors").json() == []
    offline = client.get(f"{API}/vendors", params={"only_online": False}).json()
    assert [v["id"] for v in offline] == [shop.json()["id"]]
    assert client.get(f"{API}/vendors/{shop.json()['id']}").status_code == 200


def test_customer_cannot_manage_shop(client, customer_payload):
    token = _token_for(client, customer_payload)

    assert client.get(f"{API}/vendors/me", headers=_auth(token)).status_code == 403


def test_vendor_filter_by_category(client, vendor_payload):
    _token_for(client, vendor_payload)

    grocery = client.get(f"{API}/vendors", params={"category": "Grocery"}).json()
    bakery = client.get(f"{API}/vendors", params={"category": "Bakery"}).json()

    assert len(grocery) == 1
    assert bakery == []


def test_vendor_profile_image_upload(client, vendor_payload, monkeypatch):
    uploaded: list[tuple[str, str]] = []
    deleted: list[str] = []

    def fake_upload(path, file_bytes, content_type):
        uploaded.append((path, content_type))
        return f"https://proj.supabase.co/storage/v1/object/public/assets/{path}"

    monkeypatch.setattr("app.services.vendor_service.upload_to_storage", fake_upload)
    monkeypatch.setattr("app.services.vendor_service.delete_public_url", deleted.append)
    token = _token_for(client, vendor_payload)

    first = client.post(
        f"{API}/vendors/me/profile-image",
        files={"file": ("shop.png", b"\x89PNG fake", "image/png")},
        headers=_auth(token),
    )
    assert first.status_code == 200
    first_url = first.json()["profile_image"]
    assert first_url.endswith(".png")
    assert uploaded[0][1] == "image/png"

    second = client.post(
        f"{API}/vendors/me/profile-image",
        files={"file": ("shop.webp", b"RIFF fake", "image/webp")},
        headers=_auth(token),
    )
    assert second.status_code == 200
    assert deleted == [first_url]


def test_vendor_profile_image_rejects_unsupported_type(client, vendor_payload, monkeypatch):
    monkeypatch.setattr(
        "app.services.vendor_service.upload_to_storage",
        lambda *a, **kw: pytest.fail("should not upload"),
    )
    token = _token_for(client, vendor_payload)

    resp = client.post(
        f"{API}/vendors/me/profile-image",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=_auth(token),
    )

    assert resp.status_code == 400


# -------- Null fields in partial updates --------


@pytest.mark.parametrize("field", ["name", "language_preference"])
def test_profile_update_rejects_null_required_fields(client, customer_payload, field):
    token = _token_for(client, customer_payload)

    resp = client.patch(f"{API}/users/me", json={field: None}, headers=_auth(token))

    assert resp.status_code == 422
    assert client.get(f"{API}/users/me", headers=_auth(token)).json()["name"] == "Asha"


def test_profile_update_can_clear_optional_fields(client, customer_payload):
    token = _token_for(client, customer_payload)

    resp = client.patch(
        f"{API}/users/me",
        json={"email": None, "location_address": None},
        headers=_auth(token),
    )

    assert resp.status_code == 200
    assert resp.json()["email"] is None
    assert resp.json()["location_address"] is None


@pytest.mark.parametrize(
    "field", ["shop_name", "category", "description", "offers", "is_online"]
)
def test_shop_update_rejects_null_fields(client, vendor_payload, field):
    token = _token_for(client, vendor_payload)

    resp = client.patch(f"{API}/vendors/me", json={field: None}, headers=_auth(token))

    assert resp.status_code == 422
    shop = client.get(f"{API}/vendors/me", headers=_auth(token)).json()
    assert shop["shop_name"] == "Test Shop"
    assert shop["is_online"] is True


# -------- Browse: search and owner contact --------


@pytest.fixture
def bakery_payload(vendor_payload):
    return vendor_payload | {
        "mobile": "9000000003",
        "name": "Meena",
        "shop_name": "Bake House",
        "category": "Food",
        "description": "Fresh bread",
    }


def test_vendor_search_matches_name_or_description(client, vendor_payload, bakery_payload):
    _token_for(client, vendor_payload)
    _token_for(client, bakery_payload)

    def names(term):
        resp = client.get(f"{API}/vendors", params={"search": term})
        return sorted(v["shop_name"] for v in resp.json())

    assert names("BAKE") == ["Bake House"]
    assert names("vegetables") == ["Test Shop"]
    assert names("fresh") == ["Bake House"]
    assert names("plumbing") == []
    assert names("") == ["Bake House", "Test Shop"]


def test_vendor_listing_includes_owner_contact(client, vendor_payload):
    token = _token_for(client, vendor_payload)

    listed = client.get(f"{API}/vendors").json()[0]
    single = client.get(f"{API}/vendors/{listed['id']}").json()
    mine = client.get(f"{API}/vendors/me", headers=_auth(token)).json()

    for shop in (listed, single, mine):
        assert shop["owner"]["name"] == "Ravi"
        assert shop["owner"]["mobile"] == "9000000002"
        assert "password_hash" not in shop["owner"]
        assert "role" not in shop["owner"]


# -------- Profile image failure paths --------


def test_failed_upload_keeps_previous_image(client, vendor_payload, monkeypatch):
    deleted: list[str] = []
    monkeypatch.setattr(
        "app.services.vendor_service.upload_to_storage",
        lambda path, data, ct: f"https://proj.supabase.co/storage/v1/object/public/assets/{path}",
    )
    monkeypatch.setattr("app.services.vendor_service.delete_public_url", deleted.append)
    token = _token_for(client, vendor_payload)

    first = client.post(
        f"{API}/vendors/me/profile-image",
        files={"file": ("shop.png", b"\x89PNG fake", "image/png")},
        headers=_auth(token),
    ).json()["profile_image"]

    def broken_upload(path, data, ct):
        raise RuntimeError("storage down")

    monkeypatch.setattr("app.services.vendor_service.upload_to_storage", broken_upload)
    with pytest.raises(RuntimeError):
        client.post(
            f"{API}/vendors/me/profile-image",
            files={"file": ("shop.jpg", b"\xff\xd8 fake", "image/jpeg")},
            headers=_auth(token),
        )

    assert deleted == []
    shop = client.get(f"{API}/vendors/me", headers=_auth(token)).json()
    assert shop["profile_image"] == first


def test_oversized_image_is_rejected(client, vendor_payload, monkeypatch):
    monkeypatch.setattr(
        "app.services.vendor_service.upload_to_storage",
        lambda *a, **kw: pytest.fail("should not upload"),
    )
    token = _token_for(client, vendor_payload)

    resp = client.post(
        f"{API}/vendors/me/profile-image",
        files={"file": ("big.png", b"\0" * (MAX_IMAGE_BYTES + 10), "image/png")},
        headers=_auth(token),
    )

    assert resp.status_code == 413
