"""Profile endpoints: lazy creation, defaults, partial update, auth."""

import threading
from concurrent.futures import ThreadPoolExecutor

from conference_central import models, schemas
from conference_central.services import profiles
from conference_central.services.identity import Principal
from conftest import auth_headers, count_rows


def test_save_profile_with_empty_form_uses_defaults(client, api):
    resp = client.post(api("/profile"), headers=auth_headers(), json={})
    assert resp.status_code == 200
    assert resp.json() == {
        "userId": "u1",
        "displayName": "lemoncake",
        "mainEmail": "lemoncake@example.com",
        "teeShirtSize": "NOT_SPECIFIED",
    }


def test_save_profile_without_body(client, api):
    resp = client.post(api("/profile"), headers=auth_headers())
    assert resp.status_code == 200
    assert resp.json()["displayName"] == "lemoncake"


def test_blank_display_name_falls_back_to_email_local_part(client, api):
    resp = client.post(
        api("/profile"),
        headers=auth_headers(email="jane.doe@example.org", user_id="u2"),
        json={"displayName": "   "},
    )
    assert resp.status_code == 200
    assert resp.json()["displayName"] == "jane.doe"


def test_get_profile_after_save_returns_same_profile(client, api):
    saved = client.post(
        api("/profile"),
        headers=auth_headers(),
        json={"displayName": "Lemon", "teeShirtSize": "M_W"},
    )
    assert saved.status_code == 200

    fetched = client.get(api("/profile"), headers=auth_headers())
    assert fetched.status_code == 200
    assert fetched.json() == saved.json()


def test_get_profile_for_unknown_user_returns_null(client, api):
    resp = client.get(api("/profile"), headers=auth_headers(user_id="nobody"))
    assert resp.status_code == 200
    assert resp.json() is None


def test_partial_update_only_changes_tee_shirt_size(client, api):
    first = client.post(
        api("/profile"), headers=auth_headers(), json={"displayName": "Lemon"}
    ).json()

    second = client.post(
        api("/profile"), headers=auth_headers(), json={"teeShirtSize": "XL_M"}
    ).json()

    assert second["teeShirtSize"] == "XL_M"
    assert second["displayName"] == first["displayName"] == "Lemon"
    assert second["mainEmail"] == first["mainEmail"]
    assert second["userId"] == first["userId"]


def test_main_email_is_kept_from_creation(client, api):
    client.post(api("/profile"), headers=auth_headers(email="old@example.com"), json={})

    resp = client.post(
        api("/profile"),
        headers=auth_headers(email="new@example.com"),
        json={"displayName": "Renamed"},
    )
    assert resp.json()["mainEmail"] == "old@example.com"
    assert resp.json()["displayName"] == "Renamed"


def test_snake_case_fields_are_accepted(client, api):
    resp = client.post(
        api("/profile"),
        headers=auth_headers(),
        json={"display_name": "Snake", "tee_shirt_size": "S_M"},
    )
    assert resp.json()["displayName"] == "Snake"
    assert resp.json()["teeShirtSize"] == "S_M"


def test_unknown_tee_shirt_size_is_rejected(client, api, session_factory):
    resp = client.post(
        api("/profile"), headers=auth_headers(), json={"teeShirtSize": "HUGE"}
    )
    assert resp.status_code == 422
    assert count_rows(session_factory, models.Profile) == 0


def test_email_without_at_sign_is_invalid_argument(client, api, session_factory):
    resp = client.post(
        api("/profile"), headers=auth_headers(email="not-an-email"), json={}
    )
    assert resp.status_code == 400
    assert resp.json()["code"] == "request.invalid_argument"
    assert count_rows(session_factory, models.Profile) == 0


def test_unauthenticated_calls_are_rejected(client, api, session_factory):
    save = client.post(api("/profile"), json={"displayName": "Ghost"})
    get = client.get(api("/profile"))

    for resp in (save, get):
        assert resp.status_code == 401
        assert resp.json() == {
            "detail": "Authorization required",
            "code": "auth.unauthorized",
        }
    assert count_rows(session_factory, models.Profile) == 0


def test_missing_user_id_resolves_to_stable_id(client, api, session_factory):
    headers = auth_headers(email="android@example.com", user_id=None)

    first = client.post(api("/profile"), headers=headers, json={}).json()
    second = client.get(api("/profile"), headers=headers).json()

    assert first["userId"]
    assert second == first
    assert count_rows(session_factory, models.PrincipalIdentity) == 1


def test_concurrent_first_saves_for_one_user_both_succeed(session_factory, monkeypatch):
    real_load = profiles.load_profile
    both_looked = threading.Barrier(2, timeout=10)
    lock = threading.Lock()
    loads = []

    def load_then_wait_for_other_save(db, user_id):
        profile = real_load(db, user_id)
        with lock:
            first_round = len(loads) < 2
            loads.append(profile)
        if first_round:
            # Both saves see "no profile" before either writes
            both_looked.wait()
        return profile

    monkeypatch.setattr(profiles, "load_profile", load_then_wait_for_other_save)
    principal = Principal(email="lemoncake@example.com", user_id="u1")

    def save(display_name):
        return profiles.save_profile_from_form(
            session_factory,
            principal,
            "u1",
            schemas.ProfileForm(displayName=display_name),
        )

    with ThreadPoolExecutor(max_workers=2) as pool:
        saved = list(pool.map(save, ["First", "Second"]))

    assert [profile.user_id for profile in saved] == ["u1", "u1"]
    assert loads[:2] == [None, None]
    # The losing save retried, found the winner's row and updated it
    assert len(loads) >= 3
    assert loads[-1] is not None
    assert count_rows(session_factory, models.Profile) == 1
    with session_factory() as session:
        stored = session.get(models.Profile, "u1")
    assert stored.display_name in {"First", "Second"}
    assert stored.main_email == "lemoncake@example.com"
