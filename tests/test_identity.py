"""Identity resolution: principal headers, display names, the ensure-identity fallback."""

import pytest

from conference_central import models
from conference_central.errors import InvalidArgumentError
from conference_central.services.identity import (
    Principal,
    default_display_name,
    principal_from_headers,
    resolve_user_id,
)
from conftest import count_rows


def test_principal_from_proxy_headers(settings):
    principal = principal_from_headers(
        {
            "X-Goog-Authenticated-User-Email": "accounts.google.com:lemoncake@example.com",
            "X-Goog-Authenticated-User-Id": "accounts.google.com:1234",
        },
        settings,
    )
    assert principal == Principal(email="lemoncake@example.com", user_id="1234")


def test_principal_without_user_id(settings):
    principal = principal_from_headers(
        {"X-Goog-Authenticated-User-Email": "lemoncake@example.com"}, settings
    )
    assert principal == Principal(email="lemoncake@example.com", user_id=None)


@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"X-Goog-Authenticated-User-Id": "accounts.google.com:1234"},
        {"X-Goog-Authenticated-User-Email": "accounts.google.com:"},
    ],
)
def test_no_email_means_no_principal(settings, headers):
    assert principal_from_headers(headers, settings) is None


def test_custom_header_names(settings):
    custom = settings.model_copy(
        update={
            "auth_email_header": "X-Forwarded-Email",
            "auth_user_id_header": "X-Forwarded-User",
            "auth_header_prefix": "",
        }
    )
    principal = principal_from_headers(
        {"X-Forwarded-Email": "a@b.c", "X-Forwarded-User": "abc"}, custom
    )
    assert principal == Principal(email="a@b.c", user_id="abc")


@pytest.mark.parametrize(
    "email, expected",
    [
        ("lemoncake@example.com", "lemoncake"),
        ("first.last@sub.example.org", "first.last"),
        ("@example.com", ""),
    ],
)
def test_default_display_name(email, expected):
    assert default_display_name(email) == expected


@pytest.mark.parametrize("email", ["lemoncake", "", "example.com"])
def test_default_display_name_requires_at_sign(email):
    with pytest.raises(InvalidArgumentError):
        default_display_name(email)


def test_resolve_user_id_prefers_principal_id(session_factory):
    principal = Principal(email="lemoncake@example.com", user_id="u1")

    assert resolve_user_id(session_factory, principal) == "u1"
    assert count_rows(session_factory, models.PrincipalIdentity) == 0


def test_resolve_user_id_fallback_is_stable_per_email(session_factory):
    first = resolve_user_id(session_factory, Principal(email="droid@example.com"))
    again = resolve_user_id(session_factory, Principal(email="droid@example.com"))
    other = resolve_user_id(session_factory, Principal(email="robot@example.com"))

    assert first and first == again
    assert other != first
    assert count_rows(session_factory, models.PrincipalIdentity) == 2
