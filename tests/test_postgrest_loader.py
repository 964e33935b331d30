"""Tests for the PostgREST loader."""

from unittest.mock import MagicMock

import pytest
import requests

from posmigrate.loaders.postgrest_loader import PostgRESTLoader


def response(status_code=201, payload=None, text=""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = status_code < 400
    resp.text = text
    if payload is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = payload
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status_code} error")
    return resp


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def loader(session):
    return PostgRESTLoader("https://demo.supabase.co/", "service-key", page_size=2, session=session)


def test_session_headers_carry_service_key():
    loader = PostgRESTLoader("https://demo.supabase.co", "service-key")
    headers = loader._session.headers
    assert headers["apikey"] == "service-key"
    assert headers["Authorization"] == "Bearer service-key"


def test_upsert_posts_with_merge_duplicates(loader, session):
    session.post.return_value = response(201)

    result = loader.upsert("products", {"id": "abc", "name": "Cola"})

    assert result.success
    assert result.primary_key == "abc"
    args, kwargs = session.post.call_args
    assert args[0] == "https://demo.supabase.co/rest/v1/products"
    assert kwargs["params"] == {"on_conflict": "id"}
    assert kwargs["headers"]["Prefer"] == "resolution=merge-duplicates,return=minimal"
    assert kwargs["json"] == {"id": "abc", "name": "Cola"}


def test_upsert_reports_foreign_key_violation(loader, session):
    session.post.return_value = response(409, {
        "code": "23503",
        "message": 'insert or update on table "pets" violates foreign key constraint "pets_customer_id_fkey"',
    })

    result = loader.upsert("pets", {"id": "x"})

    assert not result.success
    assert result.error_code == "23503"
    assert result.is_foreign_key_violation


def test_upsert_reports_other_failures(loader, session):
    session.post.return_value = response(400, {"code": "22P02", "message": "invalid input syntax for type uuid"})

    result = loader.upsert("products", {"id": "x"})

    assert not result.success
    assert not result.is_foreign_key_violation
    assert "invalid input syntax" in result.error


def test_upsert_turns_transport_errors_into_results(loader, session):
    session.post.side_effect = requests.exceptions.ConnectionError("connection reset")

    result = loader.upsert("products", {"id": "x"})

    assert not result.success
    assert "connection reset" in result.error


def test_upsert_with_non_json_error_body(loader, session):
    session.post.return_value = response(502, text="Bad Gateway")
    assert loader.upsert("products", {"id": "x"}).error == "Bad Gateway"


def test_dry_run_sends_nothing(session):
    loader = PostgRESTLoader("https://demo.supabase.co", "k", dry_run=True, session=session)

    result = loader.upsert("products", {"id": "x"})

    assert result.success
    session.post.assert_not_called()


def test_fetch_all_pages_until_short_page(loader, session):
    session.get.side_effect = [
        response(200, [{"id": "a"}, {"id": "b"}]),
        response(200, [{"id": "c"}]),
    ]

    rows = loader.fetch_all("stores", "id")

    assert [r["id"] for r in rows] == ["a", "b", "c"]
    offsets = [c.kwargs["params"]["offset"] for c in session.get.call_args_list]
    assert offsets == [0, 2]
    assert session.get.call_args.kwargs["params"]["order"] == "id.asc"


def test_fetch_all_raises_on_http_error(loader, session):
    session.get.return_value = response(401, {"message": "JWT expired"})

    with pytest.raises(requests.exceptions.HTTPError):
        loader.fetch_all("profiles", "id,email")


def test_create_identity_posts_to_admin_api(loader, session):
    session.post.return_value = response(200, {"id": "u"})

    result = loader.create_identity({"id": "u", "email": "a@b.c"})

    assert result.success
    assert session.post.call_args.args[0] == "https://demo.supabase.co/auth/v1/admin/users"


def test_create_identity_error_message(loader, session):
    session.post.return_value = response(422, {"msg": "A user with this email address has already been registered"})

    result = loader.create_identity({"id": "u", "email": "a@b.c"})

    assert not result.success
    assert "already been registered" in result.error


def test_validate_connection(loader, session):
    session.get.return_value = response(200, [])
    assert loader.validate_connection()

    session.get.side_effect = requests.exceptions.ConnectionError("refused")
    assert not loader.validate_connection()
