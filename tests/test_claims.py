# --------------------------------------------------
# test_claims.py
# --------------------------------------------------
# Purpose:
#   Validate best-effort claim extraction:
#       • valid bearer token → claim value
#       • empty / malformed header → "" (never raises)
#       • missing claim → ""
# --------------------------------------------------

from apilog.claims import extract_claim, get_company_in_token, get_sub_in_token

from conftest import make_request, make_token


def test_sub_from_bearer_token():
    header = "Bearer " + make_token(sub="user-123")
    assert extract_claim(header, "sub") == "user-123"


def test_bare_token_without_prefix():
    assert extract_claim(make_token(company="acme"), "company") == "acme"


def test_empty_or_missing_header():
    assert extract_claim("", "sub") == ""
    assert extract_claim(None, "sub") == ""


def test_malformed_token():
    assert extract_claim("Bearer not-a-token", "sub") == ""
    assert extract_claim("Bearer a.b.c", "sub") == ""


def test_missing_claim():
    assert extract_claim("Bearer " + make_token(sub="u"), "company") == ""


def test_non_string_and_list_claims():
    token = "Bearer " + make_token(tenant_id=42, aud=["api", "web"])
    assert extract_claim(token, "tenant_id") == "42"
    assert extract_claim(token, "aud") == "api"


def test_request_helpers():
    request = make_request(authorization="Bearer " + make_token(sub="user-123", company="acme"))
    assert get_sub_in_token(request) == "user-123"
    assert get_company_in_token(request) == "acme"
    assert get_sub_in_token(make_request()) == ""
