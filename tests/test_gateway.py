# tests/test_gateway.py
import pytest

from shelftaught.cache import TTLCache
from shelftaught.errors import AuthenticationExpired, GatewayError, ValidationFailed
from shelftaught.gateway import ApiGateway, curriculum_from_payload
from shelftaught.session import AuthSession

from tests.conftest import BASE_URL

CURRICULA_BODY = {
    "success": True,
    "data": {
        "curricula": [{"id": "42", "name": "Saxon Math"}],
        "pagination": {"totalCount": 1, "totalPages": 1},
    },
}


def test_identical_reads_within_ttl_hit_the_cache(gateway, fake_http, clock):
    fake_http.add("GET", "/curricula", CURRICULA_BODY)

    first = gateway.get_curricula({"page": 1, "sortBy": "rating"})
    clock.advance(60)
    second = gateway.get_curricula({"sortBy": "rating", "page": 1})

    assert fake_http.count("GET", "/curricula") == 1
    assert first.source == "network" and not first.cached
    assert second.cached
    assert second.data == CURRICULA_BODY


def test_read_refetches_after_ttl(gateway, fake_http, clock):
    fake_http.add("GET", "/curricula", CURRICULA_BODY)
    gateway.get_curricula({"page": 1})
    clock.advance(2 * 60 + 1)
    gateway.get_curricula({"page": 1})
    assert fake_http.count("GET", "/curricula") == 2


def test_network_failure_degrades_to_fallback_and_is_cached_briefly(gateway, fake_http, clock):
    fake_http.down = True

    result = gateway.get_curricula({"page": 1, "limit": 12})

    assert result.source == "fallback"
    assert result.degraded
    assert result.data["data"]["curricula"]
    assert fake_http.count("GET", "/curricula") == 1

    clock.advance(20)
    again = gateway.get_curricula({"page": 1, "limit": 12})
    assert again.degraded and again.cached
    assert fake_http.count("GET", "/curricula") == 1

    clock.advance(11)
    gateway.get_curricula({"page": 1, "limit": 12})
    assert fake_http.count("GET", "/curricula") == 2


def test_http_error_on_read_also_degrades(gateway, fake_http):
    fake_http.add("GET", "/search", {"error": {"message": "boom"}}, status=500)

    result = gateway.search_curricula("math", {"page": 1})

    assert result.degraded
    names = [c["name"] for c in result.data["data"]]
    assert "Saxon Math" in names


def test_fallback_can_be_disabled(fake_http, clock):
    gateway = ApiGateway(base_url=BASE_URL, http=fake_http, cache=TTLCache(clock=clock), fallback_enabled=False)
    fake_http.down = True
    with pytest.raises(GatewayError):
        gateway.get_categories()


def test_list_params_use_bracket_convention(gateway, fake_http):
    fake_http.add("GET", "/curricula", CURRICULA_BODY)
    gateway.get_curricula({"page": 2, "subjects": ["math", "science"], "gradeLevel": [], "priceRange": None})

    params = fake_http.calls[0]["params"]
    assert params == {"page": 2, "subjects[]": ["math", "science"]}


def test_bearer_token_is_attached(gateway, fake_http, session):
    session.login("tok-123", {"id": "u1", "role": "user"})
    fake_http.add("GET", "/categories", {"success": True, "data": {"subjects": [], "gradeLevels": []}})

    gateway.get_categories()

    assert fake_http.calls[0]["headers"]["Authorization"] == "Bearer tok-123"


def test_401_ends_session_and_notifies(fake_http, clock):
    redirects = []
    session = AuthSession()
    session.login("stale", {"id": "u1"})
    gateway = ApiGateway(
        base_url=BASE_URL, http=fake_http, cache=TTLCache(clock=clock), session=session,
        on_unauthorized=redirects.append,
    )
    fake_http.add("GET", "/curricula", {"error": {"message": "Token expired"}}, status=401)

    with pytest.raises(AuthenticationExpired) as exc_info:
        gateway.get_curricula()

    assert exc_info.value.status_code == 401
    assert redirects == ["/login"]
    assert session.token is None
    assert session.user is None
    assert gateway.cache.get_stats()["size"] == 0


def test_login_stores_token_and_user(gateway, fake_http, session):
    fake_http.add("POST", "/auth/login", {"data": {"token": "jwt", "user": {"id": "1", "role": "admin"}}})

    gateway.login("parent@example.com", "secret123")

    assert session.token == "jwt"
    assert session.is_admin
    assert fake_http.calls[0]["json"] == {"email": "parent@example.com", "password": "secret123"}


def test_login_validation_happens_before_network(gateway, fake_http):
    with pytest.raises(ValidationFailed):
        gateway.login("not-an-email", "pw")
    with pytest.raises(ValidationFailed):
        gateway.register({"email": "a@b.co", "password": "short", "firstName": "A", "lastName": "B"})
    assert fake_http.calls == []


def test_mutation_failures_propagate_and_are_not_cached(gateway, fake_http, session):
    session.login("jwt", {"role": "admin"})
    fake_http.add("POST", "/admin/curricula", {"error": {"message": "Database unavailable"}}, status=503)

    with pytest.raises(GatewayError) as exc_info:
        gateway.create_curriculum({"name": "Singapore Math", "publisher": "Marshall Cavendish"})
    assert exc_info.value.status_code == 503
    assert exc_info.value.message == "Database unavailable"

    fake_http.down = True
    with pytest.raises(GatewayError):
        gateway.save_curriculum("1", "for next year")
    assert gateway.cache.get_stats()["size"] == 0


def test_admin_mutation_invalidates_listings(gateway, fake_http, session):
    session.login("jwt", {"role": "admin"})
    fake_http.add("GET", "/curricula", CURRICULA_BODY)
    fake_http.add("GET", "/categories", {"success": True, "data": {}})
    fake_http.add("DELETE", "/admin/curricula/42", {"success": True})

    gateway.get_curricula({"page": 1})
    gateway.get_categories()
    gateway.delete_curriculum("42")
    gateway.get_curricula({"page": 1})

    assert fake_http.count("GET", "/curricula") == 2
    assert gateway.cache.get_stats()["keys"].count("/categories") == 1


def test_curriculum_detail_shapes():
    item = {"id": "7", "name": "Reading Eggs"}
    assert curriculum_from_payload({"success": True, "data": {"curriculum": item}}) == item
    assert curriculum_from_payload({"curriculum": item}) == item
    assert curriculum_from_payload({"success": True, "data": item}) == item
    assert curriculum_from_payload({"success": False, "data": {"curriculum": None}}) is None
    assert curriculum_from_payload(None) is None


def test_suggestions_and_filters_fall_back(gateway, fake_http):
    fake_http.down = True

    suggestions = gateway.get_search_suggestions("sax", 8)
    filters = gateway.get_search_filters("math")

    texts = [s["text"] for s in suggestions.data["data"]["suggestions"]]
    assert "Saxon Math" in texts
    assert filters.data["data"]["filters"]["subjects"]


def test_blank_params_share_the_cache_entry_they_share_on_the_wire(gateway, fake_http):
    fake_http.add("GET", "/curricula", CURRICULA_BODY)

    gateway.get_curricula({"subjects": [], "priceRange": ""})
    gateway.get_curricula({})

    assert fake_http.count("GET", "/curricula") == 1
    assert fake_http.calls[0]["params"] is None


def test_session_views_share_cache_but_not_credentials(gateway, fake_http):
    fake_http.add("GET", "/categories", {"success": True, "data": {}})
    fake_http.add("GET", "/user/saved", {"success": True, "data": []})

    alice = AuthSession()
    alice.login("alice-jwt", {"id": "a"})
    as_alice = gateway.for_session(alice)
    anonymous = gateway.for_session(AuthSession())

    as_alice.get_categories()
    anonymous.get_categories()
    as_alice.get_saved_curricula()

    assert fake_http.count("GET", "/categories") == 1
    assert fake_http.calls[-1]["headers"] == {"Authorization": "Bearer alice-jwt"}
    assert anonymous.session.token is None
    assert gateway.session.token is None
    assert as_alice.cache is gateway.cache
