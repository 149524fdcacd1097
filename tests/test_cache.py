"""Tests for the local form session cache."""

from app.qualification.cache import CACHE_KEY, LocalSessionCache
from app.qualification.flow import Next, SetField, apply
from app.qualification.session import LeadSession


def test_save_and_load_round_trip(cache_dir):
    cache = LocalSessionCache(cache_dir)
    session = LeadSession.new().model_copy(update={"zip_code": "62701", "current_step": 4})

    assert cache.save(session) is True
    loaded = cache.load()

    assert loaded.session_id == session.session_id
    assert loaded.zip_code == "62701"
    assert loaded.current_step == 4
    assert loaded.last_saved is not None
    assert cache.path.name == f"{CACHE_KEY}.json"


def test_load_missing_returns_none(cache_dir):
    assert LocalSessionCache(cache_dir).load() is None


def test_corrupt_cache_is_ignored(cache_dir):
    cache = LocalSessionCache(cache_dir)
    cache_dir.mkdir(parents=True)
    cache.path.write_text("{not json")
    assert cache.load() is None


def test_clear(cache_dir):
    cache = LocalSessionCache(cache_dir)
    cache.save(LeadSession.new())
    cache.clear()
    assert cache.load() is None
    # Clearing twice is fine.
    cache.clear()


def test_unaccepted_bill_input_survives_reload(cache_dir):
    cache = LocalSessionCache(cache_dir)
    state = apply(LeadSession.new(), SetField("62701")).state
    state = apply(state, Next()).state
    state = apply(state, SetField("Ameren Illinois")).state
    state = apply(state, Next()).state
    state = apply(state, SetField("abc")).state
    assert state.current_step == 2

    assert cache.save(state) is True
    loaded = cache.load()

    assert loaded is not None
    assert loaded.zip_code == "62701"
    assert loaded.utility_company == "Ameren Illinois"
    assert loaded.average_monthly_bill == "abc"
    assert loaded.current_step == 2
