import asyncio

import pytest

from prefs_lib.exceptions import BackendError, InvalidArgument
from prefs_lib.preferences import Preferences, PreferencesManager
from prefs_lib.storage.memory_backend import InMemoryPreferencesBackend
from prefs_lib.values import ValueKind

from tests.helpers import CountingBackend, FailingBackend, HangingBackend


SAMPLE = {
    'flag': True,
    'count': 42,
    'ratio': 0.5,
    'name': 'alice',
    'tags': ['a', 'b'],
}


def _manager(values=None) -> PreferencesManager:
    manager = PreferencesManager(InMemoryPreferencesBackend.empty())
    manager.set_mock_initial_values(values or {})
    return manager


def test_snapshot_matches_backend():
    async def scenario():
        backend = CountingBackend(SAMPLE)
        prefs = await PreferencesManager(backend).get_instance()
        snapshot = await backend.get_all()
        return prefs, snapshot

    prefs, snapshot = asyncio.run(scenario())
    assert prefs.get_keys() == set(snapshot)
    for key, value in snapshot.items():
        assert prefs.get(key) == value


def test_empty_backend_has_no_keys():
    async def scenario():
        return await _manager().get_instance()

    prefs = asyncio.run(scenario())
    assert prefs.get_keys() == set()
    assert len(prefs) == 0


def test_typed_getters_match_kind():
    async def scenario():
        return await _manager(SAMPLE).get_instance()

    prefs = asyncio.run(scenario())
    assert prefs.get_bool('flag') is True
    assert prefs.get_int('count') == 42
    assert prefs.get_double('ratio') == 0.5
    assert prefs.get_string('name') == 'alice'
    assert prefs.get_string_list('tags') == ['a', 'b']


def test_typed_getters_return_none_on_mismatch():
    async def scenario():
        return await _manager({'a': True, 'n': 1, 'x': 'x'}).get_instance()

    prefs = asyncio.run(scenario())
    assert prefs.get_bool('a') is True
    assert prefs.get_string('a') is None
    # bool is never an int
    assert prefs.get_int('a') is None
    # int is not silently widened to double
    assert prefs.get_double('n') is None
    assert prefs.get_int('x') is None
    assert prefs.get_string_list('x') is None
    assert prefs.get_bool('missing') is None
    assert prefs.get('missing') is None


def test_set_string_then_get_int_is_none():
    async def scenario():
        prefs = await _manager().get_instance()
        await prefs.set_string('k', 'x')
        return prefs

    prefs = asyncio.run(scenario())
    assert prefs.get_int('k') is None
    assert prefs.get_string('k') == 'x'


def test_write_visible_before_backend_completes():
    async def scenario():
        backend = HangingBackend()
        prefs = await PreferencesManager(backend).get_instance()
        task = prefs.set_int('k', 5)
        seen = prefs.get_int('k')
        await asyncio.sleep(0)
        still_pending = not task.done()
        task.cancel()
        return seen, still_pending, backend.calls

    seen, still_pending, calls = asyncio.run(scenario())
    assert seen == 5
    assert still_pending
    assert ('set_value', ValueKind.INT, 'k', 5, None) in calls


def test_failed_write_keeps_cache_and_reports_to_caller():
    async def scenario():
        backend = FailingBackend({'k': 1}, fail_writes=True)
        prefs = await PreferencesManager(backend).get_instance()
        with pytest.raises(BackendError):
            await prefs.set_int('k', 2)
        with pytest.raises(BackendError):
            await prefs.remove('other')
        return prefs

    prefs = asyncio.run(scenario())
    # no rollback
    assert prefs.get_int('k') == 2


def test_write_is_issued_without_await():
    async def scenario():
        backend = CountingBackend()
        prefs = await PreferencesManager(backend).get_instance()
        prefs.set_bool('b', True)
        prefs.set_double('d', 2)
        await asyncio.sleep(0.01)
        return prefs, await backend.get_all()

    prefs, stored = asyncio.run(scenario())
    assert stored == {'b': True, 'd': 2.0}
    assert isinstance(prefs.get_double('d'), float)


def test_string_list_is_defensive_copy():
    async def scenario():
        prefs = await _manager().get_instance()
        source = ['x', 'y']
        await prefs.set_string_list('l', source)
        source.append('z')
        first = prefs.get_string_list('l')
        first.append('mutated')
        return prefs, first

    prefs, first = asyncio.run(scenario())
    assert first == ['x', 'y', 'mutated']
    assert prefs.get_string_list('l') == ['x', 'y']
    got = prefs.get('l')
    got.clear()
    assert prefs.get_string_list('l') == ['x', 'y']


def test_string_list_normalizes_loose_sequence():
    prefs = Preferences(InMemoryPreferencesBackend.empty(), None, {'t': ('a', 'b'), 'mixed': ['a', 1]})
    assert prefs.get('t') == ('a', 'b')
    assert prefs.get_string_list('t') == ['a', 'b']
    assert type(prefs.get('t')) is list
    assert prefs.get_string_list('mixed') is None


def test_set_remove_string_list_removes_from_backend():
    async def scenario():
        manager = _manager()
        prefs = await manager.get_instance()
        await prefs.set_string_list('l', ['x', 'y'])
        await prefs.remove('l')
        return prefs, await manager.backend.get_all()

    prefs, stored = asyncio.run(scenario())
    assert prefs.get_string_list('l') is None
    assert 'l' not in stored
    assert prefs.contains_key('l') is False


def test_clear_empties_cache_and_backend():
    async def scenario():
        manager = _manager(SAMPLE)
        prefs = await manager.get_instance()
        ok = await prefs.clear()
        return ok, prefs, await manager.backend.get_all()

    ok, prefs, stored = asyncio.run(scenario())
    assert ok is True
    assert prefs.get_keys() == set()
    assert stored == {}


def test_reload_replaces_cache():
    async def scenario():
        backend = CountingBackend({'keep': 1, 'drop': 2})
        prefs = await PreferencesManager(backend).get_instance()
        prefs._cache['local_only'] = 'x'
        # change made outside the cache
        await backend.set_value(ValueKind.STRING, 'new', 'v')
        await backend.remove('drop')
        await prefs.reload()
        return prefs

    prefs = asyncio.run(scenario())
    assert prefs.get_keys() == {'keep', 'new'}
    assert prefs.get_string('new') == 'v'


@pytest.mark.parametrize('key, value, setter', [
    ('k', None, 'set_string'),
    ('k', 'x', 'set_int'),
    ('k', True, 'set_int'),
    ('k', 2 ** 63, 'set_int'),
    ('k', 'yes', 'set_bool'),
    ('k', ['a', 1], 'set_string_list'),
    ('', 'x', 'set_string'),
])
def test_invalid_write_fails_before_touching_cache(key, value, setter):
    async def scenario():
        backend = CountingBackend({'k': 'orig'})
        prefs = await PreferencesManager(backend).get_instance()
        with pytest.raises(InvalidArgument):
            getattr(prefs, setter)(key, value)
        return prefs, backend.calls

    prefs, calls = asyncio.run(scenario())
    assert prefs.get('k') == 'orig'
    assert [c for c in calls if c[0] != 'get_all'] == []


def test_writes_go_to_handle_store():
    async def scenario():
        backend = CountingBackend()
        prefs = await PreferencesManager(backend).get_instance('settings')
        await prefs.set_string('k', 'v')
        return await backend.get_all('settings'), await backend.get_all()

    named, default = asyncio.run(scenario())
    assert named == {'k': 'v'}
    assert default == {}


def test_dunder_helpers():
    prefs = Preferences(InMemoryPreferencesBackend.empty(), 'x', {'a': 1, 'b': ['c']})
    assert 'a' in prefs
    assert sorted(prefs) == ['a', 'b']
    snapshot = prefs.as_dict()
    snapshot['b'].append('d')
    assert prefs.get_string_list('b') == ['c']
    assert 'store=' in repr(prefs)


def test_clear_on_named_store_leaves_other_stores():
    async def scenario():
        backend = CountingBackend({'d': 1}, stores={'A': {'a': 1}, 'B': {'b': 2}})
        prefs = await PreferencesManager(backend).get_instance('A')
        assert await prefs.clear() is True
        return backend, await backend.get_all('A'), await backend.get_all(), await backend.get_all('B')

    backend, named, default, other = asyncio.run(scenario())
    assert ('clear', 'A') in backend.calls
    assert ('clear', None) not in backend.calls
    assert named == {}
    assert default == {'d': 1}
    assert other == {'b': 2}


def test_reload_wraps_foreign_errors_and_keeps_cache():
    class FlakyBackend(CountingBackend):
        broken = False

        async def get_all(self, store_name=None):
            if self.broken:
                raise OSError('disk gone')
            return await super().get_all(store_name)

    async def scenario():
        backend = FlakyBackend({'k': 1})
        prefs = await PreferencesManager(backend).get_instance()
        backend.broken = True
        with pytest.raises(BackendError) as info:
            await prefs.reload()
        return prefs, info.value

    prefs, err = asyncio.run(scenario())
    assert isinstance(err.__cause__, OSError)
    assert prefs.get_int('k') == 1
