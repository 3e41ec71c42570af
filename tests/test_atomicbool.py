import threading

from fuzzterm.util.atomicbool import AtomicBool


def test_initial_value():
    assert AtomicBool(True).get() is True
    assert AtomicBool(False).get() is False


def test_set_returns_new_state():
    ab = AtomicBool(True)
    assert ab.set(False) is False
    assert ab.get() is False
    assert ab.set(True) is True
    assert ab.get() is True


def test_truthiness_follows_state():
    ab = AtomicBool(False)
    assert not ab
    ab.set(True)
    assert ab


def test_concurrent_sets_leave_valid_state():
    ab = AtomicBool(False)
    threads = [threading.Thread(target=ab.set, args=(i % 2 == 0,)) for i in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert ab.get() in (True, False)