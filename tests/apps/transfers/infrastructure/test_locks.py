import threading
import time

from apps.transfers.infrastructure.locks import KeyedLocks


class TestKeyedLocks:

    def test_entries_released_after_use(self):
        locks = KeyedLocks()

        with locks.hold("a"):
            assert len(locks) == 1

        assert len(locks) == 0

    def test_reentrant_for_same_thread(self):
        locks = KeyedLocks()

        with locks.hold("a"):
            with locks.hold("a"):
                assert len(locks) == 1

        assert len(locks) == 0

    def test_same_key_is_exclusive(self):
        locks = KeyedLocks()
        inside = []
        overlaps = []

        def critical_section():
            with locks.hold("transfer-1"):
                inside.append(1)
                if len(inside) > 1:
                    overlaps.append(True)
                time.sleep(0.01)
                inside.pop()

        threads = [threading.Thread(target=critical_section) for _ in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(5)

        assert overlaps == []
        assert len(locks) == 0

    def test_different_keys_do_not_block(self):
        locks = KeyedLocks()
        acquired = threading.Event()

        def other_key():
            with locks.hold("transfer-2"):
                acquired.set()

        with locks.hold("transfer-1"):
            thread = threading.Thread(target=other_key)
            thread.start()
            assert acquired.wait(5)
            thread.join(5)
