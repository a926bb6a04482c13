import os
import textwrap
import threading

from proxyconf.config import Config, load_config

DOC = textwrap.dedent("""
    origins:
      web:
        origin_url: http://a
    reloading:
      rate_limit_secs: 3
""")


def bump_mtime(path, seconds=10):
    st = os.stat(path)
    os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + seconds * 1_000_000_000))


def test_fresh_immediately_after_load(write_doc, fake_clock):
    path = write_doc(DOC)
    config = load_config(path)
    assert config.config_file_path == str(path)
    assert config.main.config_last_modified == os.stat(path).st_mtime_ns
    assert config.is_stale() is False


def test_change_is_seen_once_per_interval(write_doc, fake_clock):
    path = write_doc(DOC)
    config = load_config(path)
    assert config.is_stale() is False

    bump_mtime(path)
    fake_clock.advance(1)
    # inside the rate-limit window the file is not examined
    assert config.is_stale() is False

    fake_clock.advance(2.5)
    assert config.is_stale() is True
    assert config.is_stale() is False

    bump_mtime(path)
    fake_clock.advance(1)
    assert config.is_stale() is False

    fake_clock.advance(3)
    assert config.is_stale() is True


def test_unchanged_file_is_never_stale(write_doc, fake_clock):
    config = load_config(write_doc(DOC))
    for _ in range(5):
        fake_clock.advance(10)
        assert config.is_stale() is False


def test_unreadable_file_is_not_stale(write_doc, fake_clock):
    path = write_doc(DOC)
    config = load_config(path)
    os.remove(path)
    fake_clock.advance(10)
    assert config.is_stale() is False
    assert config.check_file_last_modified() is None


def test_unreadable_file_still_sets_deadline(write_doc, fake_clock):
    path = write_doc(DOC)
    config = load_config(path)
    os.remove(path)
    fake_clock.advance(10)
    config.is_stale()
    assert config.main.config_rate_limit_time == fake_clock.now + 3


def test_no_source_path_is_never_stale(fake_clock):
    config = load_config(data=DOC)
    assert config.config_file_path == ""
    assert config.is_stale() is False
    assert Config.defaults().is_stale() is False


def test_clone_carries_staleness_bookkeeping(write_doc, fake_clock):
    path = write_doc(DOC)
    config = load_config(path)
    clone = config.clone()
    assert clone.main.config_file_path == config.main.config_file_path
    assert clone.main.config_last_modified == config.main.config_last_modified
    assert clone.main.staleness_check_lock is not config.main.staleness_check_lock


def test_concurrent_checks_report_a_change_once(write_doc, fake_clock):
    path = write_doc(DOC)
    config = load_config(path)
    bump_mtime(path)
    fake_clock.advance(10)

    workers = 16
    barrier = threading.Barrier(workers)
    results = []
    results_lock = threading.Lock()

    def check():
        barrier.wait()
        stale = config.is_stale()
        with results_lock:
            results.append(stale)

    threads = [threading.Thread(target=check) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert len(results) == workers
    assert results.count(True) == 1
    assert config.main.config_rate_limit_time == fake_clock.now + 3
