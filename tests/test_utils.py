from tabl import reporting, utils


def test_configure_max_workers_prefers_cli(monkeypatch):
    monkeypatch.setenv(utils.MAX_WORKERS_ENV, "3")
    assert utils.configure_max_workers(7) == (7, "cli")
    assert utils.current_max_workers() == 7


def test_configure_max_workers_reads_env(monkeypatch):
    monkeypatch.setenv(utils.MAX_WORKERS_ENV, "3")
    assert utils.configure_max_workers(None) == (3, "env")
    assert utils.max_workers_source() == "env"


def test_configure_max_workers_ignores_invalid_env(monkeypatch):
    monkeypatch.setenv(utils.MAX_WORKERS_ENV, "lots")
    warnings: list[str] = []
    monkeypatch.setattr(utils, "log_warning", warnings.append)

    limit, source = utils.configure_max_workers(None)

    assert source == "default"
    assert limit == utils.default_max_workers()
    assert any(utils.MAX_WORKERS_ENV in entry for entry in warnings)


def test_human_readable_size():
    assert utils.human_readable_size(512) == "512 B"
    assert utils.human_readable_size(2048) == "2.00 KB"
    assert utils.human_readable_size(3 * 1024**3) == "3.00 GB"


def test_plural():
    assert utils.plural(1, "file") == "file"
    assert utils.plural(2, "file") == "files"
    assert utils.plural(0, "schema") == "schemas"


def test_log_helpers_are_noop_without_log_file(tmp_path, monkeypatch):
    monkeypatch.delenv(reporting.LOG_FILE_ENV, raising=False)
    monkeypatch.chdir(tmp_path)
    reporting.configure_log_file(None)

    utils.log_error("nothing written")

    assert list(tmp_path.iterdir()) == []


def test_log_helpers_write_when_configured(tmp_path, monkeypatch):
    log_path = tmp_path / "logs" / "tabl.log"
    monkeypatch.setenv(reporting.LOG_FILE_ENV, str(log_path))
    assert reporting.configure_log_file(None) == str(log_path)
    try:
        utils.log_warning("careful")
        utils.log_info("hello")
    finally:
        monkeypatch.delenv(reporting.LOG_FILE_ENV)
        reporting.configure_log_file(None)

    content = log_path.read_text(encoding="utf-8")
    assert "[WARNING] careful" in content
    assert "[INFO] hello" in content
