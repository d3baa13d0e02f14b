import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

import app as server
import generate_dummy
from line_index import LineIndex

CONTENT = b"First line\nSecond line\nThird line\nFourth line\n"


@pytest.fixture
def restore_loggers():
    yield
    for name in ("server", "access"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()
        logger.propagate = True
        logger.setLevel(logging.NOTSET)


@pytest.fixture
def line_index(write_file):
    return LineIndex(write_file(CONTENT))


@pytest.fixture
def client(line_index):
    flask_app = server.create_app(line_index)
    flask_app.testing = True
    return flask_app.test_client()


def test_status(client, line_index):
    response = client.get("/")
    assert response.status_code == 200
    assert response.is_json
    data = response.get_json()
    assert data["status"] == "ok"
    assert data["lines"] == 4
    assert data["file"] == line_index.file_path
    assert data["mode"] == "memory"


@pytest.mark.parametrize("number,body", [(1, "First line"), (2, "Second line"), (4, "Fourth line")])
def test_get_line(client, number, body):
    response = client.get(f"/lines/{number}")
    assert response.status_code == 200
    assert response.mimetype == "text/plain"
    assert response.get_data(as_text=True) == body


@pytest.mark.parametrize("value", ["0", "00", "-1", "abc", "1.5", "1_0", "+1", "%201", "%D9%A1"])
def test_invalid_line_number(client, value):
    response = client.get(f"/lines/{value}")
    assert response.status_code == 400
    assert "positive integer" in response.get_data(as_text=True)


def test_leading_zeros_are_accepted(client):
    response = client.get("/lines/002")
    assert response.status_code == 200
    assert response.get_data(as_text=True) == "Second line"


@pytest.mark.parametrize("value", ["5", "999999"])
def test_beyond_end_of_file(client, value):
    response = client.get(f"/lines/{value}")
    assert response.status_code == 413
    assert "beyond the end of the file" in response.get_data(as_text=True)


def test_unknown_route(client):
    response = client.get("/unknown")
    assert response.status_code == 404
    assert "/lines/<line_number>" in response.get_data(as_text=True)


def test_empty_line_served_as_empty_body(write_file):
    flask_app = server.create_app(LineIndex(write_file(b"a\n\nb\n")))
    response = flask_app.test_client().get("/lines/2")
    assert response.status_code == 200
    assert response.get_data() == b""


def test_concurrent_requests(line_index):
    flask_app = server.create_app(line_index)
    expected = {1: "First line", 2: "Second line", 3: "Third line", 4: "Fourth line"}

    def fetch(i):
        number = i % 4 + 1
        with flask_app.test_client() as c:
            response = c.get(f"/lines/{number}")
        return number, response.status_code, response.get_data(as_text=True)

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(fetch, range(40)))

    assert len(results) == 40
    for number, status, body in results:
        assert status == 200
        assert body == expected[number]


def test_create_app_from_environment(tmp_path, monkeypatch, restore_loggers):
    (tmp_path / "data.txt").write_bytes(CONTENT)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DATA_FILE_PATH", "data.txt")
    monkeypatch.setenv("FORCE_DISK_INDEX", "1")

    flask_app = server.create_app()
    response = flask_app.test_client().get("/lines/3")
    assert response.get_data(as_text=True) == "Third line"
    assert (tmp_path / "data.txt.index").stat().st_size == 4 * 8
    assert (tmp_path / "logs" / "server.log").exists()

    flask_app.test_client().get("/lines/3")
    for handler in logging.getLogger("access").handlers:
        handler.flush()
    assert "GET /lines/3 -> 200" in (tmp_path / "logs" / "access.log").read_text()


def test_missing_data_file_path_exits(monkeypatch):
    monkeypatch.delenv("DATA_FILE_PATH", raising=False)
    with pytest.raises(SystemExit) as exc:
        server.create_app()
    assert exc.value.code == 1


def test_path_outside_working_dir_exits(tmp_path, monkeypatch, restore_loggers):
    outside = tmp_path / "outside.txt"
    outside.write_bytes(CONTENT)
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    monkeypatch.setenv("DATA_FILE_PATH", str(outside))
    with pytest.raises(SystemExit):
        server.create_app()


def test_missing_data_file_exits(tmp_path, monkeypatch, restore_loggers):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DATA_FILE_PATH", "missing.txt")
    with pytest.raises(SystemExit):
        server.create_app()


def test_bad_config_exits(tmp_path, monkeypatch, restore_loggers):
    (tmp_path / "data.txt").write_bytes(CONTENT)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DATA_FILE_PATH", "data.txt")
    monkeypatch.setenv("MEMORY_THRESHOLD_BYTES", "plenty")
    with pytest.raises(SystemExit):
        server.create_app()


def test_init_worker_reconfigures_loggers(tmp_path, monkeypatch, restore_loggers):
    monkeypatch.chdir(tmp_path)
    server.init_worker()
    server.init_worker()
    assert len(logging.getLogger("server").handlers) == 2
    assert len(logging.getLogger("access").handlers) == 1


def test_generate_dummy_output_is_indexable(tmp_path, monkeypatch, capsys):
    output = tmp_path / "dummy.txt"
    monkeypatch.setattr("sys.argv", ["generate_dummy.py", "250", str(output)])
    generate_dummy.main()
    assert "Generated 250 lines" in capsys.readouterr().out

    index = LineIndex(str(output))
    assert index.line_count == 250
    assert index.get_line(1) == b"Line 1: "
    assert index.get_line(3) == b"Line 3: xx"
    assert index.get_line(100) == b""
