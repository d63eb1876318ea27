import logging

import pytest

from mazegen_lib.log_utils import RichLogFormatter, resolve_topics, setup_logging


def make_record(name, msg, level=logging.INFO, **extra):
    record = logging.LogRecord(name, level, __file__, 1, msg, None, None)
    record.__dict__.update(extra)
    return record


def test_formatter_prefixes_every_line():
    out = RichLogFormatter().format(make_record("mazegen.edges", "one\ntwo"))
    assert out.split("\n") == ["INFO :edges   : one", "INFO :edges   : two"]


def test_formatter_leaves_raw_records_alone():
    out = RichLogFormatter().format(make_record("mazegen.generate", "█S █", raw=True))
    assert out == "█S █"


def test_color_formatter_adds_escape_codes():
    out = RichLogFormatter(use_color=True).format(
        make_record("mazegen.path", "hi", level=logging.WARNING)
    )
    assert "\033[" in out
    assert out.endswith("hi")


@pytest.mark.parametrize(
    "topics, expected",
    [
        (None, set()),
        ("", set()),
        ("edges", {"edges"}),
        ("path, render", {"path", "render"}),
        ("gen", {"generate"}),
        ("nope", set()),
    ],
)
def test_resolve_topics(topics, expected):
    assert resolve_topics(topics) == expected


def test_resolve_all_topics():
    assert "topology" in resolve_topics("all")
    assert len(resolve_topics("all")) == 10


def test_setup_logging_enables_debug_topics(tmp_path):
    log_file = tmp_path / "run.log"
    setup_logging(logging.INFO, debug_topics="edges", log_file=str(log_file))
    try:
        root = logging.getLogger("mazegen")
        assert root.level == logging.INFO
        assert len(root.handlers) == 2
        assert logging.getLogger("mazegen.edges").level == logging.DEBUG

        logging.getLogger("mazegen.edges").debug("edge detail")
        for h in root.handlers:
            h.flush()
        assert "edge detail" in log_file.read_text(encoding="utf-8")
    finally:
        for h in logging.getLogger("mazegen").handlers[:]:
            logging.getLogger("mazegen").removeHandler(h)
            h.close()
        logging.getLogger("mazegen.edges").setLevel(logging.NOTSET)
