import io
import json
import logging

import numpy as np

from population_fit.data.curve_writer import CsvCurveLogger
from population_fit.data.loader import load_values
from population_fit.interfaces.fit_logger import LoggerFitLogger, NullFitLogger
from population_fit.utils.logging import JSONFormatter, configure_logging, get_logger


def test_json_formatter_includes_context_fields():
    record = logging.LogRecord("fit", logging.INFO, __file__, 1, "Fit N=%d", (2,), None)
    record.model = "jump_distance"
    record.order = 2
    payload = json.loads(JSONFormatter().format(record))
    assert payload["message"] == "Fit N=2"
    assert payload["level"] == "INFO"
    assert payload["model"] == "jump_distance"
    assert payload["order"] == 2
    assert payload["timestamp"].endswith("Z")


def test_configure_logging_adds_run_context():
    stream = io.StringIO()
    configure_logging(run_id="run-1", component="cli", stream=stream)
    try:
        get_logger("population_fit.test").info("hello")
        payload = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert payload["run_id"] == "run-1"
        assert payload["component"] == "cli"
    finally:
        logging.getLogger().handlers.clear()


def test_logger_fit_logger_forwards_printf_arguments(caplog):
    sink = LoggerFitLogger(logging.getLogger("population_fit.sink"), model="binomial")
    with caplog.at_level("DEBUG", logger="population_fit.sink"):
        sink.info("Fitted N=%d, p=%s", 3, "0.25")
        sink.debug("attempt %s", "1a")
    messages = [r.getMessage() for r in caplog.records]
    assert messages == ["Fitted N=3, p=0.25", "attempt 1a"]
    assert caplog.records[0].model == "binomial"


def test_null_fit_logger_discards_messages():
    NullFitLogger().info("ignored %d", 1)
    NullFitLogger().debug("ignored")


def test_data_io_fields_reach_json_output(tmp_path):
    source = tmp_path / "sizes.csv"
    source.write_text("1\n2\n3\n")
    stream = io.StringIO()
    configure_logging(stream=stream)
    try:
        load_values(source)
        CsvCurveLogger(tmp_path / "curves", 4).save_single_population_curve(np.zeros((2, 5)))
        loaded, saved = [json.loads(line) for line in stream.getvalue().strip().splitlines()[-2:]]
    finally:
        logging.getLogger().handlers.clear()

    assert loaded["path"] == str(source)
    assert loaded["count"] == 3
    assert saved["path"].endswith("single_population_curve.csv")
    assert saved["points"] == 5
