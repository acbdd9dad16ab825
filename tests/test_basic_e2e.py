"""Basic smoke tests for fieldprop.

Quick sanity checks for the package surface and init()/reset().
"""

import logging
import os
import unittest
from unittest import mock

import pytest

import fieldprop
from fieldprop import runtime_config
from fieldprop.errors import ConfigError

AWS_TRACE_ID = "Root=1-67891233-abcdef012345678912345678;Parent=463ac35c9f6413ad;Sampled=1"


def test_version_exposed():
    """Smoke test: version is accessible."""
    assert hasattr(fieldprop, '__version__')
    assert isinstance(fieldprop.__version__, str)
    assert len(fieldprop.__version__) > 0


def test_error_renders_details():
    assert str(ConfigError("extra field names must be strings", {"name": 3})) == (
        "extra field names must be strings (name=3)"
    )
    assert str(ConfigError("at least one extra field name is required")) == (
        "at least one extra field name is required"
    )


class TestInit(unittest.TestCase):
    """Test init()/reset() and the registered resolver."""

    def setUp(self):
        self.env = mock.patch.dict(os.environ, {}, clear=True)
        self.env.start()
        fieldprop.reset()

    def tearDown(self):
        fieldprop.reset()
        self.env.stop()

    def test_init_registers_factory_and_resolver(self):
        factory = fieldprop.init(extra_fields=["x-vcap-request-id", "X-Amzn-Trace-Id"])

        self.assertIs(runtime_config.get_propagation_factory(), factory)
        self.assertIsInstance(fieldprop.get_current_trace_context(), fieldprop.CurrentTraceContext)
        self.assertEqual(factory.names, ("x-vcap-request-id", "x-amzn-trace-id"))

    def test_current_uses_registered_resolver(self):
        factory = fieldprop.init(extra_fields=["x-amzn-trace-id"])
        context = factory.decorate(
            fieldprop.TraceContext(trace_id="0af7651916cd43dd8448eb211c80319c", span_id="b7ad6b7169203331")
        )

        self.assertIsNone(fieldprop.current("x-amzn-trace-id"))
        with fieldprop.get_current_trace_context().new_scope(context):
            self.assertIsNone(fieldprop.current("x-amzn-trace-id"))
            fieldprop.current("x-amzn-trace-id", AWS_TRACE_ID)
            self.assertEqual(fieldprop.current("X-AMZN-TRACE-ID"), AWS_TRACE_ID)

    def test_multiple_init_calls_idempotent(self):
        log_capture = []
        handler = logging.Handler()
        handler.emit = lambda record: log_capture.append(record)
        handler.setLevel(logging.WARNING)
        logger = logging.getLogger("fieldprop")
        logger.addHandler(handler)

        try:
            factory1 = fieldprop.init(extra_fields=["x-vcap-request-id"])
            factory2 = fieldprop.init(extra_fields=["x-other"])

            self.assertIs(factory2, factory1)
            self.assertTrue(any("more than once" in record.getMessage() for record in log_capture))
        finally:
            logger.removeHandler(handler)

    def test_reset_allows_reinit(self):
        factory1 = fieldprop.init(extra_fields=["x-vcap-request-id"])
        fieldprop.reset()
        factory2 = fieldprop.init(extra_fields=["x-other"])

        self.assertIsNot(factory2, factory1)
        self.assertEqual(factory2.names, ("x-other",))

    def test_init_reads_environment(self):
        with mock.patch.dict(os.environ, {"FIELDPROP_EXTRA_FIELDS": "x-vcap-request-id"}):
            factory = fieldprop.init(config_file="/nonexistent/fieldprop.toml")

        self.assertEqual(factory.names, ("x-vcap-request-id",))

    def test_init_without_fields_fails(self):
        with self.assertRaises(ConfigError):
            fieldprop.init(config_file="/nonexistent/fieldprop.toml")
        self.assertIsNone(runtime_config.get_propagation_factory())

    def test_failed_init_leaves_no_global_state(self):
        logger = logging.getLogger("fieldprop")
        previous = logger.level
        try:
            with self.assertRaises(ConfigError):
                fieldprop.init(extra_fields=["x-vcap-request-id", None], debug=True)

            self.assertFalse(runtime_config.get_debug())
            self.assertEqual(logger.level, previous)
            self.assertIsNone(runtime_config.get_propagation_factory())
            self.assertIsNone(runtime_config.get_current_trace_context())
        finally:
            logger.setLevel(previous)

    def test_init_rejects_invalid_environment(self):
        with mock.patch.dict(os.environ, {"FIELDPROP_DEBUG": "maybe"}):
            with self.assertRaises(ConfigError):
                fieldprop.init(extra_fields=["x-vcap-request-id"], config_file="/nonexistent/fieldprop.toml")

    def test_init_debug_sets_logger_level(self):
        logger = logging.getLogger("fieldprop")
        previous = logger.level
        try:
            fieldprop.init(extra_fields=["x-vcap-request-id"], debug=True)

            self.assertTrue(runtime_config.get_debug())
            self.assertEqual(logger.level, logging.DEBUG)
        finally:
            logger.setLevel(previous)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
